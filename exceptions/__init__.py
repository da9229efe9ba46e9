"""
Custom exceptions for the preorder pricing service.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── CartException
│   └── InvalidCartError
│       ├── EmptyCartError
│       ├── UnknownProductError
│       └── InvalidQuantityError
└── ComboException
    ├── InvalidConfigurationError
    └── ComputationBoundExceeded

Usage:
------
The pricing engine raises specific exceptions:
    raise UnknownProductError(product_id="p1")

API handlers translate them into localized responses:
    try:
        breakdown = await ComboService.get_pricing_breakdown(items, session)
    except StorefrontException as e:
        status_code, message = handle_service_error(e)
"""

from .base import StorefrontException
from .cart import CartException, InvalidCartError, EmptyCartError, UnknownProductError, InvalidQuantityError
from .combo import ComboException, InvalidConfigurationError, ComputationBoundExceeded

__all__ = [
    # Base
    'StorefrontException',

    # Cart
    'CartException',
    'InvalidCartError',
    'EmptyCartError',
    'UnknownProductError',
    'InvalidQuantityError',

    # Combo
    'ComboException',
    'InvalidConfigurationError',
    'ComputationBoundExceeded',
]
