"""
Error Handler Utility for API routes

Provides centralized error handling for the pricing API with:
- Localized error messages
- Consistent HTTP status codes per exception type
- Logging for debugging

Usage in routes:
    from utils.error_handler import handle_service_error

    try:
        result = await ComboService.get_pricing_breakdown(items, session)
    except StorefrontException as e:
        status_code, message = handle_service_error(e, lang="vi")
"""

import logging
from typing import Optional

from fastapi import status

from enums.text_entity import TextEntity
from exceptions import (
    StorefrontException,
    InvalidCartError,
    EmptyCartError,
    UnknownProductError,
    InvalidQuantityError,
    InvalidConfigurationError,
)
from utils.localizator import Localizator

# Exception type -> (HTTP status, entity, localization key)
ERROR_MAPPING: dict[type[StorefrontException], tuple[int, TextEntity, str]] = {
    # Cart exceptions (caller faults)
    EmptyCartError: (status.HTTP_400_BAD_REQUEST, TextEntity.USER, "error_empty_cart"),
    UnknownProductError: (status.HTTP_400_BAD_REQUEST, TextEntity.USER, "error_unknown_product"),
    InvalidQuantityError: (status.HTTP_400_BAD_REQUEST, TextEntity.USER, "error_invalid_quantity"),
    InvalidCartError: (status.HTTP_400_BAD_REQUEST, TextEntity.USER, "error_invalid_cart"),

    # Combo exceptions (backend data faults, details stay in the [DataIntegrity] log)
    InvalidConfigurationError: (status.HTTP_500_INTERNAL_SERVER_ERROR, TextEntity.COMMON, "error_invalid_configuration"),
}


def handle_service_error(exception: StorefrontException, lang: Optional[str] = None) -> tuple[int, str]:
    """
    Convert service exception to HTTP status and localized message.

    Args:
        exception: The custom exception raised by a service
        lang: Optional language code, defaults to config.LANGUAGE

    Returns:
        Tuple (HTTP status code, localized message)

    Example:
        try:
            breakdown = await ComboService.get_pricing_breakdown(items, session)
        except UnknownProductError as e:
            status_code, message = handle_service_error(e)  # (400, "Không tìm thấy sản phẩm p1")
    """
    mapping = ERROR_MAPPING.get(type(exception))

    if not mapping:
        # Unknown exception type - use generic error message
        logging.error(f"Unmapped exception type: {type(exception).__name__} - {exception}")
        return status.HTTP_500_INTERNAL_SERVER_ERROR, Localizator.get_text(TextEntity.COMMON, "error_unexpected", lang=lang)

    status_code, entity, localization_key = mapping
    if status_code >= 500:
        logging.error(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    else:
        logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    # Exception attributes available for message formatting
    exception_data = dict(exception.details)
    for attribute in ('product_id', 'quantity', 'reason'):
        if hasattr(exception, attribute):
            exception_data[attribute] = getattr(exception, attribute)

    try:
        return status_code, Localizator.get_text(entity, localization_key, lang=lang).format(**exception_data)
    except KeyError as e:
        # Missing formatting parameter - log and return without formatting
        logging.error(f"Missing format parameter in error message: {e}")
        return status_code, Localizator.get_text(entity, localization_key, lang=lang)
