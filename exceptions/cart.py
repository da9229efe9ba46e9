"""
Cart-related exceptions.

These are caller faults: the cart sent for pricing is malformed. They are
surfaced as 4xx responses and never retried.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class InvalidCartError(CartException):
    """Raised when a cart cannot be priced."""

    def __init__(self, reason: str, details: dict | None = None):
        super().__init__(f"Invalid cart: {reason}", details=details)
        self.reason = reason


class EmptyCartError(InvalidCartError):
    """Raised when pricing is requested for a cart without lines."""

    def __init__(self):
        super().__init__("cart has no items")


class UnknownProductError(InvalidCartError):
    """Raised when a cart line references a product missing from the catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            f"product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class InvalidQuantityError(InvalidCartError):
    """Raised when a cart line quantity is not a positive integer."""

    def __init__(self, product_id: str, quantity):
        super().__init__(
            f"quantity {quantity} for product {product_id} must be a positive integer",
            details={'product_id': product_id, 'quantity': quantity}
        )
        self.product_id = product_id
        self.quantity = quantity
