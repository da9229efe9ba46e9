"""
Combo-related exceptions.
"""

from .base import StorefrontException


class ComboException(StorefrontException):
    """Base exception for combo-related errors."""
    pass


class InvalidConfigurationError(ComboException):
    """
    Raised when product or combo data violates pricing invariants.

    This is a data-integrity fault in the backend (negative price, combo without
    requirements, zero-quantity requirement), not a user input fault.
    """

    def __init__(self, entity: str, entity_id: str | None, reason: str):
        super().__init__(
            f"Invalid {entity} configuration ({entity_id}): {reason}",
            details={'entity': entity, 'entity_id': entity_id, 'reason': reason}
        )
        self.entity = entity
        self.entity_id = entity_id
        self.reason = reason


class ComputationBoundExceeded(ComboException):
    """
    Raised by the exhaustive combo search when the tuple space exceeds the cap.

    The pricing engine catches it and falls back to the greedy pass, so callers
    only ever see it in logs.
    """

    def __init__(self, tuple_count: int, limit: int):
        super().__init__(
            f"Combo search space of {tuple_count} tuples exceeds limit {limit}",
            details={'tuple_count': tuple_count, 'limit': limit}
        )
        self.tuple_count = tuple_count
        self.limit = limit
