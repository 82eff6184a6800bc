"""Error kinds raised by the ordering core.

Every failure the core signals is an ``OrderingError`` subclass carrying a
stable ``kind`` plus structured ``context`` (entity ids, current and
requested state, quantities). Presentation layers map on ``kind``, never
on the message text.
"""

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATUS = "INVALID_STATUS"
    NO_OP = "NO_OP"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    INELIGIBLE_STATE = "INELIGIBLE_STATE"
    WRONG_STATE = "WRONG_STATE"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    WINDOW_EXPIRED = "WINDOW_EXPIRED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INTERNAL = "INTERNAL"


class OrderingError(Exception):
    """Base exception for all ordering errors."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, **context):
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "context": {key: _plain(value) for key, value in self.context.items()},
        }


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    return value


class ValidationError(OrderingError):
    """Malformed or missing input. Raised before storage is touched."""

    kind = ErrorKind.VALIDATION


class InvalidInput(ValidationError):
    """Negative price, quantity or tax rate handed to the pricing engine."""


class NotFound(OrderingError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id, message: str | None = None):
        super().__init__(message or f"{entity} {entity_id} not found", entity=entity, entity_id=entity_id)


class Forbidden(OrderingError):
    kind = ErrorKind.FORBIDDEN


class InvalidStatus(OrderingError):
    kind = ErrorKind.INVALID_STATUS


class NoOp(OrderingError):
    kind = ErrorKind.NO_OP


class IllegalTransition(OrderingError):
    kind = ErrorKind.ILLEGAL_TRANSITION


class IneligibleState(OrderingError):
    kind = ErrorKind.INELIGIBLE_STATE


class WrongState(OrderingError):
    kind = ErrorKind.WRONG_STATE


class AlreadyProcessed(OrderingError):
    kind = ErrorKind.ALREADY_PROCESSED


class WindowExpired(OrderingError):
    kind = ErrorKind.WINDOW_EXPIRED


class InsufficientStock(OrderingError):
    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id, requested: int, available: int | None = None):
        super().__init__(
            f"Insufficient stock for product {product_id}",
            product_id=product_id,
            requested=requested,
            available=available,
        )


class InternalError(OrderingError):
    """Unexpected storage failure."""

    kind = ErrorKind.INTERNAL
