"""Error taxonomy shared by every bounded context.

Handlers raise these; the web layer translates them into an error envelope
and an HTTP status code (see ``app.py``).
"""

from typing import Any


class StorefrontError(Exception):
    """Base class for all expected business failures."""

    kind = "Error"
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        error = {"kind": self.kind, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class Unauthorized(StorefrontError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(StorefrontError):
    kind = "Forbidden"
    status_code = 403


class NotFound(StorefrontError):
    kind = "NotFound"
    status_code = 404


class OutOfStock(StorefrontError):
    """Requested quantity exceeds the product's live stock."""

    kind = "OutOfStock"
    status_code = 409

    def __init__(self, product_id: str, requested: int, available: int | None = None, name: str | None = None):
        label = name or product_id
        if available is None:
            message = f"Not enough stock available for {label}"
        else:
            message = f"Not enough stock available for {label}: requested {requested}, available {available}"
        super().__init__(
            message,
            details={"product_id": product_id, "requested": requested, "available": available},
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class EmptyCart(StorefrontError):
    kind = "EmptyCart"
    status_code = 400

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class ValidationFailed(StorefrontError):
    """Malformed input.

    Carries a mapping of field name to a list of messages, e.g.
    ``ValidationFailed({"quantity": ["Quantity must be positive"]})``.
    """

    kind = "ValidationFailed"
    status_code = 400

    def __init__(self, messages: dict[str, list[str]]):
        self.messages = messages
        summary = "; ".join(f"{field}: {', '.join(errors)}" for field, errors in messages.items())
        super().__init__(summary or "Validation failed", details=messages)
