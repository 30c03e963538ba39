"""Error taxonomy for the commerce workflow.

All errors build on Protean's exceptions so that code catching the framework
types (``ValidationError``, ``ObjectNotFoundError``) also sees these. Every
error carries a ``messages`` dict keyed by the offending field.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class NotFoundError(ObjectNotFoundError):
    """A product, order, cart or payment does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = str(identifier)
        super().__init__({"_entity": [f"{kind} not found: {identifier}"]})


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the stock available for a product."""

    def __init__(self, product_id: str, available: int, requested: int) -> None:
        self.product_id = str(product_id)
        self.available = available
        self.requested = requested
        super().__init__(
            {"quantity": [f"Insufficient stock available. Available: {available}, requested: {requested}"]}
        )


class InvalidStateError(ValidationError):
    """An operation is not allowed from the entity's current status."""

    def __init__(self, message: str, current_status: str) -> None:
        self.current_status = current_status
        super().__init__({"status": [message]})


class DuplicatePaymentError(ValidationError):
    def __init__(self, order_id: str) -> None:
        self.order_id = str(order_id)
        super().__init__({"order_id": [f"Payment already exists for this order: {order_id}"]})


class EmptyCartError(ValidationError):
    def __init__(self, user_id: str) -> None:
        self.user_id = str(user_id)
        super().__init__({"cart": [f"Cart is empty for user: {user_id}"]})
