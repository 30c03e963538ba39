"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from commerce.domain import commerce


@commerce.event(part_of="Order")
class OrderCreated:
    """An order was placed from a cart; lines carry the price snapshot as JSON."""

    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    lines: Text(required=True)
    line_count: Integer(required=True)
    total_amount: Float(required=True)
    created_at: DateTime(required=True)


@commerce.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    cancelled_at: DateTime(required=True)


@commerce.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id: Identifier(required=True)
    total_amount: Float(required=True)
    paid_at: DateTime(required=True)


@commerce.event(part_of="Order")
class OrderPaymentFailed:
    __version__ = 1

    order_id: Identifier(required=True)
    reason: String()
    failed_at: DateTime(required=True)
