"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from commerce.domain import commerce


@commerce.event(part_of="Payment")
class PaymentInitiated:
    """A payment record was opened and handed to the gateway."""

    __version__ = 1

    payment_id: Identifier(required=True)
    order_id: Identifier(required=True)
    amount: Float(required=True)
    initiated_at: DateTime(required=True)


@commerce.event(part_of="Payment")
class PaymentSucceeded:
    __version__ = 1

    payment_id: Identifier(required=True)
    order_id: Identifier(required=True)
    external_payment_id: String(required=True)
    succeeded_at: DateTime(required=True)


@commerce.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id: Identifier(required=True)
    order_id: Identifier(required=True)
    external_payment_id: String(required=True)
    message: String()
    failed_at: DateTime(required=True)
