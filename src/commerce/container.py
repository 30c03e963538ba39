"""Composition root: builds the commerce components and wires them together.

One ``Commerce`` instance owns the shared locks, the gateway and a logger
that is handed down to every component.
"""

import structlog

from commerce.cart.service import CartService
from commerce.catalog.catalog import ProductCatalog
from commerce.catalog.ledger import StockLedger
from commerce.domain import commerce
from commerce.gateway import build_gateway
from commerce.gateway.port import PaymentGateway, PaymentNotification
from commerce.order.workflow import OrderWorkflow
from commerce.payment.reconciler import PaymentReconciler
from commerce.payment.service import PaymentService
from commerce.settings import Settings
from commerce.utils.locks import KeyedLock


class Commerce:
    def __init__(
        self,
        settings: Settings | None = None,
        logger=None,
        gateway: PaymentGateway | None = None,
        domain=commerce,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.logger = logger or structlog.get_logger("commerce")
        self.domain = domain

        product_locks = KeyedLock()
        self.catalog = ProductCatalog(logger=self._logger_for("catalog"), locks=product_locks)
        self.ledger = StockLedger(logger=self._logger_for("stock_ledger"), locks=product_locks)
        self.carts = CartService(logger=self._logger_for("cart"))
        self.orders = OrderWorkflow(self.ledger, self.carts, logger=self._logger_for("order_workflow"))
        self.reconciler = PaymentReconciler(
            self.orders,
            logger=self._logger_for("payment_reconciler"),
            pending_ttl_minutes=self.settings.pending_payment_ttl_minutes,
        )
        self.gateway = gateway or build_gateway(
            self.settings,
            self.deliver_notification,
            logger=self._logger_for("gateway"),
        )
        self.payments = PaymentService(self.orders, self.gateway, logger=self._logger_for("payments"))

    def _logger_for(self, component: str):
        return self.logger.bind(component=component)

    def deliver_notification(self, notification: PaymentNotification):
        """Webhook entry point for in-process gateways running on their own threads."""
        with self.domain.domain_context():
            return self.reconciler.handle_webhook(notification)
