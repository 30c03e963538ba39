import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain

from commerce.gateway.port import GatewayReceipt, PaymentGateway
from commerce.settings import Settings


class StubGateway(PaymentGateway):
    """Records submissions; never reports an outcome on its own."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.error: Exception | None = None

    def fail_with(self, error: Exception) -> None:
        self.error = error

    def submit(self, order_id, amount, payment_id):
        self.calls.append({"order_id": order_id, "amount": amount, "payment_id": payment_id})
        if self.error is not None:
            raise self.error
        return GatewayReceipt(external_payment_id=f"pay_stub{len(self.calls):04d}", order_id=order_id)


@pytest.fixture(scope="session")
def commerce_bed():
    from commerce.domain import commerce

    bed = DomainFixture(commerce)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(commerce_bed):
    with commerce_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def settings():
    return Settings(
        environment="test",
        payment_delay_seconds=0.0,
        payment_success_rate=1.0,
        pending_payment_ttl_minutes=15,
    )


@pytest.fixture()
def gateway():
    return StubGateway()


@pytest.fixture()
def services(settings, gateway):
    from commerce.container import Commerce

    return Commerce(settings=settings, gateway=gateway)


@pytest.fixture()
def catalog(services):
    return services.catalog


@pytest.fixture()
def ledger(services):
    return services.ledger


@pytest.fixture()
def carts(services):
    return services.carts


@pytest.fixture()
def workflow(services):
    return services.orders


@pytest.fixture()
def payments(services):
    return services.payments


@pytest.fixture()
def reconciler(services):
    return services.reconciler


@pytest.fixture()
def make_product(catalog):
    def _make(name="Widget", price=10.0, stock=5, description=None):
        return catalog.add_product(name=name, price=price, stock=stock, description=description)

    return _make


@pytest.fixture()
def stock_of(catalog):
    def _stock(product):
        return catalog.get(product.id).stock

    return _stock
