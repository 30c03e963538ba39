"""Tests for Product stock movements and price changes."""

import pytest
from commerce.catalog.events import ProductAdded, ProductPriceChanged, StockReleased, StockReserved
from commerce.catalog.product import Product
from commerce.errors import InsufficientStockError
from protean.exceptions import ValidationError


def _make_product(**overrides):
    defaults = {"name": "Desk Lamp", "price": 24.5, "stock": 5}
    defaults.update(overrides)
    return Product.add(**defaults)


class TestProductAdd:
    def test_add_sets_fields(self):
        product = _make_product(description="Warm white")
        assert product.name == "Desk Lamp"
        assert product.price == 24.5
        assert product.stock == 5
        assert product.description == "Warm white"
        assert product.created_at is not None

    def test_add_raises_product_added(self):
        product = _make_product()
        event = product._events[-1]
        assert isinstance(event, ProductAdded)
        assert event.product_id == str(product.id)
        assert event.stock == 5

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(price=-1.0)

    def test_negative_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(stock=-1)


class TestReserve:
    def test_reserve_decrements_stock(self):
        product = _make_product(stock=5)
        product.reserve(3)
        assert product.stock == 2

    def test_reserve_everything_leaves_zero(self):
        product = _make_product(stock=5)
        product.reserve(5)
        assert product.stock == 0

    def test_reserve_raises_stock_reserved(self):
        product = _make_product(stock=5)
        product._events.clear()
        product.reserve(2)
        event = product._events[-1]
        assert isinstance(event, StockReserved)
        assert event.quantity == 2
        assert event.remaining == 3

    def test_reserve_more_than_available_fails(self):
        product = _make_product(stock=2)
        with pytest.raises(InsufficientStockError) as exc:
            product.reserve(3)
        assert exc.value.available == 2
        assert exc.value.requested == 3
        assert exc.value.product_id == str(product.id)

    def test_failed_reserve_leaves_stock_unchanged(self):
        product = _make_product(stock=2)
        product._events.clear()
        with pytest.raises(InsufficientStockError):
            product.reserve(3)
        assert product.stock == 2
        assert len(product._events) == 0

    def test_insufficient_stock_is_a_validation_error(self):
        product = _make_product(stock=0)
        with pytest.raises(ValidationError) as exc:
            product.reserve(1)
        assert "quantity" in exc.value.messages

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity_is_rejected(self, quantity):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.reserve(quantity)


class TestRelease:
    def test_release_increments_stock(self):
        product = _make_product(stock=1)
        product.release(4)
        assert product.stock == 5

    def test_release_has_no_upper_bound(self):
        product = _make_product(stock=5)
        product.release(100)
        assert product.stock == 105

    def test_release_raises_stock_released(self):
        product = _make_product(stock=1)
        product._events.clear()
        product.release(2)
        event = product._events[-1]
        assert isinstance(event, StockReleased)
        assert event.remaining == 3

    def test_zero_release_is_rejected(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.release(0)


class TestChangePrice:
    def test_change_price(self):
        product = _make_product(price=10.0)
        product._events.clear()
        product.change_price(12.0)
        assert product.price == 12.0
        event = product._events[-1]
        assert isinstance(event, ProductPriceChanged)
        assert event.previous_price == 10.0
        assert event.new_price == 12.0

    def test_same_price_raises_no_event(self):
        product = _make_product(price=10.0)
        product._events.clear()
        product.change_price(10.0)
        assert len(product._events) == 0

    def test_negative_price_is_rejected(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.change_price(-5.0)
