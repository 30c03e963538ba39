"""Tests for Cart line merging, stock checks and clearing."""

import pytest
from commerce.cart.cart import Cart
from commerce.cart.events import CartCleared, CartItemAdded
from commerce.errors import InsufficientStockError
from protean.exceptions import ValidationError


def _make_cart():
    return Cart.open_for("user-1")


class TestAddItem:
    def test_first_add_creates_a_line(self):
        cart = _make_cart()
        line = cart.add_item("prod-1", 3, available=5)
        assert len(cart.lines) == 1
        assert line.quantity == 3
        assert str(line.product_id) == "prod-1"

    def test_adding_same_product_merges_quantities(self):
        cart = _make_cart()
        cart.add_item("prod-1", 2, available=10)
        line = cart.add_item("prod-1", 3, available=10)
        assert len(cart.lines) == 1
        assert line.quantity == 5

    def test_different_products_get_separate_lines(self):
        cart = _make_cart()
        cart.add_item("prod-1", 1, available=10)
        cart.add_item("prod-2", 1, available=10)
        assert len(cart.lines) == 2

    def test_add_beyond_stock_fails(self):
        cart = _make_cart()
        with pytest.raises(InsufficientStockError) as exc:
            cart.add_item("prod-1", 6, available=5)
        assert exc.value.available == 5
        assert exc.value.requested == 6
        assert len(cart.lines) == 0

    def test_merged_quantity_is_checked_against_stock(self):
        cart = _make_cart()
        cart.add_item("prod-1", 3, available=5)
        with pytest.raises(InsufficientStockError) as exc:
            cart.add_item("prod-1", 4, available=5)
        assert exc.value.available == 5
        assert exc.value.requested == 7
        assert cart.line_for("prod-1").quantity == 3

    def test_add_raises_cart_item_added(self):
        cart = _make_cart()
        cart.add_item("prod-1", 2, available=5)
        cart.add_item("prod-1", 1, available=5)
        event = cart._events[-1]
        assert isinstance(event, CartItemAdded)
        assert event.quantity_added == 1
        assert event.line_quantity == 3

    def test_non_positive_quantity_is_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("prod-1", 0, available=5)


class TestClear:
    def test_clear_removes_all_lines(self):
        cart = _make_cart()
        cart.add_item("prod-1", 1, available=5)
        cart.add_item("prod-2", 2, available=5)
        removed = cart.clear()
        assert removed == 2
        assert len(cart.lines) == 0
        assert isinstance(cart._events[-1], CartCleared)

    def test_clear_empty_cart_is_a_no_op(self):
        cart = _make_cart()
        assert cart.clear() == 0
        assert len(cart._events) == 0
