"""Application tests for order placement: pricing, snapshots and all-or-nothing checkout."""

from decimal import Decimal

import pytest
from catalogue.product.management import DeleteProduct, ProductHandler, UpdateProduct
from catalogue.product.product import Product
from identity.tokens import Subject
from ordering.cart.cart import CartLine
from ordering.cart.items import AddToCart, CartHandler
from ordering.order.history import OrderHistory
from ordering.order.order import Order, OrderStatus
from ordering.order.placement import OrderPlacementHandler, PlaceOrder, ShippingInfo
from shared.exceptions import EmptyCart, OutOfStock, ValidationFailed

SHIPPING = ShippingInfo(
    name="Jane Doe",
    phone="9876543210",
    address="12 MG Road",
    city="Bengaluru",
    postal_code="560001",
    email="Jane@Example.com",
    state="KA",
)


class InjectedFailure(RuntimeError):
    pass


def _fail_after(original):
    """Run the real step, then blow up before the transaction can commit."""

    def wrapper(self, *args, **kwargs):
        original(self, *args, **kwargs)
        raise InjectedFailure("injected")

    return wrapper


def _add(store, user_id, product, quantity):
    CartHandler(store).add_to_cart(AddToCart(user_id=user_id, product_id=product.id, quantity=quantity))


def _place(store, user_id, **overrides):
    shipping = overrides.pop("shipping", SHIPPING)
    command = PlaceOrder(user_id=user_id, shipping=shipping, **overrides)
    return OrderPlacementHandler(store).place_order(command)


def _snapshot(store, user_id):
    """Stock per product, the user's cart quantities and the number of orders."""
    with store.session() as session:
        stock = {p.name: p.stock for p in session.query(Product)}
        cart = {line.product.name: line.quantity for line in session.query(CartLine).filter_by(user_id=user_id)}
        orders = session.query(Order).count()
    return stock, cart, orders


@pytest.fixture()
def filled_cart(store, make_user, make_product):
    """A user with Mug x2 at 100 and Plate x1 at 200 in the cart."""
    user = make_user()
    mug = make_product(name="Mug", price="100", stock=5)
    plate = make_product(name="Plate", price="200", stock=3)
    _add(store, user.id, mug, 2)
    _add(store, user.id, plate, 1)
    return user, mug, plate


class TestPlaceOrder:
    def test_order_is_priced_and_recorded(self, store, filled_cart):
        user, _, _ = filled_cart

        order = _place(store, user.id)

        assert order.status == OrderStatus.PENDING.value
        assert order.subtotal == Decimal("400.00")
        assert order.tax == Decimal("72.00")
        assert order.shipping == Decimal("100.00")
        assert order.total == Decimal("572.00")
        assert [(line.name, line.quantity, line.line_total) for line in order.lines] == [
            ("Mug", 2, Decimal("200.00")),
            ("Plate", 1, Decimal("200.00")),
        ]

    def test_free_shipping_over_threshold(self, store, make_user, make_product):
        user = make_user()
        _add(store, user.id, make_product(name="Chair", price="300", stock=2), 2)

        order = _place(store, user.id)

        assert order.shipping == Decimal("0.00")
        assert order.total == Decimal("708.00")

    def test_stock_is_taken_and_cart_emptied(self, store, filled_cart):
        user, _, _ = filled_cart

        _place(store, user.id)

        stock, cart, orders = _snapshot(store, user.id)
        assert stock == {"Mug": 3, "Plate": 2}
        assert cart == {}
        assert orders == 1

    def test_shipping_details_are_captured(self, store, filled_cart):
        user, _, _ = filled_cart

        order = _place(store, user.id, payment_method="upi", payment_reference="upi-ref-1")

        assert order.shipping_name == "Jane Doe"
        assert order.shipping_email == "jane@example.com"
        assert order.shipping_postal_code == "560001"
        assert order.payment_method == "upi"
        assert order.payment_reference == "upi-ref-1"

    def test_empty_cart(self, store, make_user):
        with pytest.raises(EmptyCart):
            _place(store, make_user().id)

        assert _snapshot(store, "nobody")[2] == 0

    def test_stock_shortfall_names_the_product(self, store, filled_cart):
        user, mug, _ = filled_cart
        ProductHandler(store).update_product(UpdateProduct(product_id=mug.id, changes={"stock": 1}))
        before = _snapshot(store, user.id)

        with pytest.raises(OutOfStock) as exc:
            _place(store, user.id)

        assert "Mug" in exc.value.message
        assert exc.value.product_id == mug.id
        assert _snapshot(store, user.id) == before

    def test_invalid_shipping(self, store, filled_cart):
        user, _, _ = filled_cart
        shipping = ShippingInfo(name="", phone="not a phone", address="x", city="y", postal_code="1")

        with pytest.raises(ValidationFailed) as exc:
            _place(store, user.id, shipping=shipping)

        assert {"name", "phone"} <= set(exc.value.messages)

    def test_unknown_payment_method(self, store, filled_cart):
        user, _, _ = filled_cart
        with pytest.raises(ValidationFailed) as exc:
            _place(store, user.id, payment_method="barter")
        assert "payment_method" in exc.value.messages


class TestAllOrNothing:
    @pytest.mark.parametrize("step", ["_decrement_stock", "_record_order", "_clear_cart"])
    def test_failure_at_any_step_leaves_no_trace(self, store, filled_cart, monkeypatch, step):
        user, _, _ = filled_cart
        before = _snapshot(store, user.id)
        monkeypatch.setattr(OrderPlacementHandler, step, _fail_after(getattr(OrderPlacementHandler, step)))

        with pytest.raises(InjectedFailure):
            _place(store, user.id)

        assert _snapshot(store, user.id) == before

    def test_failure_midway_through_stock_decrements(self, store, filled_cart, monkeypatch):
        user, _, _ = filled_cart
        before = _snapshot(store, user.id)

        import ordering.order.placement as placement

        calls = []
        real_decrement = placement.decrement_stock

        def decrement_then_fail(session, product_id, quantity):
            calls.append(product_id)
            if len(calls) == 2:
                raise InjectedFailure("second decrement")
            real_decrement(session, product_id, quantity)

        monkeypatch.setattr(placement, "decrement_stock", decrement_then_fail)

        with pytest.raises(InjectedFailure):
            _place(store, user.id)

        assert len(calls) == 2
        assert _snapshot(store, user.id) == before

    def test_retry_after_failure_succeeds(self, store, filled_cart, monkeypatch):
        user, _, _ = filled_cart
        original = OrderPlacementHandler._clear_cart
        monkeypatch.setattr(OrderPlacementHandler, "_clear_cart", _fail_after(original))
        with pytest.raises(InjectedFailure):
            _place(store, user.id)

        monkeypatch.setattr(OrderPlacementHandler, "_clear_cart", original)
        order = _place(store, user.id)

        assert order.total == Decimal("572.00")
        assert _snapshot(store, user.id) == ({"Mug": 3, "Plate": 2}, {}, 1)


class TestOrderSnapshot:
    def test_catalogue_edits_do_not_change_history(self, store, filled_cart):
        user, mug, plate = filled_cart
        order = _place(store, user.id)

        ProductHandler(store).update_product(
            UpdateProduct(product_id=mug.id, changes={"name": "Big Mug", "price": Decimal("999")})
        )
        ProductHandler(store).delete_product(DeleteProduct(product_id=plate.id))

        stored = OrderHistory(store).get_order(Subject(id=user.id), order.id)
        assert [(line.name, line.unit_price) for line in stored.lines] == [
            ("Mug", Decimal("100.00")),
            ("Plate", Decimal("200.00")),
        ]
        assert stored.total == Decimal("572.00")
