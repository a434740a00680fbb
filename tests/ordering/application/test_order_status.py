"""Application tests for order history reads and status changes."""

from decimal import Decimal

import pytest
from catalogue.product.management import DeleteProduct, ProductHandler
from catalogue.product.product import Product
from identity.tokens import Subject
from ordering.cart.items import AddToCart, CartHandler
from ordering.order.history import OrderHistory
from ordering.order.order import OrderStatus
from ordering.order.placement import OrderPlacementHandler, PlaceOrder, ShippingInfo
from ordering.order.status import OrderStatusHandler, UpdateOrderStatus
from shared.exceptions import Forbidden, NotFound, ValidationFailed

SHIPPING = ShippingInfo(
    name="Jane Doe",
    phone="9876543210",
    address="12 MG Road",
    city="Bengaluru",
    postal_code="560001",
)

ADMIN = Subject(id="admin-1", roles=("admin",))


def _order_for(store, user_id, product, quantity=2):
    CartHandler(store).add_to_cart(AddToCart(user_id=user_id, product_id=product.id, quantity=quantity))
    return OrderPlacementHandler(store).place_order(PlaceOrder(user_id=user_id, shipping=SHIPPING))


def _set_status(store, subject, order, status):
    return OrderStatusHandler(store).update_order_status(subject, UpdateOrderStatus(order_id=order.id, status=status))


def _stock(store, product):
    with store.session() as session:
        return session.get(Product, product.id).stock


class TestOrderHistory:
    def test_list_own_orders(self, store, make_product):
        product = make_product(stock=10)
        first = _order_for(store, "user-1", product, 1)
        second = _order_for(store, "user-1", product, 1)
        _order_for(store, "user-2", product, 1)

        orders = OrderHistory(store).list_orders("user-1")

        assert {o.id for o in orders} == {first.id, second.id}

    def test_admin_lists_all_orders(self, store, make_product):
        product = make_product(stock=10)
        _order_for(store, "user-1", product, 1)
        _order_for(store, "user-2", product, 1)

        assert len(OrderHistory(store).list_all_orders()) == 2

    def test_owner_reads_order_with_lines(self, store, make_product):
        order = _order_for(store, "user-1", make_product(name="Mug", price="100"))

        fetched = OrderHistory(store).get_order(Subject(id="user-1"), order.id)

        assert fetched.lines[0].name == "Mug"
        assert fetched.total == Decimal("336.00")

    def test_other_user_is_forbidden(self, store, make_product):
        order = _order_for(store, "user-1", make_product())

        with pytest.raises(Forbidden):
            OrderHistory(store).get_order(Subject(id="user-2"), order.id)

    def test_admin_reads_any_order(self, store, make_product):
        order = _order_for(store, "user-1", make_product())
        assert OrderHistory(store).get_order(ADMIN, order.id).id == order.id

    def test_missing_order(self, store):
        with pytest.raises(NotFound):
            OrderHistory(store).get_order(ADMIN, "missing")


class TestAdminStatusChanges:
    def test_full_lifecycle(self, store, make_product):
        order = _order_for(store, "user-1", make_product())

        assert _set_status(store, ADMIN, order, "processing").status == OrderStatus.PROCESSING.value
        assert _set_status(store, ADMIN, order, "completed").status == OrderStatus.COMPLETED.value

    def test_disallowed_transition(self, store, make_product):
        order = _order_for(store, "user-1", make_product())

        with pytest.raises(ValidationFailed):
            _set_status(store, ADMIN, order, "completed")

    def test_terminal_state(self, store, make_product):
        order = _order_for(store, "user-1", make_product())
        _set_status(store, ADMIN, order, "cancelled")

        with pytest.raises(ValidationFailed):
            _set_status(store, ADMIN, order, "processing")

    def test_unknown_status(self, store, make_product):
        order = _order_for(store, "user-1", make_product())

        with pytest.raises(ValidationFailed) as exc:
            _set_status(store, ADMIN, order, "shipped")
        assert "status" in exc.value.messages

    def test_cancel_processing_order_restocks(self, store, make_product):
        product = make_product(stock=5)
        order = _order_for(store, "user-1", product, 2)
        _set_status(store, ADMIN, order, "processing")
        assert _stock(store, product) == 3

        _set_status(store, ADMIN, order, "cancelled")

        assert _stock(store, product) == 5

    def test_cancel_skips_deleted_products(self, store, make_product):
        kept = make_product(name="Kept", stock=5)
        gone = make_product(name="Gone", stock=5)
        CartHandler(store).add_to_cart(AddToCart(user_id="user-1", product_id=gone.id, quantity=1))
        order = _order_for(store, "user-1", kept, 2)
        ProductHandler(store).delete_product(DeleteProduct(product_id=gone.id))

        cancelled = _set_status(store, ADMIN, order, "cancelled")

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert _stock(store, kept) == 5


class TestOwnerStatusChanges:
    def test_owner_cancels_pending_order(self, store, make_product):
        product = make_product(stock=5)
        order = _order_for(store, "user-1", product, 2)

        cancelled = _set_status(store, Subject(id="user-1"), order, "cancelled")

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert _stock(store, product) == 5

    def test_owner_cannot_advance_order(self, store, make_product):
        order = _order_for(store, "user-1", make_product())

        with pytest.raises(Forbidden):
            _set_status(store, Subject(id="user-1"), order, "processing")

    def test_owner_cannot_cancel_processing_order(self, store, make_product):
        order = _order_for(store, "user-1", make_product())
        _set_status(store, ADMIN, order, "processing")

        with pytest.raises(Forbidden):
            _set_status(store, Subject(id="user-1"), order, "cancelled")

    def test_other_user_cannot_cancel(self, store, make_product):
        product = make_product(stock=5)
        order = _order_for(store, "user-1", product, 2)

        with pytest.raises(Forbidden):
            _set_status(store, Subject(id="user-2"), order, "cancelled")
        assert _stock(store, product) == 3
