"""FastAPI endpoints for the Ordering domain — cart, checkout and order history."""

from fastapi import APIRouter, Depends

from identity.api.dependencies import current_subject, get_pricing_policy, get_store, require_admin
from identity.tokens import Subject
from ordering.api.schemas import (
    AddToCartRequest,
    CartLineResponse,
    CartResponse,
    CheckoutRequest,
    ClearCartResponse,
    OrderResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.items import AddToCart, CartHandler, ClearCart, RemoveFromCart, UpdateCartQuantity
from ordering.order.history import OrderHistory
from ordering.order.placement import OrderPlacementHandler, PlaceOrder, ShippingInfo
from ordering.order.status import OrderStatusHandler, UpdateOrderStatus
from ordering.pricing import PricingPolicy
from shared.store import Store

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
def view_cart(
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
    policy: PricingPolicy = Depends(get_pricing_policy),
) -> CartResponse:
    return CartResponse.model_validate(CartHandler(store, policy).view_cart(subject.id))


@cart_router.post("/items", status_code=201, response_model=CartLineResponse)
def add_to_cart(
    body: AddToCartRequest,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> CartLineResponse:
    command = AddToCart(user_id=subject.id, product_id=body.product_id, quantity=body.quantity)
    return CartLineResponse.model_validate(CartHandler(store).add_to_cart(command))


@cart_router.put("/items/{line_id}", response_model=CartLineResponse)
def update_cart_quantity(
    line_id: str,
    body: UpdateCartQuantityRequest,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> CartLineResponse:
    command = UpdateCartQuantity(user_id=subject.id, line_id=line_id, new_quantity=body.new_quantity)
    return CartLineResponse.model_validate(CartHandler(store).update_cart_quantity(command))


@cart_router.delete("/items/{line_id}", response_model=StatusResponse)
def remove_from_cart(
    line_id: str,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> StatusResponse:
    CartHandler(store).remove_from_cart(RemoveFromCart(user_id=subject.id, line_id=line_id))
    return StatusResponse(status="removed")


@cart_router.delete("", response_model=ClearCartResponse)
def clear_cart(
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> ClearCartResponse:
    removed = CartHandler(store).clear_cart(ClearCart(user_id=subject.id))
    return ClearCartResponse(lines_removed=removed)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
def place_order(
    body: CheckoutRequest,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
    policy: PricingPolicy = Depends(get_pricing_policy),
) -> OrderResponse:
    command = PlaceOrder(
        user_id=subject.id,
        shipping=ShippingInfo(**body.shipping.model_dump()),
        payment_method=body.payment_method,
        payment_reference=body.payment_reference,
    )
    return OrderResponse.model_validate(OrderPlacementHandler(store, policy).place_order(command))


@order_router.get("", response_model=list[OrderResponse])
def list_orders(
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order) for order in OrderHistory(store).list_orders(subject.id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> OrderResponse:
    return OrderResponse.model_validate(OrderHistory(store).get_order(subject, order_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> OrderResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    return OrderResponse.model_validate(OrderStatusHandler(store).update_order_status(subject, command))


# ---------------------------------------------------------------------------
# Back-office Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_order_router.get("", response_model=list[OrderResponse])
def list_all_orders(store: Store = Depends(get_store)) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order) for order in OrderHistory(store).list_all_orders()]
