"""Order placement — converts the caller's cart into an order.

Flow:
    1. Load the cart lines with their products (EmptyCart if there are none)
    2. Re-check every line against live stock (OutOfStock names the first offender)
    3. Price the lines
    4. In one transaction: take the stock, record the order with its line
       snapshots, empty the cart

The three effects of step 4 share the unit of work, so any failure rolls all
of them back. Stock is taken with a guarded UPDATE; if another checkout got
there first the guard matches nothing and the whole attempt aborts with
OutOfStock. Nothing is retried here: a caller may re-run the placement from
the top against fresh state.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from sqlalchemy.orm import Session

from catalogue.product.repository import decrement_stock
from identity.shared.email import is_valid_email, normalize_email
from identity.shared.phone import is_valid_mobile
from ordering.cart.cart import CartLine
from ordering.cart.items import clear_lines, load_lines
from ordering.order.order import Order, OrderLine, OrderStatus
from ordering.pricing import PriceBreakdown, PricedLine, PricingPolicy, calculate, round_money
from shared.exceptions import EmptyCart, OutOfStock, ValidationFailed
from shared.store import Store, new_id, utcnow

logger = structlog.get_logger(__name__)


class PaymentMethod(Enum):
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    COD = "cod"


@dataclass(frozen=True)
class ShippingInfo:
    name: str
    phone: str
    address: str
    city: str
    postal_code: str
    email: str | None = None
    state: str | None = None

    def validate(self) -> None:
        errors: dict[str, list[str]] = {}
        for field_name in ("name", "phone", "address", "city", "postal_code"):
            value = getattr(self, field_name)
            if not value or not str(value).strip():
                errors.setdefault(field_name, []).append(f"{field_name.replace('_', ' ').capitalize()} is required")

        if self.phone and "phone" not in errors and not is_valid_mobile(self.phone):
            errors.setdefault("phone", []).append(f"Invalid phone number: {self.phone!r}")
        if self.email and not is_valid_email(normalize_email(self.email)):
            errors.setdefault("email", []).append(f"Invalid email address: {self.email!r}")

        if errors:
            raise ValidationFailed(errors)


@dataclass(frozen=True)
class PlaceOrder:
    user_id: str
    shipping: ShippingInfo
    payment_method: str = PaymentMethod.CARD.value
    payment_reference: str | None = None


class OrderPlacementHandler:
    def __init__(self, store: Store, policy: PricingPolicy | None = None):
        self.store = store
        self.policy = policy or PricingPolicy()

    def place_order(self, command: PlaceOrder) -> Order:
        self._validate(command)

        with self.store.unit_of_work() as session:
            lines = load_lines(session, command.user_id)
            if not lines:
                raise EmptyCart()

            for line in lines:
                if line.quantity > line.product.stock:
                    raise OutOfStock(
                        product_id=line.product_id,
                        requested=line.quantity,
                        available=line.product.stock,
                        name=line.product.name,
                    )

            pricing = calculate((PricedLine(line.product.price, line.quantity) for line in lines), self.policy)

            self._decrement_stock(session, lines)
            order = self._record_order(session, command, lines, pricing)
            self._clear_cart(session, command.user_id)

        logger.info(
            "order_placed",
            order_id=order.id,
            user_id=command.user_id,
            lines=len(order.lines),
            total=str(order.total),
        )
        return order

    def _validate(self, command: PlaceOrder) -> None:
        command.shipping.validate()
        if command.payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationFailed(
                {"payment_method": [f"Payment method must be one of: {', '.join(m.value for m in PaymentMethod)}"]}
            )

    def _decrement_stock(self, session: Session, lines: list[CartLine]) -> None:
        for line in lines:
            try:
                decrement_stock(session, line.product_id, line.quantity)
            except OutOfStock:
                logger.info("stock_taken_concurrently", product_id=line.product_id, requested=line.quantity)
                raise OutOfStock(
                    product_id=line.product_id,
                    requested=line.quantity,
                    name=line.product.name,
                ) from None

    def _record_order(
        self,
        session: Session,
        command: PlaceOrder,
        lines: list[CartLine],
        pricing: PriceBreakdown,
    ) -> Order:
        shipping = command.shipping
        now = utcnow()
        order = Order(
            id=new_id(),
            user_id=command.user_id,
            status=OrderStatus.PENDING.value,
            subtotal=pricing.subtotal,
            tax=pricing.tax,
            shipping=pricing.shipping,
            total=pricing.total,
            shipping_name=shipping.name.strip(),
            shipping_email=normalize_email(shipping.email) if shipping.email else None,
            shipping_phone=shipping.phone.strip(),
            shipping_address=shipping.address.strip(),
            shipping_city=shipping.city.strip(),
            shipping_state=shipping.state,
            shipping_postal_code=shipping.postal_code.strip(),
            payment_method=command.payment_method,
            payment_reference=command.payment_reference,
            created_at=now,
            updated_at=now,
        )
        order.lines = [
            OrderLine(
                id=new_id(),
                position=position,
                product_id=line.product_id,
                name=line.product.name,
                unit_price=line.product.price,
                quantity=line.quantity,
                line_total=round_money(line.product.price * line.quantity),
            )
            for position, line in enumerate(lines)
        ]
        session.add(order)
        session.flush()
        return order

    def _clear_cart(self, session: Session, user_id: str) -> None:
        clear_lines(session, user_id)
