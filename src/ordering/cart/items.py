"""Cart item management — commands and handler.

Every mutation re-checks the requested quantity against the product's live
stock, and quantity changes are applied as guarded single-row updates.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from catalogue.product.repository import get_product
from ordering.cart.cart import CartLine
from ordering.pricing import PriceBreakdown, PricedLine, PricingPolicy, calculate, round_money
from shared.exceptions import Forbidden, NotFound, OutOfStock, ValidationFailed
from shared.store import Store, new_id, utcnow

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AddToCart:
    user_id: str
    product_id: str
    quantity: int = 1


@dataclass(frozen=True)
class UpdateCartQuantity:
    user_id: str
    line_id: str
    new_quantity: int


@dataclass(frozen=True)
class RemoveFromCart:
    user_id: str
    line_id: str


@dataclass(frozen=True)
class ClearCart:
    user_id: str


@dataclass(frozen=True)
class CartLineView:
    id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    stock: int
    line_total: Decimal


@dataclass(frozen=True)
class CartView:
    user_id: str
    lines: list[CartLineView]
    summary: PriceBreakdown


def _find_line(session, user_id: str, product_id: str) -> CartLine | None:
    return session.scalars(
        select(CartLine).where(CartLine.user_id == user_id, CartLine.product_id == product_id)
    ).first()


def _require_positive(field_name: str, quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationFailed({field_name: ["Quantity must be a positive whole number"]})


class CartHandler:
    def __init__(self, store: Store, policy: PricingPolicy | None = None):
        self.store = store
        self.policy = policy or PricingPolicy()

    def add_to_cart(self, command: AddToCart) -> CartLine:
        """Add a product to the cart, or increase the quantity of its existing line."""
        _require_positive("quantity", command.quantity)

        with self.store.unit_of_work() as session:
            product = get_product(session, command.product_id)
            line = _find_line(session, command.user_id, product.id)

            current = line.quantity if line else 0
            wanted = current + command.quantity
            if wanted > product.stock:
                raise OutOfStock(
                    product_id=product.id,
                    requested=wanted,
                    available=product.stock,
                    name=product.name,
                )

            if line is None:
                now = utcnow()
                line = CartLine(
                    id=new_id(),
                    user_id=command.user_id,
                    product_id=product.id,
                    product=product,
                    quantity=command.quantity,
                    added_at=now,
                    updated_at=now,
                )
                session.add(line)
                try:
                    session.flush()
                except IntegrityError:
                    # Another request created the line for this product first
                    raise ValidationFailed(
                        {"product_id": ["This product was just added to the cart by another request, please retry"]}
                    ) from None
            else:
                result = session.execute(
                    update(CartLine)
                    .where(
                        CartLine.id == line.id,
                        CartLine.quantity + command.quantity <= product.stock,
                    )
                    .values(quantity=CartLine.quantity + command.quantity, updated_at=utcnow())
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise OutOfStock(
                        product_id=product.id,
                        requested=wanted,
                        available=product.stock,
                        name=product.name,
                    )
                session.refresh(line)

        logger.info(
            "cart_item_added",
            user_id=command.user_id,
            product_id=command.product_id,
            line_id=line.id,
            quantity=line.quantity,
        )
        return line

    def update_cart_quantity(self, command: UpdateCartQuantity) -> CartLine:
        _require_positive("new_quantity", command.new_quantity)

        with self.store.unit_of_work() as session:
            line = session.get(CartLine, command.line_id)
            if line is None:
                raise NotFound("Cart item not found", details={"line_id": command.line_id})
            if not line.belongs_to(command.user_id):
                raise Forbidden("Cart item belongs to another user")

            product = get_product(session, line.product_id)
            if command.new_quantity > product.stock:
                raise OutOfStock(
                    product_id=product.id,
                    requested=command.new_quantity,
                    available=product.stock,
                    name=product.name,
                )

            previous_quantity = line.quantity
            session.execute(
                update(CartLine)
                .where(CartLine.id == line.id, CartLine.user_id == command.user_id)
                .values(quantity=command.new_quantity, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            session.refresh(line)

        logger.info(
            "cart_quantity_updated",
            user_id=command.user_id,
            line_id=command.line_id,
            previous_quantity=previous_quantity,
            new_quantity=command.new_quantity,
        )
        return line

    def remove_from_cart(self, command: RemoveFromCart) -> None:
        with self.store.unit_of_work() as session:
            result = session.execute(
                delete(CartLine)
                .where(CartLine.id == command.line_id, CartLine.user_id == command.user_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFound("Cart item not found", details={"line_id": command.line_id})

        logger.info("cart_item_removed", user_id=command.user_id, line_id=command.line_id)

    def clear_cart(self, command: ClearCart) -> int:
        with self.store.unit_of_work() as session:
            removed = clear_lines(session, command.user_id)

        logger.info("cart_cleared", user_id=command.user_id, lines_removed=removed)
        return removed

    def view_cart(self, user_id: str) -> CartView:
        with self.store.session() as session:
            lines = load_lines(session, user_id)
            views = [
                CartLineView(
                    id=line.id,
                    product_id=line.product_id,
                    name=line.product.name,
                    unit_price=line.product.price,
                    quantity=line.quantity,
                    stock=line.product.stock,
                    line_total=round_money(line.product.price * line.quantity),
                )
                for line in lines
            ]

        summary = calculate((PricedLine(v.unit_price, v.quantity) for v in views), self.policy)
        return CartView(user_id=user_id, lines=views, summary=summary)


def load_lines(session, user_id: str) -> list[CartLine]:
    """The user's cart lines with their products, oldest first."""
    return list(
        session.scalars(
            select(CartLine).where(CartLine.user_id == user_id).order_by(CartLine.added_at, CartLine.id)
        ).unique()
    )


def clear_lines(session, user_id: str) -> int:
    result = session.execute(
        delete(CartLine).where(CartLine.user_id == user_id).execution_options(synchronize_session=False)
    )
    return result.rowcount
