"""Product aggregate — price, stock and descriptive fields.

The product row is the single source of truth for available stock. Stock is
only ever changed by back-office edits and by the checkout's conditional
decrement (see ``catalogue.product.repository``).
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.exceptions import ValidationFailed
from shared.store import Base, new_id, utcnow

_CENT = Decimal("0.01")
# Largest amount the Numeric(12, 2) price column holds
MAX_PRICE = Decimal("9999999999.99")

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def _coerce_price(errors: dict, price):
    if price is None:
        errors.setdefault("price", []).append("Price is required")
        return None
    try:
        value = Decimal(str(price))
        if not value.is_finite():
            raise InvalidOperation(price)
        if value < 0:
            errors.setdefault("price", []).append("Price must be non-negative")
            return None
        # Raises for amounts with more digits than the decimal context holds
        value = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        errors.setdefault("price", []).append(f"Invalid price: {price!r}")
        return None
    if value > MAX_PRICE:
        errors.setdefault("price", []).append(f"Price must be at most {MAX_PRICE}")
        return None
    return value


def _coerce_stock(errors: dict, stock):
    if stock is None:
        errors.setdefault("stock", []).append("Stock is required")
        return None
    if isinstance(stock, bool) or not isinstance(stock, int):
        errors.setdefault("stock", []).append("Stock must be a whole number")
        return None
    if stock < 0:
        errors.setdefault("stock", []).append("Stock must be non-negative")
        return None
    return stock


def _check_name(errors: dict, name):
    if not name or not str(name).strip():
        errors.setdefault("name", []).append("Name is required")
    elif len(name) > 200:
        errors.setdefault("name", []).append("Name must be at most 200 characters")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200))
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    stock: Mapped[int] = mapped_column(Integer, default=0)
    short_desc: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, stock, short_desc=None, description=None, image=None):
        errors: dict[str, list[str]] = {}
        _check_name(errors, name)
        price = _coerce_price(errors, price)
        stock = _coerce_stock(errors, stock)
        if errors:
            raise ValidationFailed(errors)

        now = utcnow()
        return cls(
            id=new_id(),
            name=name.strip(),
            price=price,
            stock=stock,
            short_desc=short_desc,
            description=description,
            image=image,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Back-office edits
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=_UNSET,
        price=_UNSET,
        stock=_UNSET,
        short_desc=_UNSET,
        description=_UNSET,
        image=_UNSET,
    ):
        """Partial update: only the provided fields change."""
        errors: dict[str, list[str]] = {}
        if name is not _UNSET:
            _check_name(errors, name)
        if price is not _UNSET:
            price = _coerce_price(errors, price)
        if stock is not _UNSET:
            stock = _coerce_stock(errors, stock)
        if errors:
            raise ValidationFailed(errors)

        if name is not _UNSET:
            self.name = name.strip()
        if price is not _UNSET:
            self.price = price
        if stock is not _UNSET:
            self.stock = stock
        if short_desc is not _UNSET:
            self.short_desc = short_desc
        if description is not _UNSET:
            self.description = description
        if image is not _UNSET:
            self.image = image
        self.updated_at = utcnow()
