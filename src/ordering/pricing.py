"""Pricing calculator — subtotal, tax, shipping and total for a set of lines.

Pure and deterministic. Every amount is rounded half-up to two decimal
places with ``decimal.Decimal``:

    subtotal = sum(unit_price * quantity)
    tax      = subtotal * tax_rate
    shipping = 0 if subtotal > free_shipping_threshold else flat_shipping_fee
    total    = subtotal + tax + shipping

An empty set of lines prices at zero with no shipping charge.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from shared.config import Config

_CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(amount) -> Decimal:
    return Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingPolicy:
    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("500")
    flat_shipping_fee: Decimal = Decimal("100")

    @classmethod
    def from_config(cls, config: Config) -> "PricingPolicy":
        return cls(
            tax_rate=config.tax_rate,
            free_shipping_threshold=config.free_shipping_threshold,
            flat_shipping_fee=config.flat_shipping_fee,
        )


@dataclass(frozen=True)
class PricedLine:
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def calculate(lines: Iterable[PricedLine], policy: PricingPolicy | None = None) -> PriceBreakdown:
    policy = policy or PricingPolicy()
    lines = list(lines)
    if not lines:
        return PriceBreakdown(subtotal=ZERO, tax=ZERO, shipping=ZERO, total=ZERO)

    subtotal = round_money(sum((Decimal(line.unit_price) * line.quantity for line in lines), Decimal(0)))
    tax = round_money(subtotal * policy.tax_rate)
    shipping = ZERO if subtotal > policy.free_shipping_threshold else round_money(policy.flat_shipping_fee)
    total = round_money(subtotal + tax + shipping)
    return PriceBreakdown(subtotal=subtotal, tax=tax, shipping=shipping, total=total)
