"""Dashboard statistics for the back-office."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select

from catalogue.product.product import Product
from identity.user.user import User
from ordering.order.order import Order, OrderStatus
from ordering.pricing import round_money
from shared.store import Store


@dataclass(frozen=True)
class StoreStats:
    total_products: int
    total_orders: int
    total_users: int
    total_revenue: Decimal


class StatsQuery:
    def __init__(self, store: Store):
        self.store = store

    def collect(self) -> StoreStats:
        with self.store.session() as session:
            total_products = session.scalar(select(func.count()).select_from(Product))
            total_orders = session.scalar(select(func.count()).select_from(Order))
            total_users = session.scalar(select(func.count()).select_from(User))
            # Cancelled orders do not count towards revenue
            revenue = session.scalar(
                select(func.coalesce(func.sum(Order.total), 0)).where(Order.status != OrderStatus.CANCELLED.value)
            )

        return StoreStats(
            total_products=total_products or 0,
            total_orders=total_orders or 0,
            total_users=total_users or 0,
            total_revenue=round_money(revenue or 0),
        )
