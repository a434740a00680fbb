"""Order history — reads for owners and the back-office."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from identity.tokens import Subject
from ordering.order.order import Order
from shared.exceptions import Forbidden, NotFound
from shared.store import Store


def get_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found", details={"order_id": order_id})
    return order


class OrderHistory:
    def __init__(self, store: Store):
        self.store = store

    def list_orders(self, user_id: str) -> list[Order]:
        """The user's orders, newest first."""
        with self.store.session() as session:
            query = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())
            return list(session.scalars(query))

    def list_all_orders(self) -> list[Order]:
        with self.store.session() as session:
            return list(session.scalars(select(Order).order_by(Order.created_at.desc())))

    def get_order(self, subject: Subject, order_id: str) -> Order:
        with self.store.session() as session:
            order = get_order(session, order_id)
        if not order.belongs_to(subject.id) and not subject.is_admin:
            raise Forbidden("Order belongs to another user")
        return order
