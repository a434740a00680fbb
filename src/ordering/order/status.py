"""Order status changes — command and handler.

Admins may apply any transition the state machine allows. Owners may only
cancel their own order while it is still pending. Cancelling returns the
ordered quantities to stock in the same transaction.
"""

from dataclasses import dataclass

import structlog

from catalogue.product.repository import restock
from identity.tokens import Subject
from ordering.order.history import get_order
from ordering.order.order import Order, OrderStatus
from shared.exceptions import Forbidden, ValidationFailed
from shared.store import Store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UpdateOrderStatus:
    order_id: str
    status: str


def _parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationFailed(
            {"status": [f"Status must be one of: {', '.join(s.value for s in OrderStatus)}"]}
        ) from None


class OrderStatusHandler:
    def __init__(self, store: Store):
        self.store = store

    def update_order_status(self, subject: Subject, command: UpdateOrderStatus) -> Order:
        target = _parse_status(command.status)

        with self.store.unit_of_work() as session:
            order = get_order(session, command.order_id)

            if not subject.is_admin:
                if not order.belongs_to(subject.id):
                    raise Forbidden("Order belongs to another user")
                if target != OrderStatus.CANCELLED or OrderStatus(order.status) != OrderStatus.PENDING:
                    raise Forbidden("Only pending orders can be cancelled by their owner")

            previous = order.transition_to(target)

            if target == OrderStatus.CANCELLED:
                for line in order.lines:
                    if not restock(session, line.product_id, line.quantity):
                        logger.info("restock_skipped_product_gone", order_id=order.id, product_id=line.product_id)

        logger.info(
            "order_status_changed",
            order_id=order.id,
            previous_status=previous.value,
            new_status=target.value,
            changed_by=subject.id,
        )
        return order
