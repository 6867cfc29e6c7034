"""Order status transitions: payment completion and administrative cancel."""

from typing import Dict, FrozenSet

from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront_api.config.constants import STATUS_CANCELED, STATUS_COMPLETED, STATUS_PENDING
from storefront_api.core.errors import InvalidStatusTransition, NotFoundError
from storefront_api.core.logger import setup_logger
from storefront_api.db.models import Order
from storefront_api.db.repository import OrderRepository

logger = setup_logger(__name__)

# Completed and canceled are terminal
ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_PENDING: frozenset({STATUS_COMPLETED, STATUS_CANCELED}),
    STATUS_COMPLETED: frozenset(),
    STATUS_CANCELED: frozenset(),
}


def ensure_transition(current: str, target: str) -> bool:
    """
    Check a status change.

    Returns:
        True if the order must be updated, False if it already has the
        target status

    Raises:
        InvalidStatusTransition: If the change is not allowed
    """
    if current == target:
        return False
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransition(current, target)
    return True


class OrderStatusMachine:
    """Applies status transitions, each in its own short transaction."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def mark_completed(self, order_id: int) -> Order:
        """Payment callback: pending -> completed. Repeated callbacks are no-ops."""
        return await self._transition(order_id, STATUS_COMPLETED)

    async def cancel(self, order_id: int) -> Order:
        """Administrative cancel: pending -> canceled."""
        return await self._transition(order_id, STATUS_CANCELED)

    async def _transition(self, order_id: int, target: str) -> Order:
        async with self.session_factory() as session:
            async with session.begin():
                repository = OrderRepository(session)

                order = await repository.find_order(order_id, for_update=True)
                if order is None:
                    raise NotFoundError("Order not found")

                previous = order.status
                if not ensure_transition(previous, target):
                    logger.info(f"Order {order.number} already {target}, nothing to do")
                    return order

                await repository.update_order_status(order, target)

        logger.info(
            f"Order {order.number} moved from {previous} to {target}",
            extra={"order_id": order.id, "order_number": order.number, "channel": order.channel},
        )
        return order
