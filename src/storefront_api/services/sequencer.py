"""Sequential, zero-padded order numbers shared by all channels."""

import re
from typing import Optional

from storefront_api.config.constants import ORDER_NUMBER_BOOTSTRAP
from storefront_api.core.errors import OrderNumberError
from storefront_api.core.logger import setup_logger
from storefront_api.db.repository import OrderRepository

logger = setup_logger(__name__)

_NUMBER_PATTERN = re.compile(r"[+-]?[0-9]+")


def next_order_number(previous: Optional[str]) -> str:
    """
    Increment an order number, keeping the previous number's width.

    The result is zero-padded to ``len(previous)``; it only gets wider when
    the value itself needs more digits ("099" -> "100", "99" -> "100").

    Args:
        previous: Number of the most recent order, or None for the first order

    Returns:
        The next order number ("00001" when there is no previous order)

    Raises:
        OrderNumberError: If the previous number is not an integer
    """
    if previous is None:
        previous = ORDER_NUMBER_BOOTSTRAP

    if not _NUMBER_PATTERN.fullmatch(previous):
        logger.error(f"Cannot sequence from non-numeric order number {previous!r}")
        raise OrderNumberError()

    return f"{int(previous) + 1:0{len(previous)}d}"


class OrderNumberSequencer:
    """Derives the next number from the most recently created order."""

    async def next_number(self, repository: OrderRepository) -> str:
        """
        Get the next order number inside the caller's transaction.

        The last order row is read with ``FOR UPDATE`` so concurrent
        creations queue behind each other on backends with row locks; the
        unique constraint on ``orders.number`` rejects any duplicate that
        still slips through.
        """
        last_order = await repository.find_last_created_order(for_update=True)
        previous = last_order.number if last_order else None
        return next_order_number(previous)
