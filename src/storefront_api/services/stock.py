"""Stock ledger: remaining inventory derived from purchase and sale history."""

from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.db.models import OrderItem, Purchase


class StockLevel(NamedTuple):
    """Stock of one product at the time of the query."""

    purchased: int
    sold: int
    remaining: int


class StockLedger:
    """Computes stock on demand; there is no stored stock counter.

    Reads go through the caller's session, so inside an order transaction
    lines staged earlier in the same order already count as sold.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def stock_for(self, product_id: int) -> StockLevel:
        """
        Get purchased, sold and remaining quantities for a product.

        A product without purchases has zero stock.
        """
        purchased = (
            select(func.coalesce(func.sum(Purchase.quantity), 0))
            .where(Purchase.product_id == product_id)
            .scalar_subquery()
        )
        sold = (
            select(func.coalesce(func.sum(OrderItem.quantity), 0))
            .where(OrderItem.product_id == product_id)
            .scalar_subquery()
        )
        result = await self.session.execute(select(purchased, sold))
        purchased_total, sold_total = (int(value) for value in result.one())
        return StockLevel(
            purchased=purchased_total,
            sold=sold_total,
            remaining=purchased_total - sold_total,
        )
