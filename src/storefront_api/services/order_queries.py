"""Read side: single-order lookups and paged listings."""

from typing import Optional, Tuple, Union

from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.config.constants import (
    CHANNEL_IN_STORE,
    CHANNEL_ONLINE,
    DEFAULT_PAGE_LIMIT,
    DEFAULT_PAGE_OFFSET,
    MAX_QUERY_INT,
    STATUS_COMPLETED,
)
from storefront_api.core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from storefront_api.core.logger import setup_logger
from storefront_api.db.models import Store
from storefront_api.db.repository import OrderRepository
from storefront_api.models.order import (
    OnlineOrderPage,
    OnlineOrderResponse,
    StoreOrderPage,
    StoreOrderResponse,
)
from storefront_api.services.projection import OrderProjector

logger = setup_logger(__name__)


def _parse_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if 0 <= value <= MAX_QUERY_INT else default


def parse_page(limit: Optional[str], offset: Optional[str]) -> Tuple[int, int]:
    """
    Parse limit/offset query values.

    Missing, non-integer, negative or out-of-range values fall back to the defaults
    (limit 20, offset 0) instead of failing the request.
    """
    return _parse_int(limit, DEFAULT_PAGE_LIMIT), _parse_int(offset, DEFAULT_PAGE_OFFSET)


def parse_store_param(raw: Optional[str], allow_online: bool = False) -> Union[int, str]:
    """
    Parse the ``store`` query parameter of the listing endpoints.

    Returns:
        A store id, or ``"online"`` when ``allow_online`` is set

    Raises:
        BadRequestError: Parameter missing or not a store id
    """
    if not raw:
        raise BadRequestError("Provide store param from URL query")
    if allow_online and raw == CHANNEL_ONLINE:
        return CHANNEL_ONLINE
    if not (raw.isascii() and raw.isdigit()) or int(raw) > MAX_QUERY_INT:
        raise BadRequestError("Invalid store ID")
    return int(raw)


class OrderQueries:
    """Order lookups for the admin, cashier and customer surfaces."""

    def __init__(self, session: AsyncSession):
        self.repository = OrderRepository(session)
        self.projector = OrderProjector(self.repository)

    async def _require_store(self, store_id: int) -> Store:
        store = await self.repository.find_store(store_id)
        if store is None:
            raise NotFoundError("Store not found")
        return store

    async def _require_store_user(self, store_id: int, cashier_id: int) -> Store:
        store = await self._require_store(store_id)
        if not await self.repository.is_store_user(store.id, cashier_id):
            logger.warning(f"Cashier {cashier_id} denied access to store {store_id} orders")
            raise PermissionDeniedError("Forbidden")
        return store

    # ------------------------------------------------------------------
    # Single orders
    # ------------------------------------------------------------------

    async def get_store_order(self, order_id: int) -> StoreOrderResponse:
        """Admin lookup of an in-store order by id."""
        order = await self.repository.find_order_with_channel(order_id, CHANNEL_IN_STORE)
        if order is None:
            raise NotFoundError("Order not found")
        return await self.projector.project_store_order(order)

    async def get_cashier_store_order(
        self, cashier_id: int, order_id: int, store_id: int
    ) -> StoreOrderResponse:
        """Cashier lookup of an order placed in a store the cashier is assigned to."""
        store = await self._require_store_user(store_id, cashier_id)

        order = await self.repository.find_store_order(order_id, store.id)
        if order is None:
            raise NotFoundError("Order not found")
        return await self.projector.project_store_order(order, store=store)

    async def get_customer_order(self, customer_id: int, order_id: int) -> OnlineOrderResponse:
        """Customer lookup, limited to the caller's own online orders."""
        order = await self.repository.find_customer_order(order_id, customer_id)
        if order is None:
            raise NotFoundError("Order not found")
        return await self.projector.project_online_order(order)

    async def get_order_by_sku(self, sku: str) -> OnlineOrderResponse:
        """
        Public lookup of the most recent online order containing a SKU.

        Only paid (completed) orders are returned.

        Raises:
            NotFoundError: No online order line references the SKU
            PermissionDeniedError: The order is pending or canceled
        """
        item = await self.repository.find_latest_online_order_item_by_sku(sku)
        if item is None:
            raise NotFoundError("Order Item not found")

        order = await self.repository.find_order(item.order_id)
        if order is None:
            raise NotFoundError("Order not found")

        if order.status != STATUS_COMPLETED:
            raise PermissionDeniedError("Payment not clear")

        return await self.projector.project_online_order(order)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_store_orders(self, store_id: int, limit: int, offset: int) -> StoreOrderPage:
        """In-store orders of one store, newest first."""
        store = await self._require_store(store_id)
        return await self._store_page(store, limit, offset)

    async def list_cashier_store_orders(
        self, cashier_id: int, store_id: int, limit: int, offset: int
    ) -> StoreOrderPage:
        store = await self._require_store_user(store_id, cashier_id)
        return await self._store_page(store, limit, offset)

    async def list_online_orders(
        self, limit: int, offset: int, customer_id: Optional[int] = None
    ) -> OnlineOrderPage:
        """Online orders, newest first; limited to one customer when given."""
        total = await self.repository.count_online_orders(customer_id)
        orders = await self.repository.find_online_orders(limit, offset, customer_id)
        return OnlineOrderPage(
            total=total,
            limit=limit,
            offset=offset,
            data=[await self.projector.project_online_order(order) for order in orders],
        )

    async def _store_page(self, store: Store, limit: int, offset: int) -> StoreOrderPage:
        total = await self.repository.count_store_orders(store.id)
        orders = await self.repository.find_store_orders(store.id, limit, offset)
        return StoreOrderPage(
            total=total,
            limit=limit,
            offset=offset,
            data=[await self.projector.project_store_order(order, store=store) for order in orders],
        )
