"""Administrator order endpoints."""

from typing import Optional, Union

from fastapi import APIRouter, Depends

from storefront_api.config.constants import CHANNEL_ONLINE
from storefront_api.core.logger import setup_logger
from storefront_api.models.order import OnlineOrderPage, StoreOrderPage, StoreOrderResponse
from storefront_api.server.auth import require_admin
from storefront_api.server.dependencies import get_order_queries, get_status_machine
from storefront_api.services.order_queries import OrderQueries, parse_page, parse_store_param
from storefront_api.services.order_status import OrderStatusMachine

logger = setup_logger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/orders", response_model=None)
async def list_orders(
    store: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    admin_id: int = Depends(require_admin),
    queries: OrderQueries = Depends(get_order_queries),
) -> Union[OnlineOrderPage, StoreOrderPage]:
    """List online orders (``?store=online``) or the in-store orders of one store."""
    target = parse_store_param(store, allow_online=True)
    page_limit, page_offset = parse_page(limit, offset)

    if target == CHANNEL_ONLINE:
        return await queries.list_online_orders(page_limit, page_offset)
    return await queries.list_store_orders(target, page_limit, page_offset)


@router.get("/orders/{order_id}", response_model=StoreOrderResponse)
async def get_order(
    order_id: int,
    admin_id: int = Depends(require_admin),
    queries: OrderQueries = Depends(get_order_queries),
) -> StoreOrderResponse:
    return await queries.get_store_order(order_id)


@router.put("/orders/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    admin_id: int = Depends(require_admin),
    machine: OrderStatusMachine = Depends(get_status_machine),
) -> dict:
    """Cancel a pending order."""
    order = await machine.cancel(order_id)
    logger.info(f"Admin {admin_id} canceled order {order.number}", extra={"order_id": order.id})
    return {"id": order.id, "number": order.number, "status": order.status}
