"""Customer order endpoints, the public SKU lookup and the payment callback."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from storefront_api.core.logger import setup_logger
from storefront_api.models.order import (
    CreateOnlineOrderRequest,
    OnlineOrderPage,
    OnlineOrderResponse,
)
from storefront_api.server.auth import require_customer
from storefront_api.server.dependencies import (
    get_order_builder,
    get_order_queries,
    get_status_machine,
)
from storefront_api.services.order_builder import OrderBuilder
from storefront_api.services.order_queries import OrderQueries, parse_page
from storefront_api.services.order_status import OrderStatusMachine

logger = setup_logger(__name__)
router = APIRouter(prefix="/customer", tags=["customer"])


@router.post(
    "/orders", response_model=OnlineOrderResponse, status_code=status.HTTP_201_CREATED
)
async def create_online_order(
    body: CreateOnlineOrderRequest,
    customer_id: int = Depends(require_customer),
    builder: OrderBuilder = Depends(get_order_builder),
) -> OnlineOrderResponse:
    """Create an online order and return it with the checkout URL."""
    return await builder.create_online_order(customer_id, body)


@router.get("/orders", response_model=OnlineOrderPage)
async def list_own_orders(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    customer_id: int = Depends(require_customer),
    queries: OrderQueries = Depends(get_order_queries),
) -> OnlineOrderPage:
    page_limit, page_offset = parse_page(limit, offset)
    return await queries.list_online_orders(page_limit, page_offset, customer_id=customer_id)


@router.get("/orders/{sku}/item", response_model=OnlineOrderResponse)
async def get_order_by_sku(
    sku: str,
    queries: OrderQueries = Depends(get_order_queries),
) -> OnlineOrderResponse:
    """Public lookup of the latest paid online order for a product SKU."""
    return await queries.get_order_by_sku(sku)


@router.get("/orders/{order_id}", response_model=OnlineOrderResponse)
async def get_own_order(
    order_id: int,
    customer_id: int = Depends(require_customer),
    queries: OrderQueries = Depends(get_order_queries),
) -> OnlineOrderResponse:
    return await queries.get_customer_order(customer_id, order_id)


@router.put("/orders/{order_id}")
async def payment_callback(
    order_id: int,
    request: Request,
    machine: OrderStatusMachine = Depends(get_status_machine),
) -> dict:
    """
    Payment gateway callback marking an order as paid.

    The endpoint is not authenticated and the callback is not signed;
    every call is logged so unexpected callers can be traced.
    """
    client_host = request.client.host if request.client else "unknown"
    logger.warning(
        f"Unauthenticated payment callback for order {order_id} from {client_host}",
        extra={"order_id": order_id},
    )

    order = await machine.mark_completed(order_id)
    return {"id": order.id, "number": order.number, "status": order.status}
