"""Cashier (POS) order endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from storefront_api.models.order import CreateStoreOrderRequest, StoreOrderPage, StoreOrderResponse
from storefront_api.server.auth import require_cashier
from storefront_api.server.dependencies import get_order_builder, get_order_queries
from storefront_api.services.order_builder import OrderBuilder
from storefront_api.services.order_queries import OrderQueries, parse_page, parse_store_param

router = APIRouter(prefix="/cashier", tags=["cashier"])


@router.post(
    "/orders", response_model=StoreOrderResponse, status_code=status.HTTP_201_CREATED
)
async def create_store_order(
    body: CreateStoreOrderRequest,
    cashier_id: int = Depends(require_cashier),
    builder: OrderBuilder = Depends(get_order_builder),
) -> StoreOrderResponse:
    """Create an in-store order for a store the cashier is assigned to."""
    return await builder.create_in_store_order(cashier_id, body)


@router.get("/orders", response_model=StoreOrderPage)
async def list_store_orders(
    store: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    cashier_id: int = Depends(require_cashier),
    queries: OrderQueries = Depends(get_order_queries),
) -> StoreOrderPage:
    store_id = parse_store_param(store)
    page_limit, page_offset = parse_page(limit, offset)
    return await queries.list_cashier_store_orders(cashier_id, store_id, page_limit, page_offset)


@router.get("/orders/{order_id}/store/{store_id}", response_model=StoreOrderResponse)
async def get_store_order(
    order_id: int,
    store_id: int,
    cashier_id: int = Depends(require_cashier),
    queries: OrderQueries = Depends(get_order_queries),
) -> StoreOrderResponse:
    return await queries.get_cashier_store_order(cashier_id, order_id, store_id)
