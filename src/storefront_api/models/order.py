"""Pydantic models for order requests and projections."""

from typing import List, Optional

from pydantic import BaseModel, Field

from storefront_api.config.constants import MIN_ITEM_QUANTITY


class OrderItemRequest(BaseModel):
    """Single requested line: product SKU, quantity and unit price."""

    sku: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=MIN_ITEM_QUANTITY)
    price: float = Field(..., gt=0)


class CreateStoreOrderRequest(BaseModel):
    """Body of an in-store (POS) order."""

    store_id: int
    items: List[OrderItemRequest] = Field(..., min_length=1)
    date: Optional[str] = None


class CreateOnlineOrderRequest(BaseModel):
    """Body of an online order. ``store_id`` is accepted for compatibility and ignored."""

    store_id: Optional[int] = None
    items: List[OrderItemRequest] = Field(..., min_length=1)
    date: Optional[str] = None


class ImageResponse(BaseModel):
    id: int
    name: str


class ItemResponse(BaseModel):
    """Order line resolved to its product; quantity and price are the order-time values."""

    id: int
    slug: str
    name: str
    sku: str
    status: bool
    visibility: bool
    images: List[ImageResponse] = Field(default_factory=list)
    quantity: int
    price: float


class StoreResponse(BaseModel):
    id: int
    slug: str
    name: str
    status: bool


class UserResponse(BaseModel):
    id: int
    firstname: str
    lastname: str
    email: str
    phone: str = ""


class StoreOrderDetails(BaseModel):
    store: StoreResponse
    cashier: Optional[UserResponse] = None


class OnlineOrderDetails(BaseModel):
    customer: Optional[UserResponse] = None


class StoreOrderResponse(BaseModel):
    """Projection of an in-store order."""

    id: int
    number: str
    channel: str
    status: str
    total: float
    items: List[ItemResponse]
    details: StoreOrderDetails
    created_at: str


class OnlineOrderResponse(BaseModel):
    """Projection of an online order.

    ``checkout_url`` is only set on the creation response.
    """

    id: int
    number: str
    channel: str
    status: str
    total: float
    items: List[ItemResponse]
    details: OnlineOrderDetails
    created_at: str
    checkout_url: Optional[str] = None


class StoreOrderPage(BaseModel):
    total: int
    limit: int
    offset: int
    data: List[StoreOrderResponse]


class OnlineOrderPage(BaseModel):
    total: int
    limit: int
    offset: int
    data: List[OnlineOrderResponse]
