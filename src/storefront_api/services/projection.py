"""Assemble order responses from persisted rows."""

from datetime import datetime, timezone
from typing import List, Optional

from storefront_api.config.constants import TIMESTAMP_FORMAT
from storefront_api.core.errors import NotFoundError
from storefront_api.db.models import InStoreOrderDetail, OnlineOrderDetail, Order, Store, User
from storefront_api.db.repository import OrderRepository
from storefront_api.models.order import (
    ImageResponse,
    ItemResponse,
    OnlineOrderDetails,
    OnlineOrderResponse,
    StoreOrderDetails,
    StoreOrderResponse,
    StoreResponse,
    UserResponse,
)


def format_timestamp(value: Optional[datetime]) -> str:
    """Render a stored (naive UTC) timestamp as RFC 3339."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        firstname=user.firstname,
        lastname=user.lastname,
        email=user.email,
        phone=user.phone or "",
    )


def store_response(store: Store) -> StoreResponse:
    return StoreResponse(id=store.id, slug=store.slug, name=store.name, status=store.status)


class OrderProjector:
    """
    Builds order projections through a repository.

    Items always carry the quantity and price stored on the order line,
    never the product's current price. Works the same inside the creation
    transaction (reading staged rows) and on committed data.
    """

    def __init__(self, repository: OrderRepository):
        self.repository = repository

    async def project_items(self, order_id: int) -> List[ItemResponse]:
        items = []
        for line in await self.repository.find_order_items(order_id):
            product = await self.repository.find_product(line.product_id)
            if product is None:
                raise NotFoundError("Product not found")

            images = await self.repository.find_product_images(product.id)
            items.append(
                ItemResponse(
                    id=product.id,
                    slug=product.slug,
                    name=product.name,
                    sku=product.sku,
                    status=product.status,
                    visibility=product.visibility,
                    images=[ImageResponse(id=image.id, name=image.name) for image in images],
                    quantity=line.quantity,
                    price=line.price,
                )
            )
        return items

    async def project_user(self, user_id: Optional[int]) -> Optional[UserResponse]:
        """Resolve a detail user; a deleted user (null reference) projects to None."""
        if user_id is None:
            return None
        user = await self.repository.find_user(user_id)
        return user_response(user) if user else None

    async def project_store_order(
        self,
        order: Order,
        details: Optional[InStoreOrderDetail] = None,
        store: Optional[Store] = None,
    ) -> StoreOrderResponse:
        if details is None:
            details = await self.repository.find_store_order_details(order.id)
            if details is None:
                raise NotFoundError("Order details not found")

        if store is None or store.id != details.store_id:
            store = await self.repository.find_store(details.store_id)
            if store is None:
                raise NotFoundError("Store not found")

        return StoreOrderResponse(
            id=order.id,
            number=order.number,
            channel=order.channel,
            status=order.status,
            total=order.total,
            items=await self.project_items(order.id),
            details=StoreOrderDetails(
                store=store_response(store),
                cashier=await self.project_user(details.cashier_id),
            ),
            created_at=format_timestamp(order.created_at),
        )

    async def project_online_order(
        self,
        order: Order,
        details: Optional[OnlineOrderDetail] = None,
        checkout_url: Optional[str] = None,
    ) -> OnlineOrderResponse:
        if details is None:
            details = await self.repository.find_online_order_details(order.id)
            if details is None:
                raise NotFoundError("Order details not found")

        return OnlineOrderResponse(
            id=order.id,
            number=order.number,
            channel=order.channel,
            status=order.status,
            total=order.total,
            items=await self.project_items(order.id),
            details=OnlineOrderDetails(customer=await self.project_user(details.customer_id)),
            created_at=format_timestamp(order.created_at),
            checkout_url=checkout_url,
        )
