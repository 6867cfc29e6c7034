"""Repository for order workflow data access.

Methods never commit: the caller owns the transaction. Writes are flushed
so generated ids are available to later statements in the same transaction.
"""

from typing import List, Optional, Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.config.constants import CHANNEL_IN_STORE, CHANNEL_ONLINE, STATUS_PENDING

from .models import (
    Image,
    InStoreOrderDetail,
    OnlineOrderDetail,
    Order,
    OrderItem,
    Product,
    Role,
    Store,
    User,
    product_images,
    store_users,
    user_roles,
)


class OrderRepository:
    """Data access layer for orders and the catalog rows they reference."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with async session."""
        self.session = session

    # ------------------------------------------------------------------
    # Users, roles and stores
    # ------------------------------------------------------------------

    async def find_user(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def user_has_role(self, user_id: int, role_name: str) -> bool:
        """Check whether the user holds the named role."""
        query = select(
            exists()
            .where(user_roles.c.user_id == user_id)
            .where(user_roles.c.role_id == Role.id)
            .where(Role.name == role_name)
        )
        return bool(await self.session.scalar(query))

    async def is_store_user(self, store_id: int, user_id: int) -> bool:
        """Check whether the user is assigned to the store."""
        query = select(
            exists()
            .where(store_users.c.store_id == store_id)
            .where(store_users.c.user_id == user_id)
        )
        return bool(await self.session.scalar(query))

    async def find_store(self, store_id: int) -> Optional[Store]:
        return await self.session.get(Store, store_id)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def find_product(self, product_id: int) -> Optional[Product]:
        return await self.session.get(Product, product_id)

    async def find_product_by_sku(self, sku: str) -> Optional[Product]:
        result = await self.session.execute(select(Product).where(Product.sku == sku))
        return result.scalars().first()

    async def find_product_images(self, product_id: int) -> Sequence[Image]:
        query = (
            select(Image)
            .join(product_images, product_images.c.image_id == Image.id)
            .where(product_images.c.product_id == product_id)
            .order_by(Image.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    # ------------------------------------------------------------------
    # Order writes
    # ------------------------------------------------------------------

    async def find_last_created_order(self, for_update: bool = False) -> Optional[Order]:
        """
        Get the most recently created order across all channels.

        Args:
            for_update: Lock the row until the enclosing transaction ends
                (ignored by backends without row locks, e.g. SQLite)
        """
        query = select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(1)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalars().first()

    async def insert_order(
        self, number: str, channel: str, total: float, status: str = STATUS_PENDING
    ) -> Order:
        order = Order(number=number, channel=channel, total=total, status=status)
        self.session.add(order)
        await self.session.flush()
        return order

    async def insert_order_item(
        self, order_id: int, product_id: int, quantity: int, price: float
    ) -> OrderItem:
        item = OrderItem(order_id=order_id, product_id=product_id, quantity=quantity, price=price)
        self.session.add(item)
        await self.session.flush()
        return item

    async def insert_in_store_order_details(
        self, order_id: int, cashier_id: Optional[int], store_id: int
    ) -> InStoreOrderDetail:
        details = InStoreOrderDetail(order_id=order_id, cashier_id=cashier_id, store_id=store_id)
        self.session.add(details)
        await self.session.flush()
        return details

    async def insert_online_order_details(
        self, order_id: int, customer_id: Optional[int]
    ) -> OnlineOrderDetail:
        details = OnlineOrderDetail(order_id=order_id, customer_id=customer_id)
        self.session.add(details)
        await self.session.flush()
        return details

    async def update_order_status(self, order: Order, status: str) -> Order:
        order.status = status
        await self.session.flush()
        return order

    # ------------------------------------------------------------------
    # Order reads
    # ------------------------------------------------------------------

    async def find_order(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        query = select(Order).where(Order.id == order_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_order_with_channel(self, order_id: int, channel: str) -> Optional[Order]:
        query = select(Order).where(Order.id == order_id, Order.channel == channel)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_order_items(self, order_id: int) -> Sequence[OrderItem]:
        query = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_store_order_details(self, order_id: int) -> Optional[InStoreOrderDetail]:
        query = select(InStoreOrderDetail).where(InStoreOrderDetail.order_id == order_id)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_online_order_details(self, order_id: int) -> Optional[OnlineOrderDetail]:
        query = select(OnlineOrderDetail).where(OnlineOrderDetail.order_id == order_id)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_store_order(self, order_id: int, store_id: int) -> Optional[Order]:
        query = (
            select(Order)
            .join(InStoreOrderDetail, InStoreOrderDetail.order_id == Order.id)
            .where(Order.id == order_id, InStoreOrderDetail.store_id == store_id)
            .where(Order.channel == CHANNEL_IN_STORE)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_customer_order(self, order_id: int, customer_id: int) -> Optional[Order]:
        query = (
            select(Order)
            .join(OnlineOrderDetail, OnlineOrderDetail.order_id == Order.id)
            .where(Order.id == order_id, OnlineOrderDetail.customer_id == customer_id)
            .where(Order.channel == CHANNEL_ONLINE)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_latest_online_order_item_by_sku(self, sku: str) -> Optional[OrderItem]:
        """Get the most recent online order line for a product SKU."""
        query = (
            select(OrderItem)
            .join(Product, Product.id == OrderItem.product_id)
            .join(OnlineOrderDetail, OnlineOrderDetail.order_id == OrderItem.order_id)
            .where(Product.sku == sku)
            .order_by(OrderItem.id.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def count_store_orders(self, store_id: int) -> int:
        query = (
            select(func.count(Order.id))
            .join(InStoreOrderDetail, InStoreOrderDetail.order_id == Order.id)
            .where(InStoreOrderDetail.store_id == store_id)
        )
        return int(await self.session.scalar(query) or 0)

    async def find_store_orders(self, store_id: int, limit: int, offset: int) -> List[Order]:
        query = (
            select(Order)
            .join(InStoreOrderDetail, InStoreOrderDetail.order_id == Order.id)
            .where(InStoreOrderDetail.store_id == store_id)
            .order_by(Order.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_online_orders(self, customer_id: Optional[int] = None) -> int:
        query = select(func.count(Order.id)).join(
            OnlineOrderDetail, OnlineOrderDetail.order_id == Order.id
        )
        if customer_id is not None:
            query = query.where(OnlineOrderDetail.customer_id == customer_id)
        return int(await self.session.scalar(query) or 0)

    async def find_online_orders(
        self, limit: int, offset: int, customer_id: Optional[int] = None
    ) -> List[Order]:
        query = select(Order).join(OnlineOrderDetail, OnlineOrderDetail.order_id == Order.id)
        if customer_id is not None:
            query = query.where(OnlineOrderDetail.customer_id == customer_id)
        query = query.order_by(Order.id.desc()).limit(limit).offset(offset)
        result = await self.session.execute(query)
        return list(result.scalars().all())
