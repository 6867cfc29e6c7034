"""Database module."""

from .base import Base, get_engine, get_session_factory, init_db
from .models import (
    Image,
    InStoreOrderDetail,
    OnlineOrderDetail,
    Order,
    OrderItem,
    Product,
    Purchase,
    Role,
    Store,
    User,
)
from .repository import OrderRepository

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "init_db",
    "Image",
    "InStoreOrderDetail",
    "OnlineOrderDetail",
    "Order",
    "OrderItem",
    "Product",
    "Purchase",
    "Role",
    "Store",
    "User",
    "OrderRepository",
]
