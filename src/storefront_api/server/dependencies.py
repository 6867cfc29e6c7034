"""FastAPI dependencies serving the handles built at application startup."""

from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront_api.config.settings import Settings
from storefront_api.integrations.payment import PaymentGateway
from storefront_api.services.order_builder import OrderBuilder
from storefront_api.services.order_queries import OrderQueries
from storefront_api.services.order_status import OrderStatusMachine


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> async_sessionmaker:
    """Session factory created by the startup handler."""
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise RuntimeError("Database not initialized")
    return session_factory


async def get_db_session(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> AsyncIterator[AsyncSession]:
    """Request-scoped session for read endpoints."""
    async with session_factory() as session:
        yield session


def get_payment_gateway(request: Request) -> PaymentGateway:
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        raise RuntimeError("Payment gateway not initialized")
    return gateway


def get_order_builder(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    payment_gateway: PaymentGateway = Depends(get_payment_gateway),
) -> OrderBuilder:
    return OrderBuilder(session_factory, payment_gateway)


def get_status_machine(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> OrderStatusMachine:
    return OrderStatusMachine(session_factory)


def get_order_queries(session: AsyncSession = Depends(get_db_session)) -> OrderQueries:
    return OrderQueries(session)
