"""
Bearer Token Authentication

Resolves the JWT on each request to a user id and checks role membership
against the user_roles table.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront_api.config.constants import ROLE_ADMIN, ROLE_CASHIER, ROLE_CUSTOMER
from storefront_api.config.settings import Settings
from storefront_api.core.errors import AuthenticationError, PermissionDeniedError
from storefront_api.core.logger import setup_logger
from storefront_api.db.repository import OrderRepository
from storefront_api.server.dependencies import get_session_factory, get_settings

logger = setup_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str, settings: Settings) -> int:
    """
    Decode a bearer token and return the user id from its ``sub`` claim.

    Raises:
        AuthenticationError: Token expired, badly signed, wrong audience or
            without an integer subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except ExpiredSignatureError as e:
        logger.info("Rejected expired bearer token")
        raise AuthenticationError() from e
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError() from e

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError) as e:
        raise AuthenticationError() from e


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> int:
    """Resolve the caller; 401 when the credential is missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return decode_user_id(credentials.credentials, settings)


def require_role(role_name: str):
    """
    Build a dependency that admits only holders of ``role_name``.

    The role check uses its own short-lived session so the request's
    unit of work starts with a clean transaction.
    """

    async def dependency(
        user_id: int = Depends(get_current_user_id),
        session_factory: async_sessionmaker = Depends(get_session_factory),
    ) -> int:
        async with session_factory() as session:
            allowed = await OrderRepository(session).user_has_role(user_id, role_name)

        if not allowed:
            logger.warning(f"User {user_id} lacks role {role_name}")
            raise PermissionDeniedError()
        return user_id

    return dependency


require_admin = require_role(ROLE_ADMIN)
require_cashier = require_role(ROLE_CASHIER)
require_customer = require_role(ROLE_CUSTOMER)
