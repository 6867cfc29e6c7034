from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, func, insert, select
from sqlalchemy.orm import Session

from storefront_api.config.settings import Settings
from storefront_api.core.errors import PaymentInitiationError
from storefront_api.db import Base, Image, Product, Purchase, Role, Store, User
from storefront_api.db.models import product_images, store_users, user_roles
from storefront_api.server.app import create_app
from storefront_api.server.dependencies import get_payment_gateway

JWT_SECRET = "test-secret"

ADMIN_ID = 1
CUSTOMER_ID = 2
CASHIER_ID = 3
UNASSIGNED_CASHIER_ID = 4
OTHER_CUSTOMER_ID = 5

STORE_ID = 5
OTHER_STORE_ID = 6


class FakePaymentGateway:
    """Stands in for the checkout client; records every call."""

    def __init__(self):
        self.calls = []
        self.fail = False

    async def create_checkout(self, **kwargs) -> str:
        self.calls.append(kwargs)
        if self.fail:
            raise PaymentInitiationError()
        return f"https://checkout.example/{kwargs['tx_ref']}"

    async def close(self) -> None:
        pass


def make_token(user_id: int, secret: str = JWT_SECRET, expires_in: int = 3600) -> str:
    claims = {
        "sub": str(user_id),
        "aud": "api",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth(user_id: int) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def seed(session: Session) -> None:
    session.add_all(
        [
            Role(id=1, name="admin"),
            Role(id=2, name="customer"),
            Role(id=3, name="cashier"),
            User(id=ADMIN_ID, firstname="Ada", lastname="Admin", email="ada@example.com"),
            User(id=CUSTOMER_ID, firstname="Chris", lastname="Banda", email="chris@example.com"),
            User(
                id=CASHIER_ID, firstname="Cara", lastname="Phiri", email="cara@example.com",
                phone="0999000111",
            ),
            User(
                id=UNASSIGNED_CASHIER_ID, firstname="Uma", lastname="Mwale",
                email="uma@example.com",
            ),
            User(
                id=OTHER_CUSTOMER_ID, firstname="Olga", lastname="Tembo",
                email="olga@example.com",
            ),
            Store(id=STORE_ID, slug="downtown", name="Downtown", status=True),
            Store(id=OTHER_STORE_ID, slug="uptown", name="Uptown", status=True),
            Product(id=1, slug="a1", name="Item A1", sku="A1", status=True, visibility=True),
            Product(id=2, slug="a2", name="Item A2", sku="A2", status=True, visibility=True),
            Product(id=3, slug="hidden", name="Hidden", sku="HID", status=True, visibility=False),
            Product(id=4, slug="retired", name="Retired", sku="OFF", status=False, visibility=True),
            Image(id=1, name="a1-front.png"),
        ]
    )
    session.flush()

    session.execute(
        insert(user_roles),
        [
            {"user_id": ADMIN_ID, "role_id": 1},
            {"user_id": CUSTOMER_ID, "role_id": 2},
            {"user_id": CASHIER_ID, "role_id": 3},
            {"user_id": UNASSIGNED_CASHIER_ID, "role_id": 3},
            {"user_id": OTHER_CUSTOMER_ID, "role_id": 2},
        ],
    )
    session.execute(insert(store_users), [{"user_id": CASHIER_ID, "store_id": STORE_ID}])
    session.execute(insert(product_images), [{"product_id": 1, "image_id": 1}])

    session.add_all(
        [
            Purchase(product_id=1, quantity=10, order_price=6.0, selling_price=10.0, store_id=STORE_ID),
            Purchase(product_id=2, quantity=3, order_price=3.0, selling_price=5.0, store_id=STORE_ID),
            Purchase(product_id=3, quantity=5, order_price=3.0, selling_price=5.0),
            Purchase(product_id=4, quantity=5, order_price=3.0, selling_price=5.0),
        ]
    )
    session.commit()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "storefront.db"


@pytest.fixture
def db_engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        seed(session)
    yield engine
    engine.dispose()


@pytest.fixture
def count_rows(db_engine):
    """Count committed rows of a model."""

    def count(model) -> int:
        with Session(db_engine) as session:
            return session.scalar(select(func.count()).select_from(model))

    return count


@pytest.fixture
def app_settings(db_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{db_path}",
        jwt_secret_key=JWT_SECRET,
        glitchtip_dsn=None,
        payment_base_url="https://payments.example",
    )


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def client(db_engine, app_settings, gateway):
    app = create_app(app_settings)
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
