from conftest import CASHIER_ID, CUSTOMER_ID, STORE_ID, auth, make_token

from storefront_api.db import Order

BODY = {"store_id": STORE_ID, "items": [{"sku": "A1", "quantity": 1, "price": 10.0}]}


def test_missing_token(client, count_rows) -> None:
    resp = client.post("/cashier/orders", json=BODY)

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Unauthorised"
    assert count_rows(Order) == 0


def test_token_signed_with_other_key(client) -> None:
    token = make_token(CASHIER_ID, secret="someone-else")
    resp = client.post("/cashier/orders", json=BODY, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_expired_token(client) -> None:
    token = make_token(CASHIER_ID, expires_in=-60)
    resp = client.post("/cashier/orders", json=BODY, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_wrong_role(client, count_rows) -> None:
    resp = client.post("/cashier/orders", json=BODY, headers=auth(CUSTOMER_ID))

    assert resp.status_code == 403
    assert count_rows(Order) == 0


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database"] == "ok"
