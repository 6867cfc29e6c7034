from conftest import CASHIER_ID, CUSTOMER_ID, OTHER_CUSTOMER_ID, STORE_ID, auth

from storefront_api.db import OnlineOrderDetail, Order, OrderItem

ONLINE_BODY = {"items": [{"sku": "A1", "quantity": 2, "price": 10.0}]}


def _create(client, customer_id=CUSTOMER_ID, body=ONLINE_BODY):
    resp = client.post("/customer/orders", json=body, headers=auth(customer_id))
    assert resp.status_code == 201
    return resp.json()


def test_create_online_order(client, gateway, count_rows) -> None:
    data = _create(client)

    assert data["channel"] == "online"
    assert data["status"] == "pending"
    assert data["total"] == 20.0
    assert data["checkout_url"] == f"https://checkout.example/{data['id']}"
    assert data["details"]["customer"]["id"] == CUSTOMER_ID
    assert data["details"]["customer"]["phone"] == ""

    assert gateway.calls == [
        {
            "amount": 20.0,
            "first_name": "Chris",
            "last_name": "Banda",
            "email": "chris@example.com",
            "tx_ref": str(data["id"]),
        }
    ]
    assert count_rows(Order) == 1
    assert count_rows(OnlineOrderDetail) == 1


def test_store_id_ignored_for_online_orders(client) -> None:
    data = _create(client, body={"store_id": STORE_ID, **ONLINE_BODY})
    assert data["channel"] == "online"


def test_payment_failure_rolls_back(client, gateway, count_rows) -> None:
    gateway.fail = True
    resp = client.post("/customer/orders", json=ONLINE_BODY, headers=auth(CUSTOMER_ID))

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Payment could not be initiated"
    assert count_rows(Order) == 0
    assert count_rows(OrderItem) == 0
    assert count_rows(OnlineOrderDetail) == 0


def test_hidden_product_rejected_online(client, gateway, count_rows) -> None:
    body = {"items": [{"sku": "HID", "quantity": 1, "price": 5.0}]}
    resp = client.post("/customer/orders", json=body, headers=auth(CUSTOMER_ID))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Sorry, you cannot order item SKU: HID"
    assert count_rows(Order) == 0
    assert gateway.calls == []


def test_cashier_cannot_order_online(client) -> None:
    resp = client.post("/customer/orders", json=ONLINE_BODY, headers=auth(CASHIER_ID))
    assert resp.status_code == 403


def test_payment_callback_completes_order(client) -> None:
    created = _create(client)

    resp = client.put(f"/customer/orders/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"

    own = client.get(f"/customer/orders/{created['id']}", headers=auth(CUSTOMER_ID))
    assert own.json()["status"] == "completed"


def test_repeated_callback_is_idempotent(client) -> None:
    created = _create(client)

    client.put(f"/customer/orders/{created['id']}")
    resp = client.put(f"/customer/orders/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"


def test_callback_unknown_order(client) -> None:
    resp = client.put("/customer/orders/999")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Order not found"


def test_sku_lookup_requires_completed_payment(client) -> None:
    created = _create(client)

    pending = client.get("/customer/orders/A1/item")
    assert pending.status_code == 403
    assert pending.json()["detail"] == "Payment not clear"

    client.put(f"/customer/orders/{created['id']}")

    paid = client.get("/customer/orders/A1/item")
    assert paid.status_code == 200
    assert paid.json()["id"] == created["id"]
    assert paid.json()["status"] == "completed"


def test_sku_lookup_without_orders(client) -> None:
    resp = client.get("/customer/orders/A2/item")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Order Item not found"


def test_customer_sees_only_own_orders(client) -> None:
    created = _create(client)

    resp = client.get(f"/customer/orders/{created['id']}", headers=auth(OTHER_CUSTOMER_ID))
    assert resp.status_code == 404


def test_list_own_orders(client) -> None:
    _create(client)
    _create(client)
    _create(client, customer_id=OTHER_CUSTOMER_ID)

    resp = client.get("/customer/orders", headers=auth(CUSTOMER_ID))
    assert resp.status_code == 200

    page = resp.json()
    assert page["total"] == 2
    assert page["limit"] == 20
    assert all(order["details"]["customer"]["id"] == CUSTOMER_ID for order in page["data"])
    assert all(order["checkout_url"] is None for order in page["data"])
