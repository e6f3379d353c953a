"""
API tests for the order lifecycle endpoints
"""

import pytest

from order_tracker.routers.orders import get_statuses, limiter
from order_tracker.utils.enums import Role

ORDERS_URL = "/api/v1/orders/"

def order_payload(**overrides):
    payload = {
        "productUrl": "https://item.taobao.com/item.htm?id=42",
        "productName": "Phone case",
        "quantity": 2,
        "variation": "Blue",
        "specifications": "For model X",
        "notes": "Gift wrap",
        "screenshotRef": "uploads/case.png",
    }
    payload.update(overrides)
    return payload

@pytest.fixture
def customer_headers(customer, auth_headers):
    return auth_headers(customer)

@pytest.fixture
def staff_headers(processor, auth_headers):
    return auth_headers(processor)

@pytest.fixture
def created_order(client, customer_headers):
    response = client.post(ORDERS_URL, json=order_payload(), headers=customer_headers)
    assert response.status_code == 201
    return response.json()

def advance(client, order_id, status, headers, **extra):
    return client.put(f"{ORDERS_URL}{order_id}/status", json={"status": status, **extra}, headers=headers)

class TestCreateOrder:
    """Test cases for order creation"""

    def test_create_order_success(self, created_order, customer):
        assert created_order["ownerId"] == customer.id
        assert created_order["productName"] == "Phone case"
        assert created_order["quantity"] == 2
        assert created_order["screenshotRef"] == "uploads/case.png"
        assert created_order["status"] == "REQUESTED"
        assert len(created_order["statusHistory"]) == 1
        assert created_order["statusHistory"][0]["status"] == "REQUESTED"

    def test_create_with_explicit_owner(self, client, customer, customer_headers):
        response = client.post(ORDERS_URL, json=order_payload(ownerId=customer.id), headers=customer_headers)
        assert response.status_code == 201
        assert response.json()["ownerId"] == customer.id

    def test_snake_case_payload_accepted(self, client, customer_headers):
        payload = {"product_url": "https://example.com/p/1", "product_name": "Lamp", "quantity": 1}
        response = client.post(ORDERS_URL, json=payload, headers=customer_headers)
        assert response.status_code == 201
        assert response.json()["productUrl"] == "https://example.com/p/1"

    def test_staff_can_create_for_customer(self, client, customer, staff_headers):
        response = client.post(ORDERS_URL, json=order_payload(ownerId=customer.id), headers=staff_headers)
        assert response.status_code == 201
        assert response.json()["ownerId"] == customer.id

    def test_customer_cannot_create_for_someone_else(self, client, make_user, customer_headers):
        other = make_user(Role.CUSTOMER)
        response = client.post(ORDERS_URL, json=order_payload(ownerId=other.id), headers=customer_headers)
        assert response.status_code == 403

    def test_unknown_owner_is_not_found(self, client, staff_headers):
        response = client.post(ORDERS_URL, json=order_payload(ownerId="ghost"), headers=staff_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.parametrize("overrides", [
        {"productUrl": ""},
        {"productName": "   "},
        {"quantity": 0},
        {"quantity": -1},
        {"quantity": True},
        {"quantity": "lots"},
        {"quantity": "3"},
        {"quantity": 2.0},
    ])
    def test_invalid_order_data_fails(self, client, customer_headers, overrides):
        response = client.post(ORDERS_URL, json=order_payload(**overrides), headers=customer_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_missing_required_fields_fail(self, client, customer_headers):
        response = client.post(ORDERS_URL, json={"quantity": 1}, headers=customer_headers)
        assert response.status_code == 400
        fields = {f["field"].replace("_", "").lower() for f in response.json()["error"]["details"]["fields"]}
        assert {"producturl", "productname"} <= fields

    def test_requires_authentication(self, client):
        response = client.post(ORDERS_URL, json=order_payload())
        assert response.status_code in (401, 403)

class TestAdvanceStatus:
    """Test cases for status transitions over HTTP"""

    def test_documented_scenario(self, client, created_order, staff_headers):
        order_id = created_order["id"]

        response = advance(client, order_id, "PURCHASED", staff_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "PURCHASED"
        assert len(response.json()["statusHistory"]) == 2

        response = advance(client, order_id, "ARRIVED", staff_headers)
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "INVALID_TRANSITION"
        assert error["details"] == {"current": "PURCHASED", "requested": "ARRIVED"}

        response = advance(client, order_id, "IN_WAREHOUSE", staff_headers)
        assert response.status_code == 200
        assert len(response.json()["statusHistory"]) == 3

        response = advance(client, order_id, "DECLINED", staff_headers, note="Supplier out of stock")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "DECLINED"
        assert len(body["statusHistory"]) == 4
        assert body["statusHistory"][-1]["note"] == "Supplier out of stock"

        response = advance(client, order_id, "IN_TRANSIT", staff_headers)
        assert response.status_code == 409

        timeline = client.get(f"{ORDERS_URL}{order_id}/timeline", headers=staff_headers).json()
        assert [entry["status"] for entry in timeline["history"]] == [
            "REQUESTED", "PURCHASED", "IN_WAREHOUSE", "DECLINED"
        ]

    def test_customer_cannot_advance(self, client, created_order, customer_headers):
        response = advance(client, created_order["id"], "PURCHASED", customer_headers)
        assert response.status_code == 403

    def test_warehouse_manager_can_advance(self, client, created_order, make_user, auth_headers):
        manager = make_user(Role.WAREHOUSE_MANAGER)
        response = advance(client, created_order["id"], "PURCHASED", auth_headers(manager))
        assert response.status_code == 200
        assert response.json()["statusHistory"][-1]["changedBy"] == manager.id

    def test_unknown_status_is_rejected(self, client, created_order, staff_headers):
        response = advance(client, created_order["id"], "SHIPPED", staff_headers)
        assert response.status_code == 400

    def test_missing_order(self, client, staff_headers):
        response = advance(client, "99999", "PURCHASED", staff_headers)
        assert response.status_code == 404

class TestReadOrders:
    """Test cases for timeline and listing endpoints"""

    def test_timeline(self, client, created_order, customer_headers, staff_headers):
        advance(client, created_order["id"], "PURCHASED", staff_headers)

        response = client.get(f"{ORDERS_URL}{created_order['id']}/timeline", headers=customer_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["order"]["id"] == created_order["id"]
        assert data["order"]["status"] == "PURCHASED"
        assert [entry["status"] for entry in data["history"]] == ["REQUESTED", "PURCHASED"]
        assert data["history"][0]["timestamp"] <= data["history"][1]["timestamp"]

    def test_timeline_not_found(self, client, staff_headers):
        response = client.get(f"{ORDERS_URL}does-not-exist/timeline", headers=staff_headers)
        assert response.status_code == 404

    def test_other_customer_cannot_read(self, client, created_order, make_user, auth_headers):
        stranger = make_user(Role.CUSTOMER)
        response = client.get(f"{ORDERS_URL}{created_order['id']}/timeline", headers=auth_headers(stranger))
        assert response.status_code == 403

    def test_get_order_includes_history(self, client, created_order, customer_headers):
        response = client.get(f"{ORDERS_URL}{created_order['id']}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["statusHistory"][0]["status"] == "REQUESTED"

    def test_orders_for_user(self, client, customer, created_order, customer_headers):
        response = client.get(f"{ORDERS_URL}user/{customer.id}", headers=customer_headers)
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [created_order["id"]]

    def test_orders_for_other_user_forbidden(self, client, make_user, customer_headers):
        other = make_user(Role.CUSTOMER)
        response = client.get(f"{ORDERS_URL}user/{other.id}", headers=customer_headers)
        assert response.status_code == 403

    def test_staff_list_with_filter(self, client, created_order, customer_headers, staff_headers):
        client.post(ORDERS_URL, json=order_payload(productName="Second"), headers=customer_headers)
        advance(client, created_order["id"], "PURCHASED", staff_headers)

        response = client.get(ORDERS_URL, headers=staff_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 2

        response = client.get(f"{ORDERS_URL}?status=PURCHASED", headers=staff_headers)
        data = response.json()
        assert data["total"] == 1
        assert data["orders"][0]["id"] == created_order["id"]
        assert data["totalPages"] == 1

    def test_customer_cannot_list_all(self, client, customer_headers):
        response = client.get(ORDERS_URL, headers=customer_headers)
        assert response.status_code == 403

    def test_status_table(self, client):
        response = client.get(f"{ORDERS_URL}statuses")
        assert response.status_code == 200
        table = {row["status"]: row for row in response.json()}
        assert table["IN_TRANSIT"]["nextStatuses"] == ["ARRIVED", "DECLINED"]
        assert table["COMPLETED"]["terminal"] is True
        assert table["COMPLETED"]["nextStatuses"] == []
        assert table["PURCHASED"]["label"] == "Purchased in China"

    def test_status_table_is_rate_limited(self):
        route = f"{get_statuses.__module__}.{get_statuses.__name__}"
        assert [limit.limit.amount for limit in limiter._route_limits[route]] == [60]
