"""Integration tests for /api/v1/orders."""

from datetime import UTC, datetime

import pytest
import time_machine
from httpx import AsyncClient

from tests.factories import OrderPayloadFactory

pytestmark = pytest.mark.integration

BASE = "/api/v1/orders"

ITEMS = [
    {"productId": 1, "productName": "Widget", "quantity": 2, "unitPrice": 10.0},
    {"productId": 2, "productName": "Gadget", "quantity": 1, "unitPrice": 5.0},
]


def _parse(timestamp: str) -> datetime:
    return datetime.fromisoformat(timestamp)


async def _create(client: AsyncClient, **overrides) -> dict:
    response = await client.post(BASE, json=OrderPayloadFactory(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateOrder:
    async def test_total_recomputed_from_items(self, client: AsyncClient):
        body = await _create(client, totalAmount=1.0, orderItems=ITEMS)

        assert body["totalAmount"] == 25.0
        assert body["status"] == "PENDING"
        assert body["orderNumber"].startswith("ORD-")
        assert [i["totalPrice"] for i in body["orderItems"]] == [20.0, 5.0]
        assert all(isinstance(i["id"], int) for i in body["orderItems"])

    async def test_duplicate_order_number_returns_409(self, client: AsyncClient):
        await _create(client, orderNumber="ORD-DUPE0001")

        response = await client.post(
            BASE, json=OrderPayloadFactory(orderNumber="ORD-DUPE0001")
        )

        assert response.status_code == 409
        assert response.json() == {
            "detail": "Order already exists with order number: ORD-DUPE0001"
        }

    async def test_invalid_item_is_reported_by_path(self, client: AsyncClient):
        bad_items = [{"productId": 1, "quantity": 0, "unitPrice": 1.0}]

        response = await client.post(
            BASE, json=OrderPayloadFactory(orderItems=bad_items)
        )

        assert response.status_code == 400
        assert "orderItems.0.quantity" in response.json()["errors"]

    async def test_invalid_email(self, client: AsyncClient):
        response = await client.post(
            BASE, json=OrderPayloadFactory(customerEmail="not-an-email")
        )

        assert response.status_code == 400
        assert response.json()["errors"] == {"customerEmail": "Invalid email format"}

    async def test_missing_required_fields_use_their_messages(
        self, client: AsyncClient
    ):
        response = await client.post(BASE, json={"shippingAddress": "1 Main St"})

        assert response.status_code == 400
        assert response.json()["errors"] == {
            "customerName": "Customer name is required",
            "customerEmail": "Customer email is required",
            "totalAmount": "Total amount is required",
        }


class TestOrderQueries:
    async def test_get_by_id_and_number(self, client: AsyncClient):
        created = await _create(client, orderNumber="ORD-LOOK0001", orderItems=ITEMS)

        by_id = await client.get(f"{BASE}/{created['id']}")
        by_number = await client.get(f"{BASE}/order-number/ORD-LOOK0001")

        assert by_id.json() == created
        assert by_number.json()["id"] == created["id"]

    async def test_unknown_id_returns_404(self, client: AsyncClient):
        response = await client.get(f"{BASE}/404")

        assert response.status_code == 404
        assert response.json() == {"detail": "Order not found with id: 404"}

    async def test_status_and_customer_filters(self, client: AsyncClient):
        shipped = await _create(
            client, customerEmail="ship@example.com", status="SHIPPED"
        )
        await _create(client, customerEmail="ship@example.com")

        by_status = await client.get(f"{BASE}/status/SHIPPED")
        by_customer = await client.get(f"{BASE}/customer/ship@example.com")
        by_both = await client.get(
            f"{BASE}/customer/ship@example.com/status/SHIPPED"
        )

        assert [o["id"] for o in by_status.json()] == [shipped["id"]]
        assert len(by_customer.json()) == 2
        assert [o["id"] for o in by_both.json()] == [shipped["id"]]

    async def test_unknown_status_returns_400(self, client: AsyncClient):
        response = await client.get(f"{BASE}/status/LOST")

        assert response.status_code == 400
        assert "order_status" in response.json()["errors"]

    async def test_statistics_route_is_not_an_id(self, client: AsyncClient):
        await _create(client)
        await _create(client, status="CANCELLED")

        response = await client.get(f"{BASE}/statistics")

        assert response.status_code == 200
        assert response.json() == {
            "totalOrders": 2,
            "pendingOrders": 1,
            "confirmedOrders": 0,
            "shippedOrders": 0,
            "deliveredOrders": 0,
            "cancelledOrders": 1,
        }

    async def test_date_range(self, client: AsyncClient):
        with time_machine.travel(datetime(2024, 5, 1, 9, 0, tzinfo=UTC), tick=False):
            may = await _create(client)
        with time_machine.travel(datetime(2024, 6, 1, 9, 0, tzinfo=UTC), tick=False):
            await _create(client)

        response = await client.get(
            f"{BASE}/date-range",
            params={
                "startDate": "2024-05-01T00:00:00",
                "endDate": "2024-05-31T23:59:59",
            },
        )

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [may["id"]]

    async def test_search_by_customer_name(self, client: AsyncClient):
        match = await _create(client, customerName="Priya Raman")
        await _create(client, customerName="Tom Jones")

        response = await client.get(f"{BASE}/search", params={"customerName": "RAMAN"})

        assert [o["id"] for o in response.json()] == [match["id"]]


class TestUpdateOrder:
    async def test_patch_status_advances_updated_at(self, client: AsyncClient):
        created_time = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        later = datetime(2024, 1, 2, 12, 0, tzinfo=UTC)
        with time_machine.travel(created_time, tick=False):
            created = await _create(client)
        with time_machine.travel(later, tick=False):
            response = await client.patch(
                f"{BASE}/{created['id']}/status", params={"status": "SHIPPED"}
            )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "SHIPPED"
        assert _parse(body["createdAt"]) == created_time
        assert _parse(body["updatedAt"]) == later

    async def test_patch_status_unknown_order(self, client: AsyncClient):
        response = await client.patch(f"{BASE}/9/status", params={"status": "SHIPPED"})

        assert response.status_code == 404

    async def test_put_replaces_items(self, client: AsyncClient):
        created = await _create(client, orderItems=ITEMS)
        payload = OrderPayloadFactory(
            orderItems=[{"productId": 3, "quantity": 3, "unitPrice": 2.5}]
        )

        response = await client.put(f"{BASE}/{created['id']}", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["orderNumber"] == created["orderNumber"]
        assert body["totalAmount"] == 7.5
        assert [i["productId"] for i in body["orderItems"]] == [3]

    async def test_put_without_items_keeps_them(self, client: AsyncClient):
        created = await _create(client, orderItems=ITEMS)

        response = await client.put(
            f"{BASE}/{created['id']}",
            json=OrderPayloadFactory(totalAmount=30.0, status="CONFIRMED"),
        )

        body = response.json()
        assert body["status"] == "CONFIRMED"
        assert body["totalAmount"] == 30.0
        assert len(body["orderItems"]) == 2


class TestDeleteOrder:
    async def test_delete_order_and_items(self, client: AsyncClient):
        created = await _create(client, orderItems=ITEMS)

        deleted = await client.delete(f"{BASE}/{created['id']}")
        again = await client.delete(f"{BASE}/{created['id']}")
        stats = await client.get(f"{BASE}/statistics")

        assert deleted.status_code == 204
        assert again.status_code == 404
        assert stats.json()["totalOrders"] == 0
