"""
API tests for ticket and queue endpoints
"""

import pytest
import uuid

from fastapi import status

API = "/api/v1"


def order_payload(store_id, products, priority=None, order_id=None):
    return {
        "order": {
            "order_id": str(order_id or uuid.uuid4()),
            "store_id": str(store_id),
            "priority": priority,
        },
        "lines": [
            {
                "order_line_id": str(uuid.uuid4()),
                "product_id": str(product_id),
                "product_name": f"Product {index}",
                "quantity": 2,
            }
            for index, product_id in enumerate(products)
        ],
    }


@pytest.fixture
def created_ticket(client, store_id):
    """Create a ticket with two lines through the API"""
    response = client.post(f"{API}/tickets", json=order_payload(store_id, [uuid.uuid4(), uuid.uuid4()]))
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


class TestTicketEndpoints:
    """Test ticket routes"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_create_ticket(self, created_ticket, store_id):
        assert created_ticket["status"] == "pending"
        assert created_ticket["store_id"] == str(store_id)
        assert len(created_ticket["lines"]) == 2
        assert created_ticket["lines"][0]["quantity"] == 2
        assert created_ticket["lines"][0]["status"] == "pending"

    def test_create_duplicate_order(self, client, store_id):
        payload = order_payload(store_id, [uuid.uuid4()])
        assert client.post(f"{API}/tickets", json=payload).status_code == 201

        response = client.post(f"{API}/tickets", json=payload)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "DUPLICATE_TICKET"

    def test_create_without_order_id(self, client, store_id):
        payload = order_payload(store_id, [uuid.uuid4()])
        payload["order"].pop("order_id")

        response = client.post(f"{API}/tickets", json=payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["path"] == f"{API}/tickets"

    def test_create_with_invalid_quantity(self, client, store_id):
        payload = order_payload(store_id, [uuid.uuid4()])
        payload["lines"][0]["quantity"] = 0

        response = client.post(f"{API}/tickets", json=payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_get_ticket(self, client, created_ticket):
        response = client.get(f"{API}/tickets/{created_ticket['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == created_ticket["id"]

    def test_get_unknown_ticket(self, client):
        response = client.get(f"{API}/tickets/{uuid.uuid4()}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_line_flow_completes_ticket(self, client, created_ticket):
        ticket_id = created_ticket["id"]
        line_ids = [line["id"] for line in created_ticket["lines"]]

        response = client.patch(f"{API}/tickets/lines/{line_ids[0]}/status", json={"status": "in-progress"})
        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"
        assert client.get(f"{API}/tickets/{ticket_id}").json()["status"] == "pending"

        client.patch(f"{API}/tickets/lines/{line_ids[0]}/status", json={"status": "completed"})
        client.patch(f"{API}/tickets/lines/{line_ids[1]}/status", json={"status": "cancelled"})

        ticket = client.get(f"{API}/tickets/{ticket_id}").json()
        assert ticket["status"] == "completed"
        assert ticket["completed_at"] is not None

    def test_invalid_line_transition(self, client, created_ticket):
        line_id = created_ticket["lines"][0]["id"]

        response = client.patch(f"{API}/tickets/lines/{line_id}/status", json={"status": "completed"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "INVALID_TRANSITION"

    def test_unknown_line_status(self, client, created_ticket):
        line_id = created_ticket["lines"][0]["id"]

        response = client.patch(f"{API}/tickets/lines/{line_id}/status", json={"status": "ready"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cancel_ticket(self, client, created_ticket):
        response = client.post(
            f"{API}/tickets/{created_ticket['id']}/cancel",
            json={"reason": "Kitchen closed"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancelled_reason"] == "Kitchen closed"

        again = client.post(f"{API}/tickets/{created_ticket['id']}/cancel")
        assert again.status_code == status.HTTP_409_CONFLICT

    def test_patch_ticket_status(self, client, created_ticket):
        url = f"{API}/tickets/{created_ticket['id']}/status"

        assert client.patch(url, json={"status": "completed"}).status_code == 400
        response = client.patch(url, json={"status": "cancelled", "reason": "Duplicate order"})

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_list_tickets(self, client, store_id):
        low = client.post(f"{API}/tickets", json=order_payload(store_id, [uuid.uuid4()], priority=1)).json()
        high = client.post(f"{API}/tickets", json=order_payload(store_id, [uuid.uuid4()], priority=9)).json()

        response = client.get(f"{API}/tickets", params={"store_id": str(store_id)})

        assert [t["id"] for t in response.json()] == [high["id"], low["id"]]
        assert client.get(f"{API}/tickets", params={"status": "cancelled"}).json() == []

    def test_live_tickets(self, client, store_id):
        grill = client.post(f"{API}/queues", json={"store_id": str(store_id), "name": "Grill"}).json()
        burger, beer = uuid.uuid4(), uuid.uuid4()
        client.post(f"{API}/queues/{grill['id']}/assignments", json={"product_id": str(burger)})
        ticket = client.post(f"{API}/tickets", json=order_payload(store_id, [burger, beer])).json()

        everything = client.get(f"{API}/tickets/live", params={"store_id": str(store_id)}).json()
        grill_only = client.get(f"{API}/tickets/live", params={"queue_id": grill["id"]}).json()

        assert [len(t["lines"]) for t in everything] == [2]
        assert everything[0]["lines"][0]["queue_ids"] == [grill["id"]]
        assert [t["id"] for t in grill_only] == [ticket["id"]]
        assert [line["product_id"] for line in grill_only[0]["lines"]] == [str(burger)]

    def test_live_tickets_unknown_queue(self, client):
        response = client.get(f"{API}/tickets/live", params={"queue_id": str(uuid.uuid4())})
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestQueueEndpoints:
    """Test queue routes"""

    def test_queue_crud(self, client, store_id):
        created = client.post(f"{API}/queues", json={"store_id": str(store_id), "name": "Bar"})
        assert created.status_code == status.HTTP_201_CREATED
        queue_id = created.json()["id"]

        updated = client.put(f"{API}/queues/{queue_id}", json={"name": "Cocktail Bar"})
        assert updated.json()["name"] == "Cocktail Bar"

        listed = client.get(f"{API}/queues", params={"store_id": str(store_id)}).json()
        assert [q["name"] for q in listed] == ["Cocktail Bar"]

        assert client.delete(f"{API}/queues/{queue_id}").status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"{API}/queues/{queue_id}").status_code == status.HTTP_404_NOT_FOUND

    def test_blank_queue_name(self, client, store_id):
        response = client.post(f"{API}/queues", json={"store_id": str(store_id), "name": "  "})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_assignments(self, client, store_id):
        queue = client.post(f"{API}/queues", json={"store_id": str(store_id), "name": "Grill"}).json()
        product = str(uuid.uuid4())
        url = f"{API}/queues/{queue['id']}/assignments"

        created = client.post(url, json={"product_id": product})
        assert created.status_code == status.HTTP_201_CREATED

        duplicate = client.post(url, json={"product_id": product})
        assert duplicate.status_code == status.HTTP_409_CONFLICT
        assert duplicate.json()["error_code"] == "DUPLICATE_ASSIGNMENT"

        detail = client.get(f"{API}/queues/{queue['id']}").json()
        assert [a["product_id"] for a in detail["assignments"]] == [product]

        removed = client.delete(f"{API}/queues/assignments/{created.json()['id']}")
        assert removed.status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"{API}/queues/{queue['id']}").json()["assignments"] == []

    def test_assign_to_unknown_queue(self, client):
        response = client.post(
            f"{API}/queues/{uuid.uuid4()}/assignments",
            json={"product_id": str(uuid.uuid4())}
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_queue_view(self, client, store_id):
        queue = client.post(f"{API}/queues", json={"store_id": str(store_id), "name": "Grill"}).json()
        burger = uuid.uuid4()
        client.post(f"{API}/queues/{queue['id']}/assignments", json={"product_id": str(burger)})
        client.post(f"{API}/tickets", json=order_payload(store_id, [uuid.uuid4()]))
        routed = client.post(f"{API}/tickets", json=order_payload(store_id, [burger])).json()

        view = client.get(f"{API}/queues/{queue['id']}/view").json()

        assert [t["id"] for t in view] == [routed["id"]]


def test_events_published_after_commit(client, store_id):
    from unittest.mock import AsyncMock
    from kitchen_tickets.core.events import event_bus

    handler = AsyncMock()
    event_bus.subscribe("TicketCreated", handler)
    event_bus.subscribe("TicketCompleted", handler)

    ticket = client.post(f"{API}/tickets", json=order_payload(store_id, [uuid.uuid4()])).json()
    line_id = ticket["lines"][0]["id"]
    client.patch(f"{API}/tickets/lines/{line_id}/status", json={"status": "in_progress"})
    client.patch(f"{API}/tickets/lines/{line_id}/status", json={"status": "completed"})

    published = [call.args[0].event_type for call in handler.await_args_list]
    assert published == ["TicketCreated", "TicketCompleted"]
