"""Integration tests for the mock external payment service."""

import json

import httpx
import pytest
from commerce.gateway.http_adapter import WebhookSender
from commerce.gateway.simulated import SimulatedGateway
from fastapi.testclient import TestClient
from payment_service import create_payment_service


@pytest.fixture()
def posted():
    return []


@pytest.fixture()
def processor(posted):
    def _handler(request):
        posted.append(request)
        return httpx.Response(200, json={})

    sender = WebhookSender(
        "http://shop.test/webhooks/payment",
        client=httpx.Client(transport=httpx.MockTransport(_handler)),
    )
    return SimulatedGateway(sender, delay_seconds=0, success_rate=1.0)


@pytest.fixture()
def client(processor):
    return TestClient(create_payment_service(processor))


class TestCreatePayment:
    def test_accepts_and_reports_processing(self, client, processor):
        response = client.post("/payments/create", json={"order_id": "ord-1", "amount": 30.0, "payment_id": "p-1"})

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "PROCESSING"
        assert body["order_id"] == "ord-1"
        assert body["payment_id"].startswith("pay_")
        assert processor.join(timeout=5)

    def test_outcome_is_posted_to_webhook(self, client, processor, posted):
        response = client.post("/payments/create", json={"order_id": "ord-1", "amount": 30.0})
        assert processor.join(timeout=5)

        [request] = posted
        assert str(request.url) == "http://shop.test/webhooks/payment"
        assert json.loads(request.content) == {
            "order_id": "ord-1",
            "payment_id": response.json()["payment_id"],
            "status": "SUCCESS",
            "message": "Payment completed successfully",
        }

    def test_rejects_non_positive_amount(self, client):
        response = client.post("/payments/create", json={"order_id": "ord-1", "amount": 0})
        assert response.status_code == 422
