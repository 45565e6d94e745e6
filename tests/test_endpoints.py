"""Tests for API endpoints."""

import hashlib
import hmac

import httpx
import pytest
from fastapi.testclient import TestClient

from kiosk.clients.razorpay import RazorpayClient
from kiosk.config import KioskConfig, RazorpayConfig
from kiosk.main import create_app
from kiosk.services.payments import PaymentService
from kiosk.services.queue import QueueManager

from conftest import SwitchableProvisioner


@pytest.fixture
def store(app, database_config):
    """Swap in a queue manager whose store can be taken down."""
    provisioner = SwitchableProvisioner(database_config)
    app.state.queue_manager = QueueManager(provisioner)
    yield provisioner
    provisioner.dispose()


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, client):
        """Test that health check returns 200 status."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_structure(self, client):
        """Test that health check returns expected JSON structure."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["store_available"] is True
        assert "timestamp" in data

    def test_health_check_degraded_when_store_down(self, client, store):
        store.down = True

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["store_available"] is False


class TestAddPatientEndpoint:
    """Tests for queueing patients over HTTP."""

    def test_add_patient_returns_token(self, client):
        response = client.post("/api/add-patient", json={"name": "Asha", "age": 30})

        assert response.status_code == 200
        assert response.json() == {
            "status": "Success",
            "token": "HOS001",
            "name": "Asha",
            "age": 30,
            "storage": "store",
        }

    def test_add_patient_accepts_numeric_string_age(self, client):
        response = client.post("/api/add-patient", json={"name": "Ravi", "age": "41"})

        assert response.status_code == 200
        assert response.json()["age"] == 41

    def test_sequential_adds_increment_tokens(self, client):
        responses = [client.post("/api/add-patient", json={"name": f"P{i}", "age": 20}) for i in range(3)]
        tokens = [response.json()["token"] for response in responses]
        assert tokens == ["HOS001", "HOS002", "HOS003"]

    def test_add_patient_ignores_extra_fields(self, client):
        payload = {"name": "Asha", "age": 30, "doctor": {"name": "Dr. Rao", "fee": 500}}
        assert client.post("/api/add-patient", json=payload).status_code == 200

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"name": "Asha"},
            {"age": 30},
            {"name": "Asha", "age": "thirty"},
            {"name": "Asha", "age": -1},
            {"name": "   ", "age": 30},
        ],
    )
    def test_malformed_payload_is_bad_request(self, client, payload):
        response = client.post("/api/add-patient", json=payload)

        assert response.status_code == 400
        assert response.json()["status"] == "BAD_REQUEST"

    def test_add_patient_with_store_down_is_degraded(self, client, store):
        store.down = True

        response = client.post("/api/add-patient", json={"name": "Asha", "age": 30})

        assert response.status_code == 200
        assert response.json()["status"] == "Degraded"
        assert response.json()["storage"] == "fallback"

    def test_unexpected_failure_is_server_error(self, app, client):
        def explode(name, age):
            raise RuntimeError("boom")

        app.state.queue_manager.add_patient = explode

        response = client.post("/api/add-patient", json={"name": "Asha", "age": 30})

        assert response.status_code == 500
        assert response.json() == {"status": "ERROR", "message": "Unexpected server error"}


class TestQueueEndpoints:
    """Tests for listing, deleting, undoing, and syncing."""

    def test_list_patients_in_insertion_order(self, client):
        client.post("/api/add-patient", json={"name": "Asha", "age": 30})
        client.post("/api/add-patient", json={"name": "Ravi", "age": 41})

        data = client.get("/api/patients").json()

        assert data["store_available"] is True
        assert [p["token"] for p in data["patients"]] == ["HOS001", "HOS002"]
        assert data["patients"][0] == {"name": "Asha", "age": 30, "token": "HOS001"}

    def test_list_with_store_down_is_empty(self, client, store):
        store.down = True

        data = client.get("/api/patients").json()

        assert data == {"patients": [], "store_available": False}

    def test_delete_patient(self, client):
        client.post("/api/add-patient", json={"name": "Asha", "age": 30})

        response = client.delete("/api/patients/HOS001")

        assert response.status_code == 200
        assert response.json() == {"status": "DELETED", "token": "HOS001", "deleted": 1}
        assert client.get("/api/patients").json()["patients"] == []

    def test_delete_missing_patient_is_not_found(self, client):
        response = client.delete("/api/patients/HOS404")

        assert response.status_code == 404
        assert response.json()["status"] == "NOT_FOUND"

    def test_delete_with_store_down_is_unavailable(self, client, store):
        store.down = True

        response = client.delete("/api/patients/HOS001")

        assert response.status_code == 503
        assert response.json()["status"] == "STORE_UNAVAILABLE"

    def test_undo_with_nothing_to_undo(self, client):
        response = client.post("/api/undo")

        assert response.status_code == 200
        assert response.json() == {"status": "NOTHING_TO_UNDO", "token": None, "deleted": 0}

    def test_undo_removes_last_patient(self, client):
        client.post("/api/add-patient", json={"name": "Asha", "age": 30})
        client.post("/api/add-patient", json={"name": "Ravi", "age": 41})

        response = client.post("/api/undo")

        assert response.json() == {"status": "UNDONE", "token": "HOS002", "deleted": 1}
        assert [p["token"] for p in client.get("/api/patients").json()["patients"]] == ["HOS001"]

    def test_undo_of_offline_patient_is_not_synced(self, client, store):
        store.down = True
        client.post("/api/add-patient", json={"name": "Asha", "age": 30})
        store.down = False

        response = client.post("/api/undo")
        client.post("/api/queue/sync")

        assert response.json() == {"status": "REMOVED_FROM_FALLBACK", "token": "HOS001", "deleted": 0}
        assert client.get("/api/patients").json()["patients"] == []

    def test_sync_and_status(self, client, store):
        store.down = True
        client.post("/api/add-patient", json={"name": "Asha", "age": 30})
        assert client.get("/api/queue/status").json() == {
            "undo_depth": 1,
            "fallback_size": 1,
            "store_available": False,
        }

        store.down = False
        data = client.post("/api/queue/sync").json()

        assert data["synced"] == [{"name": "Asha", "age": 30, "token": "HOS001"}]
        assert data["pending"] == []
        assert client.get("/api/queue/status").json()["fallback_size"] == 0
        assert [p["token"] for p in client.get("/api/patients").json()["patients"]] == ["HOS001"]


class TestIdentityEndpoints:
    """Tests for the mock identity endpoints."""

    def test_fetch_known_aadhaar(self, client):
        response = client.get("/api/fetch-aadhar/123456789012")

        assert response.status_code == 200
        assert response.json() == {"name": "Rahul Kumar", "age": 28, "token": "PENDING"}

    def test_fetch_short_aadhaar_is_invalid_record(self, client):
        assert client.get("/api/fetch-aadhar/12").json()["token"] == "INVALID"

    def test_biometric_mock_mode(self, client):
        response = client.post("/api/biometric/authenticate", json={"template": "abc", "mode": "mock"})

        assert response.status_code == 200
        assert response.json()["token"] == "PENDING"

    def test_biometric_real_mode_not_implemented(self, client):
        response = client.post("/api/biometric/authenticate", json={"template": "abc", "mode": "real"})

        assert response.status_code == 501
        assert response.json()["status"] == "NOT_IMPLEMENTED"

    def test_biometric_missing_template(self, client):
        response = client.post("/api/biometric/authenticate", json={"mode": "mock"})

        assert response.status_code == 400
        assert response.json()["status"] == "BAD_REQUEST"


class TestPaymentEndpoints:
    """Tests for the Razorpay facade endpoints."""

    def test_public_key_blank_in_demo_mode(self, client):
        assert client.get("/api/razorpay/public-key").json() == {"key": ""}

    def test_create_order_demo_mode(self, client):
        response = client.post("/api/razorpay/create-order", json={"amount": 500})

        assert response.status_code == 200
        assert response.json()["id"].startswith("order_mock_")
        assert response.json()["amount"] == 50000

    def test_create_payment_link_demo_mode(self, client):
        response = client.post("/api/razorpay/create-payment-link", json={"amount": 500})
        assert response.json() == {"short_url": "https://rzp.io/i/mock-payment-link"}

    def test_verify_demo_mode(self, client):
        payload = {"razorpay_order_id": "o", "razorpay_payment_id": "p", "razorpay_signature": "s"}
        assert client.post("/api/razorpay/verify", json=payload).json() == {"status": "VERIFIED_DEMO"}

    def test_verify_missing_fields(self, client):
        response = client.post("/api/razorpay/verify", json={"razorpay_order_id": "o"})

        assert response.status_code == 400
        assert response.json()["status"] == "BAD_REQUEST"

    @pytest.fixture
    def live_client(self, database_config):
        """Client for an app configured with gateway credentials and a mocked transport."""
        razorpay = RazorpayConfig(key_id="rzp_test_key", key_secret="secret", base_url="https://gateway.test/v1")
        app = create_app(KioskConfig(database=database_config, razorpay=razorpay))

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"id": "order_live_1", "path": request.url.path})

        gateway = RazorpayClient(razorpay, transport=httpx.MockTransport(handler))
        app.state.payment_service = PaymentService(razorpay, gateway)
        return TestClient(app)

    def test_verify_with_secret(self, live_client):
        signature = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
        payload = {"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": signature}

        assert live_client.post("/api/razorpay/verify", json=payload).json() == {"status": "VERIFIED"}

    def test_verify_invalid_signature(self, live_client):
        payload = {"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": "deadbeef"}
        response = live_client.post("/api/razorpay/verify", json=payload)

        assert response.status_code == 400
        assert response.json()["status"] == "INVALID_SIGNATURE"

    def test_create_order_passes_gateway_response_through(self, live_client):
        response = live_client.post("/api/razorpay/create-order", json={"amount": 500})

        assert response.status_code == 201
        assert response.json() == {"id": "order_live_1", "path": "/v1/orders"}

    def test_public_key_with_credentials(self, live_client):
        assert live_client.get("/api/razorpay/public-key").json() == {"key": "rzp_test_key"}


class TestAPIDocumentation:
    """Tests for API documentation endpoints."""

    def test_openapi_json_available(self, client):
        response = client.get("/openapi.json")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"

    def test_swagger_ui_available(self, client):
        response = client.get("/docs")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
