"""
Integration tests for the Transfer System API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from transfer_system.api import TransferSystem, create_app
from transfer_system.config import TransferSystemConfig
from transfer_system.storage import InMemoryLedgerStore, StorageError


class FailingReadStore(InMemoryLedgerStore):
    """Store whose account reads fail with a store error"""

    def get_account(self, account_id):
        raise StorageError("connection reset by peer at 10.0.0.5:5432")


class CrashingStore(InMemoryLedgerStore):
    """Store whose account reads fail with an unexpected exception"""

    def get_account(self, account_id):
        raise RuntimeError("unexpected")


def make_client(store=None) -> TestClient:
    config = TransferSystemConfig(database_url="memory://", auto_migrate=False)
    system = TransferSystem(config, store=store)
    return TestClient(create_app(system=system))


@pytest.fixture
def client():
    """Create a test client backed by a fresh in-memory store"""
    return make_client()


def create_account(client, account_id, balance):
    r = client.post("/api/v1/accounts", json={
        "account_id": account_id,
        "initial_balance": balance
    })
    assert r.status_code == 201, r.text
    return r.json()


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "healthy"
        assert data["store"] == "memory"


class TestRequestIDs:
    """Test request ID propagation"""

    def test_generated_request_id(self, client):
        r = client.get("/health")
        assert r.headers["X-Request-ID"]

    def test_request_id_echoed_in_error(self, client):
        """Test that the caller's request ID is echoed in header and body"""
        r = client.post(
            "/api/v1/accounts",
            content="not json",
            headers={"X-Request-ID": "test-rid-1", "Content-Type": "application/json"}
        )
        assert r.status_code == 400
        assert r.headers["X-Request-ID"] == "test-rid-1"
        data = r.json()
        assert data["request_id"] == "test-rid-1"
        assert data["error"]["code"] == "invalid_request"


class TestAccountFlow:
    """End-to-end account management tests"""

    def test_create_account(self, client):
        """Test creating a new account"""
        data = create_account(client, 42, "42.50")
        assert data == {"account_id": 42, "balance": "42.50"}

    def test_get_account(self, client):
        """Test reading back an account balance"""
        create_account(client, 42, "42.50")

        r = client.get("/api/v1/accounts/42")
        assert r.status_code == 200
        assert r.json()["balance"] == "42.50"

    def test_get_missing_account(self, client):
        r = client.get("/api/v1/accounts/999")
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "account_not_found"

    def test_get_account_non_integer_id(self, client):
        r = client.get("/api/v1/accounts/abc")
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "invalid_request"

    def test_create_duplicate_account(self, client):
        create_account(client, 1, "10")

        r = client.post("/api/v1/accounts", json={"account_id": 1, "initial_balance": "5"})
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "account_exists"

    def test_create_account_negative_balance(self, client):
        r = client.post("/api/v1/accounts", json={"account_id": 1, "initial_balance": "-1"})
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "invalid_balance"

    def test_create_account_invalid_id(self, client):
        r = client.post("/api/v1/accounts", json={"account_id": 0, "initial_balance": "1"})
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "invalid_account_ids"

    def test_oversized_account_id(self):
        """Test 64-bit overflowing IDs on a SQLite-backed app"""
        config = TransferSystemConfig(database_url="sqlite://")
        client = TestClient(create_app(system=TransferSystem(config)))

        r = client.post("/api/v1/accounts", json={"account_id": 2 ** 70, "initial_balance": "1"})
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "invalid_account_ids"

        r = client.get(f"/api/v1/accounts/{2 ** 70}")
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "account_not_found"

    def test_create_account_missing_field(self, client):
        r = client.post("/api/v1/accounts", json={"account_id": 1})
        assert r.status_code == 400
        assert "initial_balance" in r.json()["error"]["message"]


class TestTransferFlow:
    """End-to-end transfer tests"""

    def setup_accounts(self, client):
        create_account(client, 1, "100.00")
        create_account(client, 2, "0.00")

    def test_transfer(self, client):
        """Test a successful transfer and the resulting balances"""
        self.setup_accounts(client)

        r = client.post("/api/v1/transactions", json={
            "source_account_id": 1,
            "destination_account_id": 2,
            "amount": "25.50"
        })
        assert r.status_code == 200
        data = r.json()
        assert data["transaction_id"] >= 1
        assert data["amount"] == "25.50"

        assert client.get("/api/v1/accounts/1").json()["balance"] == "74.50"
        assert client.get("/api/v1/accounts/2").json()["balance"] == "25.50"

    @pytest.mark.parametrize("payload,code", [
        ({"source_account_id": 1, "destination_account_id": 1, "amount": "10"}, "same_account"),
        ({"source_account_id": 1, "destination_account_id": 2, "amount": "0"}, "invalid_amount"),
        ({"source_account_id": 1, "destination_account_id": 2, "amount": "-5"}, "invalid_amount"),
        ({"source_account_id": 0, "destination_account_id": 2, "amount": "5"}, "invalid_account_ids"),
    ])
    def test_rejected_requests(self, client, payload, code):
        """Test validation failures map to 400"""
        self.setup_accounts(client)

        r = client.post("/api/v1/transactions", json=payload)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == code
        assert client.get("/api/v1/accounts/1").json()["balance"] == "100.00"

    def test_insufficient_funds(self, client):
        self.setup_accounts(client)

        r = client.post("/api/v1/transactions", json={
            "source_account_id": 2,
            "destination_account_id": 1,
            "amount": "0.01"
        })
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "insufficient_balance"

    def test_missing_destination(self, client):
        self.setup_accounts(client)

        r = client.post("/api/v1/transactions", json={
            "source_account_id": 1,
            "destination_account_id": 3,
            "amount": "1"
        })
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "account_not_found"


class TestServerErrors:
    """Test that internal failures return opaque 500 responses"""

    def test_store_failure_is_opaque(self):
        """Test that store error details never reach the client"""
        client = make_client(FailingReadStore())

        r = client.get("/api/v1/accounts/1", headers={"X-Request-ID": "rid-500"})
        assert r.status_code == 500
        data = r.json()
        assert data == {
            "request_id": "rid-500",
            "error": {"code": "internal_error", "message": "Internal Server Error"}
        }

    def test_unexpected_exception_recovered(self):
        """Test that an unhandled exception becomes a 500 error body"""
        client = make_client(CrashingStore())

        r = client.get("/api/v1/accounts/1")
        assert r.status_code == 500
        assert r.json()["error"]["code"] == "internal_error"
        assert r.headers["X-Request-ID"]
