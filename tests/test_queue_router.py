"""
HTTP tests for POST /api/queue/drain.

The queue store and settings are swapped through app.dependency_overrides;
no Supabase calls are made.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from campaign_mailer.config import EmailConfigError, EmailSettings, get_settings
from campaign_mailer.db import get_queue_store
from campaign_mailer.main import app
from campaign_mailer.models.email import SendRequest
from campaign_mailer.services.email.queue import QueueEmailBackend
from campaign_mailer.services.queue_store import InMemoryQueueStore, QueueStoreError

QUEUE_KEY = "test-queue-key"
AUTH = {"Authorization": f"Bearer {QUEUE_KEY}"}


# ---------------------------------------------------------------------------
# Helpers / fixtures
# ---------------------------------------------------------------------------

def _enqueue(store, **fields) -> str:
    """Enqueue one message through the real queue backend and return its id."""
    backend = QueueEmailBackend(store, "noreply@example.com", "Pressure Campaign")
    request = SendRequest(**{"to": "mp@example.org", "subject": "S", "text": "T", **fields})
    result = asyncio.run(backend.send(request))
    assert result.success
    return result.message_id


def _keys(store) -> list[str]:
    return asyncio.run(store.list_keys())


@pytest.fixture()
def store():
    return InMemoryQueueStore()


@pytest.fixture()
def settings():
    return EmailSettings(queue_api_key=QUEUE_KEY, queue_default_batch_size=2)


@pytest.fixture()
def client(store, settings):
    app.dependency_overrides[get_queue_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


# ===========================================================================
# Authentication
# ===========================================================================

class TestDrainAuthentication:

    def test_missing_header_returns_401_and_leaves_store_untouched(self, client, store):
        _enqueue(store)
        before = _keys(store)

        response = client.post("/api/queue/drain", json={"limit": 10})

        assert response.status_code == 401
        assert _keys(store) == before

    def test_wrong_token_returns_401_and_leaves_store_untouched(self, client, store):
        _enqueue(store)
        before = _keys(store)

        response = client.post(
            "/api/queue/drain",
            json={"limit": 10},
            headers={"Authorization": "Bearer wrong-key"},
        )

        assert response.status_code == 401
        assert _keys(store) == before

    def test_missing_bearer_prefix_returns_401(self, client, store):
        response = client.post(
            "/api/queue/drain", json={}, headers={"Authorization": QUEUE_KEY},
        )
        assert response.status_code == 401

    def test_rejects_before_touching_store(self, client, store):
        store.list_keys = AsyncMock(return_value=[])

        client.post("/api/queue/drain", json={}, headers={"Authorization": "Bearer nope"})

        store.list_keys.assert_not_called()

    def test_bearer_scheme_is_case_insensitive(self, client, store):
        response = client.post(
            "/api/queue/drain", json={}, headers={"Authorization": f"bearer {QUEUE_KEY}"},
        )
        assert response.status_code == 200

    def test_open_when_no_key_configured(self, store):
        app.dependency_overrides[get_queue_store] = lambda: store
        app.dependency_overrides[get_settings] = lambda: EmailSettings()
        try:
            _enqueue(store)
            response = TestClient(app).post("/api/queue/drain", json={})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["returned"] == 1


# ===========================================================================
# Drain behaviour
# ===========================================================================

class TestDrainEndpoint:

    def test_scenario_enqueue_drain_drain(self, client, store):
        message_id = _enqueue(
            store, to="mp@example.org", subject="Act now", text="Please act.", from_name="Campaign",
        )

        response = client.post("/api/queue/drain", json={"limit": 10}, headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["returned"] == 1
        job = body["jobs"][0]
        assert job["id"] == message_id
        assert job["to"] == ["mp@example.org"]
        assert job["subject"] == "Act now"
        assert job["text"] == "Please act."
        assert job["from"] == "noreply@example.com"
        assert job["fromName"] == "Campaign"
        assert isinstance(job["createdAt"], int)
        # Optional fields that were never set are omitted, not null
        assert "html" not in job and "cc" not in job and "bcc" not in job

        again = client.post("/api/queue/drain", json={"limit": 10}, headers=AUTH)
        assert again.json() == {"jobs": [], "returned": 0}

    def test_uses_default_batch_size_without_body(self, client, store):
        for _ in range(5):
            _enqueue(store)

        response = client.post("/api/queue/drain", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["returned"] == 2
        assert len(_keys(store)) == 3

    def test_uses_default_batch_size_with_empty_body(self, client, store):
        for _ in range(3):
            _enqueue(store)

        response = client.post("/api/queue/drain", json={}, headers=AUTH)

        assert response.json()["returned"] == 2

    def test_limit_bounds_the_batch(self, client, store):
        for _ in range(4):
            _enqueue(store)

        response = client.post("/api/queue/drain", json={"limit": 3}, headers=AUTH)

        assert response.json()["returned"] == 3
        assert len(response.json()["jobs"]) == 3
        assert len(_keys(store)) == 1

    @pytest.mark.parametrize("limit", [0, -1, "lots"])
    def test_invalid_limit_is_rejected(self, client, store, limit):
        _enqueue(store)

        response = client.post("/api/queue/drain", json={"limit": limit}, headers=AUTH)

        assert response.status_code == 422
        assert len(_keys(store)) == 1

    def test_list_failure_returns_500_with_error_and_message(self, client, store):
        store.list_keys = AsyncMock(side_effect=QueueStoreError("bucket unavailable"))

        response = client.post("/api/queue/drain", json={}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to process request",
            "message": "bucket unavailable",
        }

    def test_unbuildable_store_returns_500_with_error_and_message(self, client):
        def missing_credentials():
            raise EmailConfigError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")

        app.dependency_overrides[get_queue_store] = missing_credentials

        response = client.post("/api/queue/drain", json={}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to process request",
            "message": "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set",
        }

    def test_unbuildable_store_still_checks_auth_first(self, client):
        def missing_credentials():
            raise EmailConfigError("no credentials")

        app.dependency_overrides[get_queue_store] = missing_credentials

        response = client.post("/api/queue/drain", json={}, headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    @pytest.mark.parametrize("limit", [True, False, 2.5, "3"])
    def test_non_integer_limit_is_rejected(self, client, store, limit):
        _enqueue(store)

        response = client.post("/api/queue/drain", json={"limit": limit}, headers=AUTH)

        assert response.status_code == 422
        assert len(_keys(store)) == 1

    def test_single_key_failure_is_silent(self, client, store):
        ids = [_enqueue(store) for _ in range(3)]
        real_get = store.get

        async def flaky_get(key):
            if key == ids[0]:
                raise QueueStoreError("read failed")
            return await real_get(key)

        store.get = flaky_get

        response = client.post("/api/queue/drain", json={"limit": 3}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["returned"] == 2
        assert _keys(store) == [ids[0]]

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_only_post_is_allowed(self, client, method):
        response = client.request(method.upper(), "/api/queue/drain", headers=AUTH)
        assert response.status_code == 405
