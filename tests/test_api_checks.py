"""Tests for the check registration and history API."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update

from uptime_monitor.core.errors import StorageError
from uptime_monitor.models.check import Check, CheckStatus
from uptime_monitor.models.check_result import CheckResult

NEW_CHECK = {
    "name": "Payments",
    "url": "https://payments.example.com/health",
    "interval_seconds": 30
}


@pytest.mark.functional
class TestHealthAPI:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["worker"] == {"running": False, "state": "stopped", "sweeps_completed": 0}
        assert "X-Request-ID" in response.headers

    async def test_metrics_endpoint(self, client, test_app):
        test_app.state.metrics.record_sweep(2)

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "uptime_monitor_sweeps_total 1.0" in response.text


@pytest.mark.functional
class TestCreateCheck:

    async def test_create_returns_id(self, client, store):
        response = await client.post("/checks", json=NEW_CHECK)

        assert response.status_code == 201
        check_id = response.json()["id"]
        stored = await store.get_check(check_id)
        assert stored.name == "Payments"
        assert stored.is_active is True

    async def test_ids_are_unique(self, client):
        first = await client.post("/checks", json=NEW_CHECK)
        second = await client.post("/checks", json=NEW_CHECK)

        assert first.json()["id"] != second.json()["id"]

    @pytest.mark.parametrize("interval", [0, 5, 9])
    async def test_short_interval_is_rejected(self, client, store, interval):
        response = await client.post("/checks", json={**NEW_CHECK, "interval_seconds": interval})

        assert response.status_code == 400
        assert "at least 10" in response.json()["detail"]
        assert await store.list_checks() == []

    async def test_minimum_interval_is_accepted(self, client):
        response = await client.post("/checks", json={**NEW_CHECK, "interval_seconds": 10})

        assert response.status_code == 201

    async def test_missing_fields_are_rejected(self, client):
        response = await client.post("/checks", json={"name": "No URL"})

        assert response.status_code == 422

    async def test_alert_email_is_stored(self, client, store):
        response = await client.post("/checks", json={**NEW_CHECK, "alert_email": "pay-team@example.com"})

        stored = await store.get_check(response.json()["id"])
        assert stored.alert_email == "pay-team@example.com"


@pytest.mark.functional
class TestReadChecks:

    async def test_new_check_is_listed_as_unknown(self, client, sample_check):
        response = await client.get("/checks")

        assert response.status_code == 200
        [item] = response.json()
        assert item["id"] == sample_check.id
        assert item["last_status"] == "UNKNOWN"
        assert item["last_checked_at"] is None

    async def test_list_shows_cached_status(self, client, store, sample_check):
        await store.update_check_status(sample_check.id, CheckStatus.DOWN, datetime.now(timezone.utc))

        [item] = (await client.get("/checks")).json()

        assert item["last_status"] == "DOWN"
        assert item["last_checked_at"] is not None

    async def test_unrecognised_stored_status_lists_as_unknown(self, client, session_factory, sample_check):
        async with session_factory() as db:
            await db.execute(
                update(Check).where(Check.id == sample_check.id).values(last_status="PAUSED")
            )
            await db.commit()

        [item] = (await client.get("/checks")).json()

        assert item["last_status"] == "UNKNOWN"

    async def test_get_check(self, client, sample_check):
        response = await client.get(f"/checks/{sample_check.id}")

        assert response.status_code == 200
        assert response.json()["url"] == sample_check.url

    async def test_get_unknown_check(self, client):
        response = await client.get("/checks/does-not-exist")

        assert response.status_code == 404


@pytest.mark.functional
class TestUpdateCheck:

    async def test_deactivate(self, client, store, sample_check):
        response = await client.patch(f"/checks/{sample_check.id}", json={"is_active": False})

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert await store.list_active_checks() == []

    async def test_short_interval_is_rejected(self, client, sample_check):
        response = await client.patch(f"/checks/{sample_check.id}", json={"interval_seconds": 5})

        assert response.status_code == 400

    async def test_null_required_field_is_rejected(self, client, sample_check):
        response = await client.patch(f"/checks/{sample_check.id}", json={"name": None})

        assert response.status_code == 400

    async def test_clear_alert_email(self, client, store, sample_check):
        await store.update_check(sample_check.id, alert_email="ops@example.com")

        response = await client.patch(f"/checks/{sample_check.id}", json={"alert_email": None})

        assert response.status_code == 200
        assert response.json()["alert_email"] is None

    async def test_update_unknown_check(self, client):
        response = await client.patch("/checks/does-not-exist", json={"name": "x"})

        assert response.status_code == 404


@pytest.mark.functional
class TestResults:

    async def test_results_newest_first(self, client, store, sample_check):
        base = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)
        for minutes, status in [(0, "UP"), (1, "DOWN"), (2, "UP")]:
            await store.insert_result(CheckResult(
                check_id=sample_check.id,
                checked_at=base + timedelta(minutes=minutes),
                status=status,
                http_status=200 if status == "UP" else None,
                latency_ms=15,
                error=None if status == "UP" else "Connection error: refused"
            ))

        response = await client.get(f"/checks/{sample_check.id}/results")

        assert response.status_code == 200
        data = response.json()
        assert [item["status"] for item in data] == ["UP", "DOWN", "UP"]
        assert data[1]["error"] == "Connection error: refused"
        assert data[1]["http_status"] is None

        limited = await client.get(f"/checks/{sample_check.id}/results", params={"limit": 1})
        assert len(limited.json()) == 1

    async def test_results_empty_for_new_check(self, client, sample_check):
        response = await client.get(f"/checks/{sample_check.id}/results")

        assert response.status_code == 200
        assert response.json() == []

    async def test_results_for_unknown_check(self, client):
        response = await client.get("/checks/does-not-exist/results")

        assert response.status_code == 404

    async def test_invalid_limit(self, client, sample_check):
        response = await client.get(f"/checks/{sample_check.id}/results", params={"limit": 0})

        assert response.status_code == 422


@pytest.mark.functional
async def test_storage_error_returns_500(client, test_app):
    test_app.state.store.list_checks = AsyncMock(side_effect=StorageError("list_checks", "database is locked"))

    response = await client.get("/checks")

    assert response.status_code == 500
    assert response.json()["detail"] == "list_checks failed: database is locked"
