"""Tests for the HTTP surface.

Uses dependency overrides so no browser is involved; the scheduler timer
is only started where a test needs it.
"""

from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sattawatch.core.exceptions import NavigationError
from sattawatch.dependencies import get_result_store, get_update_scheduler
from sattawatch.main import app
from sattawatch.scrapers.scheduler import UpdateScheduler
from sattawatch.services.result_store import ResultStore

from conftest import make_run


class FakeScraperService:
    def __init__(self, clock, store=None, error=None):
        self.clock = clock
        self.store = store
        self.error = error

    async def run_once(self):
        if self.error:
            raise self.error
        run = make_run(self.clock(), names=["MILAN MORNING", "KALYAN"])
        run_id = await self.store.save(run) if self.store else 1
        return run.with_run_id(run_id)


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def store(session_factory) -> ResultStore:
    return ResultStore(session_factory)


@pytest.fixture
def wire(store, clock):
    """Install overrides for a scheduler running the given service."""

    def _wire(service=None, result_store=None) -> UpdateScheduler:
        scheduler = UpdateScheduler(service or FakeScraperService(clock, store=store), clock=clock)
        app.dependency_overrides[get_update_scheduler] = lambda: scheduler
        app.dependency_overrides[get_result_store] = lambda: result_store or store
        return scheduler

    yield _wire
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# TESTS: HEALTH / STATUS
# ============================================================================

class TestHealthEndpoints:
    """Tests for / and /status."""

    async def test_health_before_first_run(self, client, wire):
        wire()
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "Server is running"
        assert data["last_update"] is None
        assert data["next_update"] is None

    async def test_status_before_first_run(self, client, wire):
        wire()
        response = await client.get("/status")

        assert response.status_code == 200
        data = response.json()
        assert data["last_update"] is None
        assert data["next_update"] is None
        assert data["update_interval_hours"] == 6
        assert data["running"] is False
        assert data["consecutive_failures"] == 0

    async def test_status_after_failed_run(self, client, wire, clock):
        error = NavigationError("https://results.example.test", "status 502", status=502)
        wire(service=FakeScraperService(clock, error=error))

        await client.get("/scrape")
        data = (await client.get("/status")).json()

        assert data["last_error"] == error.message
        assert data["consecutive_failures"] == 1
        assert data["scheduler_running"] is False
        next_update = parse_timestamp(data["next_update"])
        last_update = parse_timestamp(data["last_update"])
        assert (next_update - last_update).total_seconds() == 300

    async def test_status_reports_active_timer(self, client, wire):
        scheduler = wire()
        scheduler.start(run_on_startup=False)
        try:
            data = (await client.get("/status")).json()
        finally:
            await scheduler.shutdown()

        assert data["scheduler_running"] is True
        assert (await client.get("/status")).json()["scheduler_running"] is False

    async def test_unknown_route(self, client, wire):
        wire()
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Route not found"}


# ============================================================================
# TESTS: SCRAPE / HISTORY
# ============================================================================

class TestScrapeEndpoints:
    """Tests for /scrape and /history."""

    async def test_scrape_returns_stored_run(self, client, wire, clock):
        wire()
        response = await client.get("/scrape")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"] is not None
        assert body["data"]["result_count"] == 2
        assert [r["market_name"] for r in body["data"]["results"]] == ["MILAN MORNING", "KALYAN"]
        assert body["data"]["results"][0]["open"] == "599"
        assert parse_timestamp(body["next_update"]) > parse_timestamp(body["last_update"])

    async def test_scrape_updates_status(self, client, wire):
        wire()
        await client.get("/scrape")
        data = (await client.get("/status")).json()

        last_update = parse_timestamp(data["last_update"])
        next_update = parse_timestamp(data["next_update"])
        assert (next_update - last_update).total_seconds() == 6 * 3600

    async def test_scrape_failure_returns_error_envelope(self, client, wire, clock):
        error = NavigationError("https://results.example.test", "timed out after 60s")
        wire(service=FakeScraperService(clock, error=error))

        response = await client.get("/scrape")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": error.message}

    async def test_history_is_bounded_and_newest_first(self, client, wire, store, clock):
        for _ in range(12):
            await store.save(make_run(clock()))
            clock.advance(minutes=5)
        wire()

        response = await client.get("/history")

        assert response.status_code == 200
        runs = response.json()["data"]
        assert len(runs) == 10
        stamps = [parse_timestamp(run["scraped_at"]) for run in runs]
        assert stamps == sorted(stamps, reverse=True)

    async def test_history_empty(self, client, wire):
        wire()
        body = (await client.get("/history")).json()

        assert body["success"] is True
        assert body["data"] == []

    async def test_history_without_table(self, client, wire, empty_session_factory):
        wire(result_store=ResultStore(empty_session_factory))

        response = await client.get("/history")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "scrape_results" in body["error"]
