"""Functional tests for the HTTP API."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from uptime_monitor.core.exceptions import NotFoundError, TransientError
from uptime_monitor.utils.clock import truncate_to_minute, utcnow

pytestmark = pytest.mark.functional


async def _register(client, alias="site-a", url="https://example.com"):
    response = await client.post("/api/v1/websites", json={"url": url, "alias": alias})
    assert response.status_code == 201
    return response.json()


async def _record_recent(store, alias, statuses):
    now = truncate_to_minute(utcnow())
    for i, status in enumerate(statuses):
        await store.record_probe(alias, status, now - timedelta(minutes=i + 1))


class TestServiceEndpoints:
    """Root, health and metrics."""

    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Uptime Monitor"
        assert "X-Request-ID" in response.headers

    async def test_health_before_first_tick(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["scheduler"] == "stopped"
        assert data["last_tick"] is None

    async def test_health_reports_last_tick(self, client, test_app):
        await _register(client)
        await test_app.state.scheduler.run_tick()

        data = (await client.get("/health")).json()

        assert data["last_tick"]["websites"] == 1
        assert data["last_tick"]["recorded"] == 1
        assert data["last_tick"]["abandoned"] is False

    async def test_metrics(self, client, test_app):
        await _register(client)
        await test_app.state.scheduler.run_tick()

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'uptime_monitor_probes_total{outcome="up"} 1.0' in response.text


class TestWebsites:
    """Registration, lookup and deletion."""

    async def test_register(self, client):
        data = await _register(client)

        assert data["alias"] == "site-a"
        assert data["url"] == "https://example.com"
        assert isinstance(data["id"], int)

    async def test_url_is_stored_as_given(self, client):
        data = await _register(client, url="https://example.com/status?full=1")

        assert data["url"] == "https://example.com/status?full=1"

    async def test_duplicate_alias_conflicts(self, client):
        await _register(client)

        response = await client.post(
            "/api/v1/websites",
            json={"url": "https://other.example.org", "alias": "site-a"}
        )

        assert response.status_code == 409
        assert "site-a" in response.json()["detail"]
        website = (await client.get("/api/v1/websites/site-a")).json()
        assert website["url"] == "https://example.com"

    @pytest.mark.parametrize("payload", [
        {"url": "not-a-url", "alias": "site-a"},
        {"url": "ftp://example.com", "alias": "site-a"},
        {"url": "https://example.com", "alias": ""},
        {"url": "https://example.com", "alias": "x" * 76},
        {"url": "https://example.com", "alias": "has space"},
        {"alias": "site-a"},
    ])
    async def test_invalid_payload(self, client, payload):
        response = await client.post("/api/v1/websites", json=payload)

        assert response.status_code == 422

    async def test_list_includes_uptime(self, client, test_app):
        await _register(client, "site-a")
        await _register(client, "site-b", "https://b.example.com")
        await _record_recent(test_app.state.store, "site-a", [200, 200, 503])

        response = await client.get("/api/v1/websites")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        by_alias = {w["alias"]: w for w in data["websites"]}
        assert by_alias["site-a"]["uptime_24h"] == 66.67
        assert by_alias["site-b"]["uptime_24h"] is None

    async def test_list_skips_website_deleted_mid_request(self, client, test_app):
        await _register(client, "site-a")
        await _register(client, "site-b", "https://b.example.com")
        real_aggregator = test_app.state.aggregator

        async def window_stats(alias, window):
            if alias == "site-a":
                raise NotFoundError(alias)
            return await real_aggregator.window_stats(alias, window)

        aggregator = MagicMock()
        aggregator.window_stats = AsyncMock(side_effect=window_stats)
        test_app.state.aggregator = aggregator

        response = await client.get("/api/v1/websites")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert [w["alias"] for w in data["websites"]] == ["site-b"]

    async def test_get_unknown(self, client):
        response = await client.get("/api/v1/websites/missing")

        assert response.status_code == 404
        assert "request_id" in response.json()

    async def test_delete(self, client, test_app):
        await _register(client)
        await _record_recent(test_app.state.store, "site-a", [200])

        response = await client.delete("/api/v1/websites/site-a")

        assert response.status_code == 204
        assert (await client.get("/api/v1/websites/site-a")).status_code == 404
        assert (await client.get("/api/v1/stats/uptime/site-a")).status_code == 404

    async def test_delete_unknown(self, client):
        response = await client.delete("/api/v1/websites/missing")

        assert response.status_code == 404

    async def test_storage_unavailable(self, client, test_app):
        store = MagicMock()
        store.list_websites = AsyncMock(side_effect=TransientError("list_websites", "connection refused"))
        test_app.state.store = store

        response = await client.get("/api/v1/websites")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "30"


class TestStats:
    """Uptime, series and incidents."""

    async def test_uptime(self, client, test_app):
        await _register(client)
        await _record_recent(test_app.state.store, "site-a", [200, None, 503])

        response = await client.get("/api/v1/stats/uptime/site-a")

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "24h"
        assert data["uptime_percentage"] == 33.33
        assert data["total_checks"] == 3
        assert data["successful_checks"] == 1
        assert data["failed_checks"] == 2

    async def test_uptime_30d(self, client, test_app):
        await _register(client)
        store = test_app.state.store
        await store.record_probe("site-a", None, utcnow() - timedelta(days=3))
        await _record_recent(store, "site-a", [200])

        day = (await client.get("/api/v1/stats/uptime/site-a?period=24h")).json()
        month = (await client.get("/api/v1/stats/uptime/site-a?period=30d")).json()

        assert day["uptime_percentage"] == 100.0
        assert month["uptime_percentage"] == 50.0

    async def test_uptime_without_data(self, client):
        await _register(client)

        response = await client.get("/api/v1/stats/uptime/site-a")

        assert response.status_code == 422
        assert "No probe data" in response.json()["detail"]

    async def test_uptime_unknown_alias(self, client):
        response = await client.get("/api/v1/stats/uptime/missing")

        assert response.status_code == 404

    async def test_invalid_period(self, client):
        await _register(client)

        response = await client.get("/api/v1/stats/uptime/site-a?period=7d")

        assert response.status_code == 422

    async def test_hourly_series(self, client, test_app):
        await _register(client)
        await _record_recent(test_app.state.store, "site-a", [200])

        response = await client.get("/api/v1/stats/series/site-a?bucket=hour")

        assert response.status_code == 200
        points = response.json()["points"]
        assert len(points) == 24
        assert sum(p["total_checks"] for p in points) == 1
        assert sum(1 for p in points if p["uptime_percentage"] is None) == 23

    async def test_daily_series(self, client):
        await _register(client)

        response = await client.get("/api/v1/stats/series/site-a?bucket=day")

        assert response.status_code == 200
        data = response.json()
        assert data["bucket"] == "day"
        assert len(data["points"]) == 30

    async def test_incidents(self, client, test_app):
        await _register(client)
        await _record_recent(test_app.state.store, "site-a", [503, 200, None])

        response = await client.get("/api/v1/stats/incidents/site-a")

        assert response.status_code == 200
        data = response.json()
        assert data["total_incidents"] == 2
        # Newest first
        assert [i["status"] for i in data["incidents"]] == [503, None]


class TestRateLimiting:
    """Per-client limits from slowapi."""

    async def test_delete_is_rate_limited(self, client):
        statuses = [
            (await client.delete("/api/v1/websites/missing")).status_code
            for _ in range(21)
        ]

        assert statuses[:20] == [404] * 20
        assert statuses[20] == 429
