"""Tests for the HTTP prober."""

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as LocalServer

from uptime_monitor.core.prober import Outcome, Prober, is_success

from tests.conftest import FakeTransport

URL = "https://example.com"


@pytest.mark.unit
class TestClassification:
    """Status classification."""

    @pytest.mark.parametrize("status,expected", [
        (200, True),
        (301, True),
        (404, True),
        (499, True),
        (500, False),
        (503, False),
        (None, False),
    ])
    def test_default_threshold(self, status, expected):
        assert is_success(status) is expected

    def test_custom_threshold(self):
        assert is_success(404, threshold=400) is False
        assert is_success(399, threshold=400) is True


@pytest.mark.unit
class TestProbeOutcomes:
    """Outcomes produced from a fake transport."""

    async def test_success_response(self):
        prober = Prober(transport=FakeTransport({URL: 200}))

        outcome = await prober.probe(URL, timeout=1)

        assert outcome.status == 200
        assert outcome.succeeded is True
        assert outcome.error_message is None
        assert outcome.response_time is not None

    async def test_server_error_response_keeps_status(self):
        prober = Prober(transport=FakeTransport({URL: 503}))

        outcome = await prober.probe(URL, timeout=1)

        assert outcome.status == 503
        assert outcome.succeeded is False
        assert "503" in outcome.error_message

    async def test_threshold_is_configurable(self):
        prober = Prober(success_threshold=400, transport=FakeTransport({URL: 404}))

        outcome = await prober.probe(URL, timeout=1)

        assert outcome.status == 404
        assert outcome.succeeded is False

    async def test_timeout_is_unreachable(self):
        prober = Prober(transport=FakeTransport({URL: 5.0}))

        outcome = await prober.probe(URL, timeout=0.05)

        assert outcome.status is None
        assert outcome.succeeded is False
        assert "timed out" in outcome.error_message

    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("connection refused"),
        aiohttp.ServerDisconnectedError(),
        aiohttp.InvalidURL("not a url"),
        OSError("Name or service not known"),
        RuntimeError("boom"),
    ])
    async def test_transport_failures_never_raise(self, error):
        prober = Prober(transport=FakeTransport({URL: error}))

        outcome = await prober.probe(URL, timeout=1)

        assert outcome.status is None
        assert outcome.succeeded is False
        assert outcome.error_message

    async def test_status_is_null_only_for_transport_failures(self):
        transport = FakeTransport({
            "https://up": 200,
            "https://down": 502,
            "https://gone": aiohttp.ClientConnectionError("refused"),
        })
        prober = Prober(transport=transport)

        outcomes = {url: await prober.probe(url, timeout=1) for url in transport.responses}

        assert outcomes["https://down"].status == 502
        assert outcomes["https://down"].succeeded is False
        assert outcomes["https://gone"].status is None
        for outcome in outcomes.values():
            if outcome.status is None:
                assert outcome.succeeded is False


@pytest.mark.unit
class TestAiohttpTransport:
    """The default transport against a local HTTP server."""

    @pytest.fixture
    async def server(self):
        async def ok(request):
            return web.Response(text="ok")

        async def broken(request):
            return web.Response(status=503)

        async def moved(request):
            raise web.HTTPFound("/ok")

        app = web.Application()
        app.router.add_get("/ok", ok)
        app.router.add_get("/broken", broken)
        app.router.add_get("/moved", moved)

        server = LocalServer(app)
        await server.start_server()
        yield server
        await server.close()

    async def test_real_responses(self, server):
        async with Prober() as prober:
            ok = await prober.probe(str(server.make_url("/ok")), timeout=5)
            broken = await prober.probe(str(server.make_url("/broken")), timeout=5)
            moved = await prober.probe(str(server.make_url("/moved")), timeout=5)

        assert (ok.status, ok.succeeded) == (200, True)
        assert (broken.status, broken.succeeded) == (503, False)
        assert (moved.status, moved.succeeded) == (200, True)

    async def test_connection_refused(self, server):
        url = str(server.make_url("/ok"))
        await server.close()

        async with Prober() as prober:
            outcome = await prober.probe(url, timeout=5)

        assert outcome.status is None
        assert outcome.succeeded is False

    async def test_session_lifecycle(self):
        prober = Prober(max_connections=3)

        await prober.start()
        assert prober.session is not None
        assert prober.session.connector.limit == 3

        await prober.close()
        assert prober.session is None


@pytest.mark.unit
def test_unreachable_outcome():
    outcome = Outcome.unreachable("DNS lookup failed", response_time=0.5)

    assert outcome.status is None
    assert outcome.succeeded is False
    assert outcome.response_time == 0.5
