"""Integration tests for src/main.py and src/lambda_handler.py."""

import importlib
import json

import httpx
import pytest

from src.adapters.variants import EventSource
from src.main import PIXEL_PNG, VERSION, app


@pytest.fixture
async def app_client():
    """httpx AsyncClient wired to the sample app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealthEndpoint:

    async def test_health(self, app_client):
        resp = await app_client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["version"] == VERSION
        # ASGITransport does not run the lifespan
        assert data["started_by"] is None


class TestEchoEndpoint:

    async def test_echo(self, app_client):
        resp = await app_client.post("/echo?x=1", content=b"payload", headers={"Content-Type": "text/plain"})
        assert resp.status_code == 200
        data = resp.json()
        assert data == {
            "method": "POST",
            "path": "/echo",
            "query": {"x": "1"},
            "body": "payload",
            "content_type": "text/plain",
        }

    async def test_get_not_allowed(self, app_client):
        resp = await app_client.get("/echo")
        assert resp.status_code == 405


class TestPixelEndpoint:

    async def test_pixel(self, app_client):
        resp = await app_client.get("/pixel.png")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.content == PIXEL_PNG


@pytest.mark.usefixtures("asgi_loop")
class TestLambdaHandler:

    def test_module_handler_serves_alb_events(self, override_settings, alb_event, lambda_context):
        override_settings(LAMBDA_EVENT_SOURCE="application_load_balancer", LIFESPAN="off")
        import src.lambda_handler as lambda_handler
        lambda_handler = importlib.reload(lambda_handler)

        assert lambda_handler.server.event_source is EventSource.APPLICATION_LOAD_BALANCER
        envelope = lambda_handler.handler(alb_event, lambda_context)
        assert envelope["statusCode"] == 200
        assert envelope["statusDescription"] == "200 OK"
        assert json.loads(envelope["body"])["status"] == "healthy"

    def test_module_handler_runs_lifespan(self, override_settings, rest_api_event, lambda_context):
        override_settings(LAMBDA_EVENT_SOURCE="rest_api", LIFESPAN="on")
        import src.lambda_handler as lambda_handler
        lambda_handler = importlib.reload(lambda_handler)

        rest_api_event.update({"path": "/health", "httpMethod": "GET", "body": None})
        try:
            envelope = lambda_handler.handler(rest_api_event, lambda_context)
        finally:
            lambda_handler.server.stop()
        assert json.loads(envelope["body"])["started_by"] == "lifespan"
