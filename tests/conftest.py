"""Shared fixtures for the Lambda hosting test suite."""

import asyncio
import json

import httpx
import pytest

from src.config.settings import get_settings
from src.runtime.client import Invocation, RuntimeApiClient
from src.runtime.context import LambdaContext


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(LAMBDA_EVENT_SOURCE="rest_api", LIFESPAN="off")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def isolate_runtime_env(monkeypatch):
    """Env vars written by the invoke loop and entry points are restored after each test."""
    for name in ("_X_AMZN_TRACE_ID", "AWS_EXECUTION_ENV"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def asgi_loop():
    """Current event loop for Mangum's synchronous cycles.

    Async tests elsewhere in the suite may leave the main thread without one.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    asyncio.set_event_loop(None)
    loop.close()


@pytest.fixture
def lambda_context() -> LambdaContext:
    return LambdaContext(
        aws_request_id="req-0001",
        invoked_function_arn="arn:aws:lambda:us-east-1:123456789012:function:sample",
        function_name="sample",
    )


@pytest.fixture
def rest_api_event() -> dict:
    """API Gateway REST API (payload v1) proxy event."""
    return {
        "resource": "/{proxy+}",
        "path": "/echo",
        "httpMethod": "POST",
        "headers": {
            "Content-Type": "application/json",
            "Host": "abc123.execute-api.us-east-1.amazonaws.com",
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Port": "443",
        },
        "multiValueHeaders": {
            "Content-Type": ["application/json"],
            "Host": ["abc123.execute-api.us-east-1.amazonaws.com"],
            "X-Forwarded-Proto": ["https"],
            "X-Forwarded-Port": ["443"],
        },
        "queryStringParameters": {"name": "lambda"},
        "multiValueQueryStringParameters": {"name": ["lambda"]},
        "pathParameters": {"proxy": "echo"},
        "stageVariables": None,
        "requestContext": {
            "resourcePath": "/{proxy+}",
            "httpMethod": "POST",
            "path": "/prod/echo",
            "stage": "prod",
            "requestId": "c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
            "identity": {"sourceIp": "203.0.113.10"},
        },
        "body": json.dumps({"hello": "world"}),
        "isBase64Encoded": False,
    }


@pytest.fixture
def http_api_v2_event() -> dict:
    """API Gateway HTTP API (payload v2.0) event."""
    return {
        "version": "2.0",
        "routeKey": "$default",
        "rawPath": "/echo",
        "rawQueryString": "name=lambda",
        "cookies": ["session=abc"],
        "headers": {
            "content-type": "application/json",
            "host": "api-id.execute-api.us-east-1.amazonaws.com",
            "x-forwarded-proto": "https",
            "x-forwarded-port": "443",
        },
        "queryStringParameters": {"name": "lambda"},
        "requestContext": {
            "accountId": "123456789012",
            "apiId": "api-id",
            "domainName": "api-id.execute-api.us-east-1.amazonaws.com",
            "http": {
                "method": "POST",
                "path": "/echo",
                "protocol": "HTTP/1.1",
                "sourceIp": "203.0.113.10",
                "userAgent": "pytest",
            },
            "requestId": "JKJaXmPLvHcESHA=",
            "routeKey": "$default",
            "stage": "$default",
            "timeEpoch": 1700000000000,
        },
        "body": json.dumps({"hello": "world"}),
        "isBase64Encoded": False,
    }


@pytest.fixture
def alb_event() -> dict:
    """Application Load Balancer target-group event (single-value headers)."""
    return {
        "requestContext": {
            "elb": {
                "targetGroupArn": (
                    "arn:aws:elasticloadbalancing:us-east-1:123456789012:"
                    "targetgroup/lambda-target/6d0ecf831eec9f09"
                ),
            },
        },
        "httpMethod": "GET",
        "path": "/health",
        "queryStringParameters": {},
        "headers": {
            "host": "lb-123.us-east-1.elb.amazonaws.com",
            "x-forwarded-for": "203.0.113.10",
            "x-forwarded-port": "443",
            "x-forwarded-proto": "https",
        },
        "body": "",
        "isBase64Encoded": False,
    }


class RuntimeApiStub:
    """In-memory Lambda Runtime API served through httpx.MockTransport."""

    def __init__(self, events: list[tuple[str, dict]]):
        self.pending = list(events)
        self.responses: dict[str, bytes] = {}
        self.errors: dict[str, dict] = {}
        self.error_types: dict[str, str] = {}
        self.init_errors: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/2018-06-01/runtime")
        if path == "/invocation/next":
            request_id, event = self.pending.pop(0)
            return httpx.Response(
                200,
                content=json.dumps(event).encode(),
                headers={
                    "Lambda-Runtime-Aws-Request-Id": request_id,
                    "Lambda-Runtime-Deadline-Ms": "4102444800000",
                    "Lambda-Runtime-Invoked-Function-Arn": "arn:aws:lambda:us-east-1:123456789012:function:sample",
                    "Lambda-Runtime-Trace-Id": f"Root=1-trace-{request_id}",
                },
            )
        if path == "/init/error":
            self.init_errors.append(json.loads(request.content))
            return httpx.Response(202, json={"status": "OK"})

        _, _, request_id, kind = path.split("/")
        if kind == "response":
            self.responses[request_id] = request.content
        else:
            self.errors[request_id] = json.loads(request.content)
            self.error_types[request_id] = request.headers["Lambda-Runtime-Function-Error-Type"]
        return httpx.Response(202, json={"status": "OK"})

    def client(self) -> RuntimeApiClient:
        return RuntimeApiClient("127.0.0.1:9001", transport=httpx.MockTransport(self))


@pytest.fixture
def runtime_api():
    """Factory fixture: build a RuntimeApiStub for a list of (request_id, event)."""
    return RuntimeApiStub


def make_invocation(request_id: str, event: dict, **kwargs) -> Invocation:
    return Invocation(request_id=request_id, payload=json.dumps(event).encode(), **kwargs)
