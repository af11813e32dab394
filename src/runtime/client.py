"""Lambda Runtime API client.

Speaks the custom-runtime protocol: long-poll for the next event, then post
either a response or an error for it.
"""

import traceback
from dataclasses import dataclass

import httpx

RUNTIME_API_VERSION = "2018-06-01"

ERROR_CONTENT_TYPE = "application/vnd.aws.lambda.error+json"


@dataclass
class Invocation:
    request_id: str
    payload: bytes
    deadline_ms: int = 0
    invoked_function_arn: str = ""
    trace_id: str = ""
    client_context: str = ""
    cognito_identity: str = ""


def error_payload(exc: BaseException) -> dict:
    """Runtime API error document for an exception."""
    return {
        "errorMessage": str(exc),
        "errorType": type(exc).__name__,
        "stackTrace": [line.rstrip("\n") for line in traceback.format_tb(exc.__traceback__)],
    }


class RuntimeApiClient:
    """Synchronous client; the invoke loop handles one event at a time."""

    def __init__(self, runtime_api: str, transport: httpx.BaseTransport | None = None):
        if not runtime_api:
            raise ValueError("Lambda Runtime API address is not set (AWS_LAMBDA_RUNTIME_API)")
        self._base_url = f"http://{runtime_api}/{RUNTIME_API_VERSION}/runtime"
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            # No read timeout: /next blocks until an event arrives
            self._client = httpx.Client(
                base_url=self._base_url,
                timeout=httpx.Timeout(None, connect=10.0),
                transport=self._transport,
            )
        return self._client

    def next_invocation(self) -> Invocation:
        response = self._get_client().get("/invocation/next")
        response.raise_for_status()
        headers = response.headers
        return Invocation(
            request_id=headers["Lambda-Runtime-Aws-Request-Id"],
            payload=response.content,
            deadline_ms=int(headers.get("Lambda-Runtime-Deadline-Ms", "0")),
            invoked_function_arn=headers.get("Lambda-Runtime-Invoked-Function-Arn", ""),
            trace_id=headers.get("Lambda-Runtime-Trace-Id", ""),
            client_context=headers.get("Lambda-Runtime-Client-Context", ""),
            cognito_identity=headers.get("Lambda-Runtime-Cognito-Identity", ""),
        )

    def post_response(self, request_id: str, payload: bytes) -> None:
        response = self._get_client().post(
            f"/invocation/{request_id}/response",
            content=payload,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()

    def post_error(self, request_id: str, exc: BaseException) -> None:
        self._post_error(f"/invocation/{request_id}/error", exc)

    def post_init_error(self, exc: BaseException) -> None:
        self._post_error("/init/error", exc)

    def _post_error(self, path: str, exc: BaseException) -> None:
        body = error_payload(exc)
        response = self._get_client().post(
            path,
            json=body,
            headers={
                "Content-Type": ERROR_CONTENT_TYPE,
                "Lambda-Runtime-Function-Error-Type": f"Runtime.{body['errorType']}",
            },
        )
        response.raise_for_status()

    def close(self) -> None:
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None
