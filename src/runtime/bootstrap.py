"""Invoke loop — pulls events from the Runtime API and dispatches them.

One event is processed at a time. Handler failures are reported to the
Runtime API as invocation errors and the loop moves on to the next event.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.logging.hosting import RequestTimer, get_logger, request_id_var
from src.runtime.client import Invocation, RuntimeApiClient
from src.runtime.context import LambdaContext
from src.runtime.serializer import LambdaSerializer

logger = get_logger("runtime")

TRACE_ID_ENV = "_X_AMZN_TRACE_ID"


@dataclass
class HandlerWrapper:
    """Adapts an ``(event, context) -> response`` function to raw payloads."""

    handler: Callable[[Any, Any], Any]
    serializer: LambdaSerializer

    @classmethod
    def for_handler(cls, handler: Callable[[Any, Any], Any], serializer: LambdaSerializer) -> "HandlerWrapper":
        return cls(handler=handler, serializer=serializer)

    def __call__(self, payload: bytes, context: LambdaContext) -> bytes:
        event = self.serializer.deserialize(payload)
        return self.serializer.serialize(self.handler(event, context))


class LambdaBootstrap:
    def __init__(self, handler: HandlerWrapper, client: RuntimeApiClient):
        self._handler = handler
        self._client = client
        self._running = False
        self.invocation_count = 0

    @property
    def running(self) -> bool:
        return self._running

    def run(self, max_invocations: int | None = None) -> None:
        """Block processing events until stop() or max_invocations is reached."""
        self._running = True
        logger.info("Invoke loop started")
        try:
            while self._running:
                invocation = self._client.next_invocation()
                self.invoke(invocation)
                if max_invocations is not None and self.invocation_count >= max_invocations:
                    break
        finally:
            self._running = False
            logger.info("Invoke loop stopped", extra={"log_data": {"invocations": self.invocation_count}})

    def stop(self) -> None:
        """Exit after the in-flight event. A pending /next poll is not interrupted."""
        self._running = False

    def invoke(self, invocation: Invocation) -> None:
        token = request_id_var.set(invocation.request_id)
        if invocation.trace_id:
            os.environ[TRACE_ID_ENV] = invocation.trace_id
        else:
            os.environ.pop(TRACE_ID_ENV, None)

        try:
            with RequestTimer() as timer:
                context = LambdaContext.from_invocation(invocation)
                result = self._handler(invocation.payload, context)
        except Exception as exc:
            logger.error(
                "Invocation failed",
                exc_info=True,
                extra={"log_data": {"error_type": type(exc).__name__}},
            )
            self._client.post_error(invocation.request_id, exc)
        else:
            self._client.post_response(invocation.request_id, result)
            logger.info(
                "Invocation completed",
                extra={"log_data": {"latency_ms": timer.elapsed_ms}},
            )
        finally:
            self.invocation_count += 1
            request_id_var.reset(token)
