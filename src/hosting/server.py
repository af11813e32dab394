"""Runtime-support server: ASGI app lifecycle bridged to the Lambda invoke loop.

``start()`` does not bind a socket. It starts the app's lifespan, wraps the
event-source adapter as the invoke-loop handler and blocks until the loop
exits.
"""

from contextlib import ExitStack
from typing import Any

from mangum.protocols import LifespanCycle
from mangum.types import ASGI

from src.adapters.adapter import EventAdapter, build_lambda_config, register_encoding_options
from src.adapters.variants import EventSource, get_variant
from src.config.settings import Settings, get_settings
from src.encoding.options import EncodingOptions
from src.hosting.environment import set_execution_environment
from src.hosting.services import ServiceProvider
from src.logging.hosting import get_logger
from src.runtime.bootstrap import HandlerWrapper, LambdaBootstrap
from src.runtime.client import RuntimeApiClient
from src.runtime.serializer import JsonSerializer, LambdaSerializer

logger = get_logger("server")

LIFESPAN_MODES = ("auto", "on", "off")


class LambdaRuntimeSupportServer:
    def __init__(
        self,
        app: ASGI,
        event_source: EventSource | str,
        *,
        serializer: LambdaSerializer | None = None,
        encoding_options: EncodingOptions | None = None,
        runtime_client: RuntimeApiClient | None = None,
        lifespan: str = "auto",
        api_gateway_base_path: str = "/",
        exclude_headers: list[str] | None = None,
    ):
        if lifespan not in LIFESPAN_MODES:
            raise ValueError(f"Invalid lifespan mode '{lifespan}'. Choices are: auto|on|off")

        self.app = app
        self.variant = get_variant(event_source)
        self.serializer = serializer or JsonSerializer()
        self.encoding_options = encoding_options
        self.lifespan = lifespan
        self.config = build_lambda_config(api_gateway_base_path, exclude_headers)
        self._runtime_client = runtime_client

        self._adapter: EventAdapter | None = None
        self._bootstrap: LambdaBootstrap | None = None
        self._lifespan_stack: ExitStack | None = None
        self._lifespan_state: dict[str, Any] | None = None
        self._started = False

    @classmethod
    def from_service_provider(
        cls, provider: ServiceProvider, app: ASGI, event_source: EventSource | str, **kwargs
    ) -> "LambdaRuntimeSupportServer":
        """Resolve the serializer (required) and encoding options (optional) from a container."""
        return cls(
            app,
            event_source,
            serializer=provider.get_required_service(LambdaSerializer),
            encoding_options=provider.get_service(EncodingOptions),
            **kwargs,
        )

    @classmethod
    def from_settings(cls, app: ASGI, settings: Settings | None = None, **kwargs) -> "LambdaRuntimeSupportServer":
        settings = settings or get_settings()
        kwargs.setdefault("event_source", settings.lambda_event_source)
        kwargs.setdefault("encoding_options", EncodingOptions.from_settings(settings))
        kwargs.setdefault("lifespan", settings.lifespan)
        kwargs.setdefault("api_gateway_base_path", settings.api_gateway_base_path)
        kwargs.setdefault("exclude_headers", settings.exclude_headers_list)
        return cls(app, **kwargs)

    @property
    def started(self) -> bool:
        return self._started

    @property
    def event_source(self) -> EventSource:
        return self.variant.source

    def create_adapter(self) -> EventAdapter:
        adapter = EventAdapter(self.app, self.variant, self.config)
        register_encoding_options(adapter, self.encoding_options)
        adapter.lifespan_state = self._lifespan_state
        return adapter

    def create_handler_wrapper(self) -> HandlerWrapper:
        self._adapter = self.create_adapter()
        return HandlerWrapper.for_handler(self._adapter.handle, self.serializer)

    def create_lambda_handler(self) -> EventAdapter:
        """Adapter for the managed Python runtime (``module.handler``).

        The ASGI lifespan is started once here and stays up for the process.
        """
        self._enter_lifespan()
        if self._adapter is None:
            self._adapter = self.create_adapter()
        return self._adapter

    def start(self, max_invocations: int | None = None) -> None:
        """Run the invoke loop. Blocks; may be called once per server."""
        if self._started:
            raise RuntimeError("Server has already been started")
        self._started = True

        client = self._runtime_client or RuntimeApiClient(get_settings().aws_lambda_runtime_api)
        try:
            set_execution_environment()
            self._enter_lifespan()
            wrapper = self.create_handler_wrapper()
        except Exception as exc:
            logger.error("Initialization failed", exc_info=True)
            client.post_init_error(exc)
            raise

        logger.info(
            "Lambda hosting started",
            extra={"log_data": {"event_source": self.variant.source.value, "lifespan": self.lifespan}},
        )
        self._bootstrap = LambdaBootstrap(wrapper, client)
        try:
            self._bootstrap.run(max_invocations=max_invocations)
        finally:
            self._exit_lifespan()
            client.close()

    def stop(self) -> None:
        """Stop after the in-flight event, then shut the app's lifespan down."""
        if self._bootstrap is not None:
            self._bootstrap.stop()
        self._exit_lifespan()

    def _enter_lifespan(self) -> None:
        if self._lifespan_stack is not None or self.lifespan == "off":
            return
        stack = ExitStack()
        cycle = LifespanCycle(self.app, self.lifespan)
        stack.enter_context(cycle)
        self._lifespan_stack = stack
        self._lifespan_state = cycle.lifespan_state
        if self._adapter is not None:
            self._adapter.lifespan_state = self._lifespan_state

    def _exit_lifespan(self) -> None:
        if self._lifespan_stack is None:
            return
        stack, self._lifespan_stack = self._lifespan_stack, None
        stack.close()


def add_lambda_hosting(
    app: ASGI,
    event_source: EventSource | str | None = None,
    settings: Settings | None = None,
    **kwargs,
) -> LambdaRuntimeSupportServer | None:
    """Configure Lambda hosting when running inside Lambda.

    Returns None outside Lambda so the app can be served by a regular ASGI
    server during local development.
    """
    settings = settings or get_settings()
    if not settings.running_in_lambda:
        return None
    if event_source is not None:
        kwargs["event_source"] = event_source
    return LambdaRuntimeSupportServer.from_settings(app, settings, **kwargs)
