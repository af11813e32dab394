"""EventAdapter — runs one Lambda event through an ASGI app.

The variant's Mangum translator turns the trigger envelope into an ASGI scope
and the ASGI response back into the trigger's response envelope. The adapter
adds the body-encoding decision on top.
"""

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from mangum.protocols import HTTPCycle
from mangum.types import ASGI, LambdaConfig

from src.adapters.variants import AdapterVariant
from src.encoding.encoder import ResponseEncoder
from src.encoding.options import EncodingOptions, ResponseContentEncoding
from src.logging.hosting import get_logger

logger = get_logger("adapter")


def build_lambda_config(api_gateway_base_path: str = "/", exclude_headers: list[str] | None = None) -> LambdaConfig:
    return LambdaConfig(
        api_gateway_base_path=api_gateway_base_path or "/",
        # Unused: ResponseEncoder decides the body encoding
        text_mime_types=[],
        exclude_headers=[h.lower() for h in exclude_headers or []],
    )


class EventAdapter:
    """Translates events of a single trigger type for one ASGI app."""

    def __init__(
        self,
        app: ASGI,
        variant: AdapterVariant,
        config: LambdaConfig | None = None,
        encoder: ResponseEncoder | None = None,
    ):
        self.app = app
        self.variant = variant
        self.config = config or build_lambda_config()
        self.encoder = encoder or ResponseEncoder()
        # Set by the server once the ASGI lifespan has started
        self.lifespan_state: dict[str, Any] | None = None

    def register_response_content_encoding_for_content_type(
        self, content_type: str, encoding: ResponseContentEncoding | str
    ) -> None:
        self.encoder.register_for_content_type(content_type, encoding)

    def register_response_content_encoding_for_content_encoding(
        self, content_encoding: str, encoding: ResponseContentEncoding | str
    ) -> None:
        self.encoder.register_for_content_encoding(content_encoding, encoding)

    def handle(self, event: dict, context: Any) -> dict:
        translator_cls = self.variant.translator
        if not translator_cls.infer(event, context, self.config):
            raise ValueError(f"Event is not an {self.variant.label} event")

        translator = translator_cls(event, context, self.config)
        scope = translator.scope
        if self.lifespan_state is not None:
            scope.update({"state": self.lifespan_state.copy()})

        response = HTTPCycle(scope, translator.body)(self.app)
        envelope = translator(response)

        envelope["body"], envelope["isBase64Encoded"] = self.encoder.encode(
            response["body"], response["headers"]
        )
        if self.variant.describe_status:
            envelope["statusDescription"] = _status_description(response["status"])

        logger.debug(
            "Event translated",
            extra={"log_data": {
                "event_source": self.variant.source.value,
                "method": scope.get("method"),
                "path": scope.get("path"),
                "status": response["status"],
                "is_base64_encoded": envelope["isBase64Encoded"],
            }},
        )
        return envelope

    __call__ = handle


def _status_description(status: int) -> str:
    try:
        return f"{status} {HTTPStatus(status).phrase}"
    except ValueError:
        return str(status)


def register_encoding_options(adapter: EventAdapter, options: EncodingOptions | None) -> None:
    """Copy every configured override onto the adapter. Absent mappings are skipped."""
    if options is None:
        return

    by_type: Mapping | None = options.response_content_encoding_for_content_type
    if by_type is not None:
        for content_type, encoding in by_type.items():
            adapter.register_response_content_encoding_for_content_type(content_type, encoding)

    by_encoding: Mapping | None = options.response_content_encoding_for_content_encoding
    if by_encoding is not None:
        for content_encoding, encoding in by_encoding.items():
            adapter.register_response_content_encoding_for_content_encoding(content_encoding, encoding)
