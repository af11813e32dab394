"""Response body encoding configuration.

Lambda response envelopes carry the body as a string. Binary payloads must be
base64-encoded and flagged with ``isBase64Encoded``; text payloads go through
as-is. ``EncodingOptions`` holds the per-deployment overrides for that choice,
keyed by response ``Content-Type`` and ``Content-Encoding``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class ResponseContentEncoding(str, Enum):
    DEFAULT = "default"  # body sent as text
    BASE64 = "base64"

    @classmethod
    def parse(cls, value: "str | ResponseContentEncoding") -> "ResponseContentEncoding":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown response content encoding: {value}")


def _freeze(
    mapping: Mapping[str, "str | ResponseContentEncoding"] | None,
) -> Mapping[str, ResponseContentEncoding] | None:
    if mapping is None:
        return None
    return MappingProxyType(
        {key: ResponseContentEncoding.parse(value) for key, value in mapping.items()}
    )


@dataclass(frozen=True)
class EncodingOptions:
    """Read-only content-type and content-encoding overrides.

    Either mapping may be ``None``, meaning nothing is registered for it.
    """

    response_content_encoding_for_content_type: Mapping[str, ResponseContentEncoding] | None = None
    response_content_encoding_for_content_encoding: Mapping[str, ResponseContentEncoding] | None = None

    def __post_init__(self):
        object.__setattr__(
            self,
            "response_content_encoding_for_content_type",
            _freeze(self.response_content_encoding_for_content_type),
        )
        object.__setattr__(
            self,
            "response_content_encoding_for_content_encoding",
            _freeze(self.response_content_encoding_for_content_encoding),
        )

    @classmethod
    def from_settings(cls, settings) -> "EncodingOptions":
        return cls(
            response_content_encoding_for_content_type=(
                settings.response_content_encoding_for_content_type or None
            ),
            response_content_encoding_for_content_encoding=(
                settings.response_content_encoding_for_content_encoding or None
            ),
        )
