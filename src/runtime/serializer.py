"""Payload serializer for invoke-loop events and responses."""

import json
from typing import Any, Protocol


class LambdaSerializer(Protocol):
    def deserialize(self, payload: bytes) -> Any: ...

    def serialize(self, value: Any) -> bytes: ...


class JsonSerializer:
    """UTF-8 JSON in both directions."""

    def deserialize(self, payload: bytes) -> Any:
        if not payload:
            return None
        return json.loads(payload)

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8")
