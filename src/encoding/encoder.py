"""Per-adapter table deciding how a response body is written to the envelope."""

import base64
from collections.abc import Iterable

from src.encoding.options import ResponseContentEncoding

DEFAULT_CONTENT_TYPE_ENCODINGS: dict[str, ResponseContentEncoding] = {
    "text/plain": ResponseContentEncoding.DEFAULT,
    "text/xml": ResponseContentEncoding.DEFAULT,
    "application/xml": ResponseContentEncoding.DEFAULT,
    "application/json": ResponseContentEncoding.DEFAULT,
    "text/html": ResponseContentEncoding.DEFAULT,
    "text/css": ResponseContentEncoding.DEFAULT,
    "text/javascript": ResponseContentEncoding.DEFAULT,
    "text/ecmascript": ResponseContentEncoding.DEFAULT,
    "text/markdown": ResponseContentEncoding.DEFAULT,
    "text/csv": ResponseContentEncoding.DEFAULT,
    "application/octet-stream": ResponseContentEncoding.BASE64,
    "image/png": ResponseContentEncoding.BASE64,
    "image/gif": ResponseContentEncoding.BASE64,
    "image/jpeg": ResponseContentEncoding.BASE64,
    "image/jpg": ResponseContentEncoding.BASE64,
    "image/x-icon": ResponseContentEncoding.BASE64,
    "application/zip": ResponseContentEncoding.BASE64,
    "application/pdf": ResponseContentEncoding.BASE64,
}

DEFAULT_CONTENT_ENCODING_ENCODINGS: dict[str, ResponseContentEncoding] = {
    "gzip": ResponseContentEncoding.BASE64,
    "deflate": ResponseContentEncoding.BASE64,
    "br": ResponseContentEncoding.BASE64,
}


def _media_type(content_type: str) -> str:
    """'text/html; charset=utf-8' -> 'text/html'"""
    return content_type.split(";", 1)[0].strip().lower()


class ResponseEncoder:
    """Maps Content-Type / Content-Encoding to a body encoding.

    Content-type lookups ignore parameters and case. When the content type
    does not force base64, a known Content-Encoding (gzip, br, ...) can.
    """

    def __init__(self, default_encoding: ResponseContentEncoding = ResponseContentEncoding.DEFAULT):
        self.default_encoding = default_encoding
        self._for_content_type = dict(DEFAULT_CONTENT_TYPE_ENCODINGS)
        self._for_content_encoding = dict(DEFAULT_CONTENT_ENCODING_ENCODINGS)

    def register_for_content_type(self, content_type: str, encoding: ResponseContentEncoding | str) -> None:
        self._for_content_type[_media_type(content_type)] = ResponseContentEncoding.parse(encoding)

    def register_for_content_encoding(self, content_encoding: str, encoding: ResponseContentEncoding | str) -> None:
        self._for_content_encoding[content_encoding.strip().lower()] = ResponseContentEncoding.parse(encoding)

    def for_content_type(self, content_type: str | None) -> ResponseContentEncoding:
        if not content_type:
            return self.default_encoding
        return self._for_content_type.get(_media_type(content_type), self.default_encoding)

    def for_content_encoding(self, content_encoding: str | None) -> ResponseContentEncoding:
        if not content_encoding:
            return ResponseContentEncoding.DEFAULT
        return self._for_content_encoding.get(
            content_encoding.strip().lower(), ResponseContentEncoding.DEFAULT
        )

    def resolve(self, content_type: str | None, content_encoding: str | None) -> ResponseContentEncoding:
        encoding = self.for_content_type(content_type)
        if encoding is not ResponseContentEncoding.BASE64 and content_encoding:
            encoding = self.for_content_encoding(content_encoding)
        return encoding

    def encode(self, body: bytes, headers: Iterable[tuple[bytes, bytes]]) -> tuple[str, bool]:
        """Render a raw ASGI body for the envelope.

        Returns the body string and the ``isBase64Encoded`` flag.
        """
        if not body:
            return "", False

        content_type = content_encoding = None
        for name, value in headers:
            lowered = name.decode("latin-1").lower()
            if lowered == "content-type":
                content_type = value.decode("latin-1")
            elif lowered == "content-encoding":
                content_encoding = value.decode("latin-1")

        if self.resolve(content_type, content_encoding) is ResponseContentEncoding.DEFAULT:
            try:
                return body.decode("utf-8"), False
            except UnicodeDecodeError:
                pass  # not text after all, fall through to base64

        return base64.b64encode(body).decode("ascii"), True
