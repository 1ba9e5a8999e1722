"""HTTP request model and line-oriented parser."""

from __future__ import annotations

import enum
import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO

from config import MAX_BODY_BYTES, MAX_HEADER_COUNT, MAX_LINE_BYTES

HTTP_VERSION = "HTTP/1.1"
HEADER_SEPARATOR = ": "
CONTENT_LENGTH = "Content-Length"
USER_AGENT = "User-Agent"


class Method(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class HTTPRequestParseError(ValueError):
    """Request parse error carrying an HTTP status code."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConnectionClosedError(HTTPRequestParseError):
    """Raised when the peer closes the stream before sending any bytes."""


@dataclass(frozen=True, slots=True)
class HTTPRequest:
    method: Method
    path: str
    http_version: str = HTTP_VERSION
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "HTTPRequest":
        """Parse exactly one request from a readable binary stream.

        Header lines are consumed one at a time until a blank line or end of
        stream. The body is read only when ``Content-Length`` declares one, so
        a bodiless request never waits for bytes that will not arrive. A body
        cut short by EOF or a read timeout keeps the bytes that did arrive.
        """
        first_line = _read_line(stream)
        if not first_line:
            raise ConnectionClosedError("Connection closed before request line")

        method, path, http_version = _parse_request_line(first_line)

        headers: dict[str, str] = {}
        while True:
            raw_line = _read_line(stream)
            line = _strip_line_ending(raw_line)
            if not line:
                break
            if len(headers) >= MAX_HEADER_COUNT:
                raise HTTPRequestParseError("Too many headers")
            name, value = _parse_header_line(line)
            headers[name] = value

        content_length = declared_content_length(headers)
        if content_length > MAX_BODY_BYTES:
            raise HTTPRequestParseError("Body too large")

        return cls(
            method=method,
            path=path,
            http_version=http_version,
            headers=MappingProxyType(headers),
            body=_read_body(stream, content_length),
        )

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse raw HTTP request bytes into a structured request object."""
        return cls.from_stream(io.BytesIO(raw))


def declared_content_length(headers: Mapping[str, str]) -> int:
    """Return the declared body length, treating absent or non-numeric values as 0."""
    value = headers.get(CONTENT_LENGTH, "")
    if not (value.isascii() and value.isdigit()):
        return 0
    return int(value)


def _read_line(stream: BinaryIO) -> bytes:
    line = stream.readline(MAX_LINE_BYTES + 1)
    if len(line) > MAX_LINE_BYTES and not line.endswith(b"\n"):
        raise HTTPRequestParseError("Line too long")
    return line


def _read_body(stream: BinaryIO, length: int) -> bytes:
    """Collect up to ``length`` body bytes, stopping early at EOF or a read timeout."""
    body = bytearray()
    while len(body) < length:
        try:
            chunk = stream.read1(length - len(body))
        except TimeoutError:
            break
        if not chunk:
            break
        body.extend(chunk)
    return bytes(body)


def _strip_line_ending(raw_line: bytes) -> str:
    return raw_line.rstrip(b"\r\n").decode("iso-8859-1")


def _parse_request_line(raw_line: bytes) -> tuple[Method, str, str]:
    parts = _strip_line_ending(raw_line).split(" ")
    if len(parts) != 3 or not all(parts):
        raise HTTPRequestParseError("Invalid request line")

    method_token, path, http_version = parts
    try:
        method = Method(method_token)
    except ValueError as exc:
        raise HTTPRequestParseError("Unsupported method") from exc

    if http_version != HTTP_VERSION:
        raise HTTPRequestParseError("Unsupported HTTP version")

    return method, path, http_version


def _parse_header_line(line: str) -> tuple[str, str]:
    name, separator, value = line.partition(HEADER_SEPARATOR)
    if not separator or not name:
        raise HTTPRequestParseError("Malformed header line")
    return name, value
