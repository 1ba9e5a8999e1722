"""HTTP response model and serializer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"
TEXT_PLAIN = "text/plain"

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    201: "Created",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    500: "Internal Server Error",
}


class Status(enum.IntEnum):
    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500

    @property
    def reason(self) -> str:
        return REASON_PHRASES[self.value]


@dataclass(slots=True)
class HTTPResponse:
    status: Status
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""

    def __post_init__(self) -> None:
        self.status = Status(self.status)
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    @classmethod
    def text(cls, body: bytes | str, status: Status = Status.OK) -> "HTTPResponse":
        """Build a ``text/plain`` response around ``body``."""
        return cls(status=status, headers={CONTENT_TYPE: TEXT_PLAIN}, body=body)

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.status.value} {self.status.reason}"

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.1 wire format bytes."""
        head, body = prepare_response(self)
        return head + body


def prepare_response(response: HTTPResponse) -> tuple[bytes, bytes]:
    """Finalize headers and return the encoded head and body separately."""
    body = response.body
    if isinstance(body, str):
        body = body.encode("utf-8")

    normalized_headers = dict(response.headers)
    normalized_headers[CONTENT_LENGTH] = str(len(body))

    header_lines = [response.status_line]
    header_lines.extend(f"{key}: {value}" for key, value in normalized_headers.items())
    head = "\r\n".join(header_lines).encode("iso-8859-1") + b"\r\n\r\n"
    return head, body
