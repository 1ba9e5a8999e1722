"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket

from config import BUFFER_SIZE
from request import HTTPRequest
from response import HTTPResponse, prepare_response


class HTTPReadError(Exception):
    """Raised when a client request cannot be read from the socket."""


class SocketTimeoutError(HTTPReadError):
    """Raised when a client times out while sending request bytes."""


def read_http_request(client_socket: socket.socket) -> HTTPRequest:
    """Read and parse exactly one request from ``client_socket``.

    Parse failures propagate as ``HTTPRequestParseError``; a read deadline
    expiring before the headers are complete surfaces as ``SocketTimeoutError``.
    A deadline during the body is absorbed by the parser as a short body.
    """
    with client_socket.makefile("rb", buffering=BUFFER_SIZE) as stream:
        try:
            return HTTPRequest.from_stream(stream)
        except TimeoutError as exc:
            raise SocketTimeoutError("Timed out waiting for request bytes") from exc


def write_http_response(client_socket: socket.socket, response: HTTPResponse) -> int:
    """Write the complete response to a client socket and return the bytes sent."""
    head, body = prepare_response(response)
    client_socket.sendall(head + body)
    return len(head) + len(body)
