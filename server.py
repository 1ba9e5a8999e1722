"""Main HTTP server entry point and connection lifecycle orchestration."""

from __future__ import annotations

import argparse
import itertools
import json
import logging
import socket
import sys
import threading
import time

from config import (
    ACCEPT_POLL_SECS,
    FILES_DIRECTORY,
    HOST,
    LISTEN_BACKLOG,
    LOG_FORMAT,
    PORT,
    REQUEST_QUEUE_SIZE,
    SOCKET_TIMEOUT_SECS,
    WORKER_COUNT,
)
from file_store import FileStore
from handlers.basic import ECHO_PATH, ECHO_PREFIX, echo, home, user_agent
from handlers.files import FILES_PREFIX, FileResourceHandler
from metrics import MetricsRegistry
from request import ConnectionClosedError, HTTPRequest, HTTPRequestParseError
from response import HTTPResponse, Status
from router import Router
from socket_handler import SocketTimeoutError, read_http_request, write_http_response
from state import InvalidBaseDirectoryError, ServerState
from thread_pool import ThreadPool

logger = logging.getLogger(__name__)


def build_default_router(state: ServerState) -> Router:
    router = Router()
    router.add_route("/", home)
    router.add_route("/user-agent", user_agent)
    router.add_route(ECHO_PATH, echo)
    router.add_prefix_route(ECHO_PREFIX, echo)
    router.add_prefix_route(FILES_PREFIX, FileResourceHandler(FileStore(state.base_directory)))
    return router


class HTTPServer:
    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        router: Router | None = None,
        *,
        state: ServerState | None = None,
        worker_count: int = WORKER_COUNT,
        request_queue_size: int = REQUEST_QUEUE_SIZE,
        socket_timeout_secs: float = SOCKET_TIMEOUT_SECS,
        log_format: str = LOG_FORMAT,
    ) -> None:
        if worker_count < 0:
            raise ValueError("worker_count cannot be negative")

        self.host = host
        self.port = port
        self.state = state or ServerState.from_directory(FILES_DIRECTORY)
        self.router = router or build_default_router(self.state)
        self.worker_count = worker_count
        self.request_queue_size = request_queue_size
        self.socket_timeout_secs = socket_timeout_secs
        self.log_format = log_format

        self._server_socket: socket.socket | None = None
        self._pool: ThreadPool | None = None
        self._connection_ids = itertools.count(1)
        self._running = False
        self.metrics = MetricsRegistry()

    def start(self) -> None:
        """Listen and hand every accepted connection to its own worker."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(LISTEN_BACKLOG)
            server_socket.settimeout(ACCEPT_POLL_SECS)
            self.port = server_socket.getsockname()[1]

            if self.worker_count > 0:
                self._pool = ThreadPool(
                    worker_count=self.worker_count,
                    queue_size=self.request_queue_size,
                    handler=self._handle_client,
                )
                self._pool.start()

            logger.info(
                "Listening on %s:%s serving files from %s",
                self.host,
                self.port,
                self.state.base_directory,
            )
            self._running = True
            try:
                while self._running:
                    try:
                        client_socket, address = server_socket.accept()
                    except socket.timeout:
                        continue
                    except OSError:
                        break
                    self._dispatch_connection(client_socket, address)
            finally:
                self._running = False
                if self._pool is not None:
                    self._pool.shutdown()
                    self._pool = None

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None

    def _dispatch_connection(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        pool = self._pool
        if pool is None:
            worker = threading.Thread(
                target=self._handle_client,
                args=(client_socket, address),
                name=f"http-conn-{next(self._connection_ids)}",
                daemon=True,
            )
            worker.start()
            return

        while not pool.submit(client_socket, address, timeout=ACCEPT_POLL_SECS):
            if not self._running:
                client_socket.close()
                return

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            self.metrics.connection_opened()
            try:
                if self.socket_timeout_secs > 0:
                    client_socket.settimeout(self.socket_timeout_secs)
                started_at = time.perf_counter()
                try:
                    request = read_http_request(client_socket)
                except ConnectionClosedError:
                    return
                except HTTPRequestParseError as exc:
                    self.metrics.record_read_error(exc.__class__.__name__)
                    logger.debug("Rejecting request from %s: %s", address[0], exc)
                    self._respond(
                        client_socket,
                        address,
                        None,
                        HTTPResponse(status=Status.BAD_REQUEST),
                        started_at,
                    )
                    return
                except SocketTimeoutError as exc:
                    self.metrics.record_read_error(exc.__class__.__name__)
                    logger.warning("Timed out reading request from %s", address[0])
                    return
                except OSError as exc:
                    self.metrics.record_read_error(exc.__class__.__name__)
                    logger.warning("Failed reading request from %s: %s", address[0], exc)
                    return

                response = self._dispatch(request)
                self._respond(client_socket, address, request, response, started_at)
            finally:
                self.metrics.connection_closed()

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        handler = self.router.resolve(request.path)
        if handler is None:
            return HTTPResponse(status=Status.NOT_FOUND)

        try:
            return handler(request)
        except Exception:
            logger.exception("Unhandled error in route handler")
            return HTTPResponse(status=Status.INTERNAL_SERVER_ERROR)

    def _respond(
        self,
        client_socket: socket.socket,
        address: tuple[str, int],
        request: HTTPRequest | None,
        response: HTTPResponse,
        started_at: float,
    ) -> None:
        try:
            bytes_sent = write_http_response(client_socket, response)
        except OSError as exc:
            self.metrics.record_write_error(exc.__class__.__name__)
            logger.warning("Failed writing response to %s: %s", address[0], exc)
            return

        self.metrics.record_response(status_code=response.status.value, bytes_sent=bytes_sent)
        self._log_access(
            address=address,
            method=request.method.value if request is not None else "-",
            path=request.path if request is not None else "-",
            status_code=response.status.value,
            bytes_out=bytes_sent,
            started_at=started_at,
        )

    def _log_access(
        self,
        *,
        address: tuple[str, int],
        method: str,
        path: str,
        status_code: int,
        bytes_out: int,
        started_at: float,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event = {
            "client": address[0],
            "method": method,
            "path": path,
            "status": status_code,
            "bytes_out": bytes_out,
            "duration_ms": round(duration_ms, 3),
        }
        if self.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            "client=%s method=%s path=%s status=%s bytes_out=%s duration_ms=%.2f",
            event["client"],
            event["method"],
            event["path"],
            event["status"],
            event["bytes_out"],
            duration_ms,
        )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the HTTP file server")
    parser.add_argument("--directory", default=FILES_DIRECTORY)
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--workers", type=int, default=WORKER_COUNT)
    parser.add_argument("--timeout", type=float, default=SOCKET_TIMEOUT_SECS)
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        state = ServerState.from_directory(args.directory)
    except InvalidBaseDirectoryError as exc:
        logger.error("%s", exc)
        return 1

    server = HTTPServer(
        host=args.host,
        port=args.port,
        state=state,
        worker_count=args.workers,
        socket_timeout_secs=args.timeout,
        log_format=args.log_format,
    )
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
