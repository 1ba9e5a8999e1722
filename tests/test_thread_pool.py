"""Tests for the bounded worker pool and the server's pooled mode."""

import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from server import HTTPServer
from state import ServerState
from thread_pool import ThreadPool


def test_thread_pool_starts_fixed_worker_count() -> None:
    pool = ThreadPool(worker_count=3, queue_size=4, handler=lambda _sock, _addr: None)
    pool.start()

    try:
        assert pool.worker_count == 3
        assert len(pool.threads) == 3
        assert all(thread.is_alive() for thread in pool.threads)
    finally:
        pool.shutdown()


def test_thread_pool_submit_returns_false_when_full() -> None:
    pool = ThreadPool(worker_count=1, queue_size=1, handler=lambda _sock, _addr: None)

    assert pool.submit(object(), ("127.0.0.1", 0)) is True
    assert pool.submit(object(), ("127.0.0.1", 1), timeout=0.05) is False


def test_thread_pool_submit_waits_for_room() -> None:
    release = threading.Event()
    handled: list[tuple[str, int]] = []

    def handler(_sock: object, address: tuple[str, int]) -> None:
        release.wait(timeout=2)
        handled.append(address)

    pool = ThreadPool(worker_count=1, queue_size=1, handler=handler)
    pool.start()
    try:
        assert pool.submit(object(), ("127.0.0.1", 0)) is True
        time.sleep(0.3)
        assert pool.submit(object(), ("127.0.0.1", 1)) is True
        threading.Timer(0.2, release.set).start()
        assert pool.submit(object(), ("127.0.0.1", 2), timeout=2.0) is True

        deadline = time.time() + 3
        while len(handled) < 3 and time.time() < deadline:
            time.sleep(0.01)
    finally:
        pool.shutdown()

    assert sorted(port for _host, port in handled) == [0, 1, 2]


def test_thread_pool_survives_handler_errors() -> None:
    handled: list[tuple[str, int]] = []

    def handler(_sock: object, address: tuple[str, int]) -> None:
        if address[1] == 0:
            raise RuntimeError("boom")
        handled.append(address)

    pool = ThreadPool(worker_count=1, queue_size=2, handler=handler)
    pool.start()
    try:
        pool.submit(object(), ("127.0.0.1", 0))
        pool.submit(object(), ("127.0.0.1", 1))

        deadline = time.time() + 2
        while not handled and time.time() < deadline:
            time.sleep(0.01)
    finally:
        pool.shutdown()

    assert handled == [("127.0.0.1", 1)]


def test_submit_after_shutdown_is_refused() -> None:
    pool = ThreadPool(worker_count=1, queue_size=1, handler=lambda _sock, _addr: None)
    pool.start()
    pool.shutdown()

    assert pool.submit(object(), ("127.0.0.1", 0)) is False


class SlowHTTPServer(HTTPServer):
    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        time.sleep(0.2)
        super()._handle_client(client_socket, address)


def _start_server(tmp_path: Path) -> tuple[HTTPServer, threading.Thread]:
    server = SlowHTTPServer(
        port=0,
        state=ServerState.from_directory(tmp_path),
        worker_count=1,
        request_queue_size=1,
    )
    thread = threading.Thread(target=server.start, daemon=True)
    thread.start()

    deadline = time.time() + 2
    while server.port == 0 and time.time() < deadline:
        time.sleep(0.01)

    if server.port == 0:
        raise RuntimeError("Server did not bind to a port")
    return server, thread


def _stop_server(server: HTTPServer, thread: threading.Thread) -> None:
    server.stop()
    thread.join(timeout=2)


def _send_request(host: str, port: int) -> bytes:
    payload = b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"
    with socket.create_connection((host, port), timeout=5) as sock:
        sock.sendall(payload)
        return sock.recv(4096)


def test_saturated_pool_applies_backpressure_instead_of_rejecting(tmp_path: Path) -> None:
    server, thread = _start_server(tmp_path)
    try:
        with ThreadPoolExecutor(max_workers=4) as executor:
            futures = [
                executor.submit(_send_request, server.host, server.port)
                for _ in range(4)
            ]
            responses = [future.result() for future in futures]
    finally:
        _stop_server(server, thread)

    assert all(response.startswith(b"HTTP/1.1 200 OK") for response in responses)


def test_stop_while_waiting_for_pool_room_closes_the_connection(tmp_path: Path) -> None:
    server = HTTPServer(
        port=0,
        state=ServerState.from_directory(tmp_path),
        worker_count=1,
        request_queue_size=1,
    )
    pool = ThreadPool(worker_count=1, queue_size=1, handler=lambda _sock, _addr: None)
    assert pool.submit(object(), ("127.0.0.1", 0)) is True
    server._pool = pool
    server._running = True

    client_socket, peer = socket.socketpair()
    errors: list[BaseException] = []

    def dispatch() -> None:
        try:
            server._dispatch_connection(client_socket, ("127.0.0.1", 1))
        except BaseException as exc:
            errors.append(exc)

    dispatcher = threading.Thread(target=dispatch, daemon=True)
    dispatcher.start()
    try:
        time.sleep(0.3)
        server.stop()
        dispatcher.join(timeout=2)
    finally:
        pool.shutdown()
        peer.close()

    assert errors == []
    assert not dispatcher.is_alive()
    assert server._pool is pool
    assert client_socket.fileno() == -1
