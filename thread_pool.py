"""Bounded worker pool for accepted client sockets."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable

ClientAddress = tuple[str, int]
ClientJob = tuple[object, ClientAddress]
ClientHandler = Callable[[object, ClientAddress], None]

logger = logging.getLogger(__name__)


class ThreadPool:
    """Fixed-size thread pool whose bounded queue applies backpressure to submitters."""

    def __init__(self, worker_count: int, queue_size: int, handler: ClientHandler) -> None:
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")

        self._handler = handler
        self._queue: queue.Queue[ClientJob] = queue.Queue(maxsize=queue_size)
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._worker_count = worker_count
        self._shutdown_lock = threading.Lock()
        self._shutdown_started = False

    @property
    def worker_count(self) -> int:
        return self._worker_count

    @property
    def threads(self) -> tuple[threading.Thread, ...]:
        return tuple(self._threads)

    def start(self) -> None:
        for index in range(self._worker_count):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"http-worker-{index}",
                daemon=True,
            )
            self._threads.append(worker)
            worker.start()

    def submit(
        self,
        client_socket: object,
        address: ClientAddress,
        timeout: float | None = None,
    ) -> bool:
        """Queue a client, waiting up to ``timeout`` seconds for room; False if none was made."""
        if self._stop_event.is_set():
            return False
        try:
            self._queue.put((client_socket, address), timeout=timeout)
        except queue.Full:
            return False
        return True

    def shutdown(self) -> None:
        with self._shutdown_lock:
            if self._shutdown_started:
                return
            self._shutdown_started = True

        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout=1.0)

        while True:
            try:
                client_socket, _address = self._queue.get_nowait()
            except queue.Empty:
                return
            close = getattr(client_socket, "close", None)
            if close is not None:
                close()

    def _worker_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                item = self._queue.get(timeout=0.2)
            except queue.Empty:
                continue
            try:
                client_socket, address = item
                self._handler(client_socket, address)
            except Exception:
                logger.exception("Unhandled error in worker %s", threading.current_thread().name)
            finally:
                self._queue.task_done()
