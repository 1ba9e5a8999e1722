"""Thread-safe in-memory counters for connections and responses."""

from __future__ import annotations

import threading
from collections import Counter
from typing import Any


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._open_connections = 0
        self._total_connections = 0
        self._total_requests = 0
        self._bytes_sent_total = 0
        self._status_counts: Counter[str] = Counter()
        self._read_errors_by_type: Counter[str] = Counter()
        self._write_errors_by_type: Counter[str] = Counter()

    def connection_opened(self) -> None:
        with self._lock:
            self._open_connections += 1
            self._total_connections += 1

    def connection_closed(self) -> None:
        with self._lock:
            self._open_connections = max(0, self._open_connections - 1)

    def record_response(self, *, status_code: int, bytes_sent: int) -> None:
        with self._lock:
            self._total_requests += 1
            self._bytes_sent_total += bytes_sent
            self._status_counts[str(status_code)] += 1

    def record_read_error(self, error_type: str) -> None:
        with self._lock:
            self._read_errors_by_type[error_type] += 1

    def record_write_error(self, error_type: str) -> None:
        with self._lock:
            self._write_errors_by_type[error_type] += 1

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "open_connections": self._open_connections,
                "total_connections": self._total_connections,
                "total_requests": self._total_requests,
                "bytes_sent_total": self._bytes_sent_total,
                "status_counts": dict(self._status_counts),
                "read_errors_by_type": dict(self._read_errors_by_type),
                "write_errors_by_type": dict(self._write_errors_by_type),
            }
