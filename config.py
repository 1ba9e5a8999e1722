"""Configuration constants for the HTTP file server."""

HOST: str = "127.0.0.1"
PORT: int = 4221
FILES_DIRECTORY: str = "."
BUFFER_SIZE: int = 1024
MAX_BODY_BYTES: int = 1024
MAX_LINE_BYTES: int = 8192
MAX_HEADER_COUNT: int = 100
SOCKET_TIMEOUT_SECS: float = 5.0
WORKER_COUNT: int = 0
REQUEST_QUEUE_SIZE: int = 64
LISTEN_BACKLOG: int = 128
ACCEPT_POLL_SECS: float = 0.2
LOG_FORMAT: str = "plain"
