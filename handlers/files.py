"""File resource handler: read, create and delete files under the base directory."""

from __future__ import annotations

import logging

from file_store import FileStore
from request import HTTPRequest, Method
from response import HTTPResponse, Status

FILES_PREFIX = "/files/"

logger = logging.getLogger(__name__)


def is_safe_file_name(name: str) -> bool:
    """Reject empty names, parent-directory names and anything addressing a subdirectory."""
    return bool(name) and not name.startswith("..") and "/" not in name


class FileResourceHandler:
    def __init__(self, store: FileStore) -> None:
        self._store = store

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        name = request.path.removeprefix(FILES_PREFIX)
        if not is_safe_file_name(name):
            return HTTPResponse(status=Status.BAD_REQUEST)

        if request.method == Method.GET:
            return self._read(name)
        if request.method == Method.POST:
            return self._create(name, request.body)
        if request.method == Method.DELETE:
            return self._delete(name)
        return HTTPResponse(status=Status.METHOD_NOT_ALLOWED)

    def _read(self, name: str) -> HTTPResponse:
        if not self._store.exists(name):
            return HTTPResponse(status=Status.NOT_FOUND)
        try:
            contents = self._store.read(name)
        except FileNotFoundError:
            return HTTPResponse(status=Status.NOT_FOUND)
        except OSError:
            logger.exception("Failed to read file %r", name)
            return HTTPResponse(status=Status.INTERNAL_SERVER_ERROR)
        return HTTPResponse.text(contents)

    def _create(self, name: str, body: bytes) -> HTTPResponse:
        try:
            self._store.create(name, body)
        except FileExistsError:
            return HTTPResponse(status=Status.CONFLICT)
        except OSError:
            logger.exception("Failed to create file %r", name)
            return HTTPResponse(status=Status.INTERNAL_SERVER_ERROR)
        return HTTPResponse(status=Status.CREATED)

    def _delete(self, name: str) -> HTTPResponse:
        if not self._store.exists(name):
            return HTTPResponse(status=Status.NOT_FOUND)
        try:
            self._store.remove(name)
        except FileNotFoundError:
            return HTTPResponse(status=Status.NOT_FOUND)
        except OSError:
            logger.exception("Failed to delete file %r", name)
            return HTTPResponse(status=Status.INTERNAL_SERVER_ERROR)
        return HTTPResponse(status=Status.OK)
