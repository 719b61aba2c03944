"""
=============================================================================
FILES HANDLER
=============================================================================

Serves and stores files under the configured directory:

    GET  /files/<name>   → 200 + file bytes, or 404
    POST /files/<name>   → 201 after writing the request body

=============================================================================
HOW THE PATH IS BUILT
=============================================================================

    directory      "/tmp/data/"
    filename       "report.txt"          (second path segment)
                         │
                         ▼
    full path      "/tmp/data/report.txt" = directory + filename

Plain string concatenation. There is no separator normalization and no
containment check:

    directory "/tmp/data"   + "report.txt" → "/tmp/datareport.txt"   (!)

So the directory should end with "/". Since the router splits the path on
"/", a filename can never contain a slash, but ".." is passed straight
through. This handler is NOT safe to expose beyond localhost.

=============================================================================
THE FILESYSTEM CAPABILITY
=============================================================================

The handler never calls os/pathlib directly. It goes through a FileSystem
object with three operations:

    stat(path)         → os.stat_result     (raises OSError, ValueError)
    read(path)         → bytes              (raises OSError, ValueError)
    write(path, data)  → None               (raises OSError, ValueError)

ValueError comes from a path the OS cannot represent, such as one with
an embedded NUL. GET treats it like a missing file (404); POST reports it
as IoFailure (500).

LocalFileSystem is the real one. Tests pass a fake to simulate a file that
vanishes between stat() and read().

=============================================================================
"""

import os
import stat
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import IoFailure, UnsupportedMethod
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, created, not_found


logger = logging.getLogger(__name__)


class FileSystem(ABC):
    """The read/write/stat capability consumed by FilesHandler."""

    @abstractmethod
    def stat(self, path: str) -> os.stat_result:
        """Status of `path`. Raises OSError if it cannot be stat'ed."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Whole contents of `path`."""

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """Create or truncate `path` and write `data` to it."""


class LocalFileSystem(FileSystem):
    """FileSystem backed by the local disk."""

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def read(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write(self, path: str, data: bytes) -> None:
        # "wb" creates or truncates. Concurrent writers: last one wins.
        with open(path, "wb") as f:
            f.write(data)


class FilesHandler:
    """
    Handler for /files/<name>.

    Args:
        filesystem: Storage capability. Defaults to LocalFileSystem().
    """

    def __init__(self, filesystem: Optional[FileSystem] = None):
        self.filesystem = filesystem or LocalFileSystem()

    def handle(self, request: HTTPRequest, directory: str, filename: str) -> HTTPResponse:
        """
        Dispatch on method.

        Raises:
            UnsupportedMethod: Method is neither GET nor POST.
            IoFailure: Read after a successful stat, or write, failed.
        """
        full_path = directory + filename

        if request.method == "GET":
            return self.get(full_path)
        if request.method == "POST":
            return self.post(full_path, request.body)
        raise UnsupportedMethod(request.method, "files")

    def get(self, full_path: str) -> HTTPResponse:
        # ─────────────────────────────────────────────────────────────────
        # STAT: missing or not a regular file → 404
        # ─────────────────────────────────────────────────────────────────
        try:
            info = self.filesystem.stat(full_path)
        except (OSError, ValueError):
            # ValueError: the name holds a NUL byte, which no file can have
            return not_found()

        if not stat.S_ISREG(info.st_mode):
            return not_found()

        # ─────────────────────────────────────────────────────────────────
        # READ: the file was there a moment ago, so failure here is an
        # I/O error, not a 404
        # ─────────────────────────────────────────────────────────────────
        try:
            content = self.filesystem.read(full_path)
        except (OSError, ValueError) as e:
            raise IoFailure(f"Failed to read {full_path}: {e}") from e

        return (ResponseBuilder()
            .octet_stream(content)
            .build())

    def post(self, full_path: str, body: bytes) -> HTTPResponse:
        try:
            self.filesystem.write(full_path, body)
        except (OSError, ValueError) as e:
            raise IoFailure(f"Failed to write {full_path}: {e}") from e

        logger.debug(f"Wrote {len(body)} bytes to {full_path}")
        return created()
