"""
Route handlers.

- basic: /, /echo/<value>, /user-agent
- files: /files/<name> over a FileSystem capability
"""

from . import basic
from .files import FilesHandler, FileSystem, LocalFileSystem

__all__ = [
    "basic",
    "FilesHandler",
    "FileSystem",
    "LocalFileSystem",
]
