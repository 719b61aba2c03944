"""
Unit tests for routing and the route handlers.
"""

import os
import stat

import pytest

from pyhttpd.config import ServerConfig
from pyhttpd.errors import IoFailure, UnsupportedMethod
from pyhttpd.handlers.files import FilesHandler, FileSystem
from pyhttpd.http.request import HTTPRequest, parse_request
from pyhttpd.http.router import Router, RouteName, split_path


def regular_file_stat(size: int) -> os.stat_result:
    return os.stat_result((stat.S_IFREG | 0o644, 0, 0, 1, 0, 0, size, 0, 0, 0))


class FakeFileSystem(FileSystem):
    """In-memory FileSystem that can be told to fail."""

    def __init__(self, files=None, fail_read=False, fail_write=False):
        self.files = dict(files or {})
        self.fail_read = fail_read
        self.fail_write = fail_write

    def stat(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return regular_file_stat(len(self.files[path]))

    def read(self, path):
        if self.fail_read:
            raise PermissionError(path)
        return self.files[path]

    def write(self, path, data):
        if self.fail_write:
            raise PermissionError(path)
        self.files[path] = data


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def no_files_config() -> ServerConfig:
    return ServerConfig()


def get(path: str, headers=None, method: str = "GET", body: bytes = b"") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, headers=headers or {}, body=body)


class TestSplitPath:
    """Tests for path segmentation."""

    @pytest.mark.parametrize("path,segments", [
        ("/", []),
        ("", []),
        ("/echo/abc", ["echo", "abc"]),
        ("/a//b/", ["a", "b"]),
        ("echo/abc", ["echo", "abc"]),
    ])
    def test_split(self, path, segments):
        assert split_path(path) == segments


class TestRouteName:
    """Tests for route resolution."""

    def test_root(self):
        assert RouteName.resolve([]) is RouteName.ROOT

    def test_known_routes(self):
        assert RouteName.resolve(["echo", "x"]) is RouteName.ECHO
        assert RouteName.resolve(["user-agent"]) is RouteName.USER_AGENT
        assert RouteName.resolve(["files", "a.txt"]) is RouteName.FILES

    def test_unknown_route(self):
        assert RouteName.resolve(["something"]) is None
        assert RouteName.resolve(["Echo"]) is None

    def test_every_route_dispatched(self, router: Router):
        assert set(router.routes) == set(RouteName)


class TestRouter:
    """Tests for Router.handle()."""

    @pytest.mark.parametrize("path", ["/", ""])
    def test_root(self, router, no_files_config, path):
        """Test that the root path answers 200 with an empty body."""
        response = router.handle(get(path), no_files_config)

        assert response.status == 200
        assert response.body == b""

    @pytest.mark.parametrize("path", ["/something", "/something/something"])
    def test_unknown_path(self, router, no_files_config, path):
        response = router.handle(get(path), no_files_config)

        assert response.status == 404

    def test_echo(self, router, no_files_config):
        """Test echo route returns the second segment."""
        response = router.handle(get("/echo/something"), no_files_config)

        assert response.status == 200
        assert response.body == b"something"
        assert response.headers["Content-Type"] == "text/plain"
        assert response.headers["Content-Length"] == "9"

    def test_echo_without_value(self, router, no_files_config):
        response = router.handle(get("/echo"), no_files_config)

        assert response.status == 200
        assert response.body == b""
        assert response.headers["Content-Length"] == "0"

    def test_echo_is_not_percent_decoded(self, router, no_files_config):
        response = router.handle(get("/echo/a%20b"), no_files_config)

        assert response.body == b"a%20b"

    def test_user_agent(self, router, no_files_config):
        """Test that /user-agent echoes the header."""
        request = get("/user-agent", headers={"User-Agent": "test-agent"})
        response = router.handle(request, no_files_config)

        assert response.status == 200
        assert response.body == b"test-agent"
        assert response.headers["Content-Length"] == "10"

    def test_user_agent_missing_is_server_error(self, router, no_files_config):
        response = router.handle(get("/user-agent"), no_files_config)

        assert response.status == 500

    def test_files_without_directory(self, router, no_files_config):
        response = router.handle(get("/files/missing.txt"), no_files_config)

        assert response.status == 404

    def test_files_without_filename(self, router, files_dir):
        response = router.handle(get("/files"), ServerConfig(directory=files_dir))

        assert response.status == 404


class TestFilesRoute:
    """Tests for /files against the real disk."""

    def test_post_then_get(self, router, files_dir):
        """A posted body is served back byte for byte."""
        config = ServerConfig(directory=files_dir)
        body = b"quarterly numbers\x00\xff"

        post = router.handle(get("/files/report.txt", method="POST", body=body), config)
        assert post.status == 201

        response = router.handle(get("/files/report.txt"), config)
        assert response.status == 200
        assert response.body == body
        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.headers["Content-Length"] == str(len(body))

    def test_post_truncates_existing(self, router, files_dir):
        config = ServerConfig(directory=files_dir)
        with open(files_dir + "a.txt", "wb") as f:
            f.write(b"a much longer original content")

        router.handle(get("/files/a.txt", method="POST", body=b"short"), config)

        with open(files_dir + "a.txt", "rb") as f:
            assert f.read() == b"short"

    def test_get_missing_file(self, router, files_dir):
        response = router.handle(get("/files/missing.txt"), ServerConfig(directory=files_dir))

        assert response.status == 404

    def test_get_directory_is_not_found(self, router, files_dir):
        os.mkdir(files_dir + "subdir")

        response = router.handle(get("/files/subdir"), ServerConfig(directory=files_dir))

        assert response.status == 404

    def test_directory_is_concatenated(self, router, tmp_path):
        """No separator is inserted between directory and filename."""
        (tmp_path / "prefix-name.txt").write_bytes(b"joined")
        config = ServerConfig(directory=str(tmp_path / "prefix-"))

        response = router.handle(get("/files/name.txt"), config)

        assert response.status == 200
        assert response.body == b"joined"

    def test_get_nul_in_filename_is_not_found(self, router, files_dir):
        """A filename the OS cannot represent reads as a missing file."""
        request = parse_request(b"GET /files/a\x00b HTTP/1.1\r\n\r\n")

        response = router.handle(request, ServerConfig(directory=files_dir))

        assert response.status == 404

    def test_post_nul_in_filename_is_server_error(self, router, files_dir):
        request = parse_request(
            b"POST /files/a\x00b HTTP/1.1\r\nContent-Length: 4\r\n\r\ndata"
        )

        response = router.handle(request, ServerConfig(directory=files_dir))

        assert response.status == 500

    def test_unsupported_method(self, router, files_dir):
        response = router.handle(get("/files/a.txt", method="DELETE"), ServerConfig(directory=files_dir))

        assert response.status == 500


class TestFilesHandler:
    """Tests for FilesHandler with a fake FileSystem."""

    def test_filesystem_is_abstract(self):
        with pytest.raises(TypeError):
            FileSystem()

    def test_read_failure_after_stat(self):
        """A file that vanishes between stat and read is an I/O failure."""
        handler = FilesHandler(FakeFileSystem({"/d/a.txt": b"x"}, fail_read=True))

        with pytest.raises(IoFailure):
            handler.handle(get("/files/a.txt"), "/d/", "a.txt")

    def test_read_failure_becomes_500(self):
        fs = FakeFileSystem({"/d/a.txt": b"x"}, fail_read=True)
        router = Router(files=FilesHandler(fs))

        response = router.handle(get("/files/a.txt"), ServerConfig(directory="/d/"))

        assert response.status == 500

    def test_write_failure_becomes_500(self):
        router = Router(files=FilesHandler(FakeFileSystem(fail_write=True)))
        request = get("/files/a.txt", method="POST", body=b"data")

        response = router.handle(request, ServerConfig(directory="/d/"))

        assert response.status == 500

    def test_post_writes_body(self):
        fs = FakeFileSystem()
        handler = FilesHandler(fs)

        response = handler.handle(get("/files/a.txt", method="POST", body=b"data"), "/d/", "a.txt")

        assert response.status == 201
        assert fs.files == {"/d/a.txt": b"data"}

    def test_unsupported_method_raises(self):
        handler = FilesHandler(FakeFileSystem())

        with pytest.raises(UnsupportedMethod) as exc_info:
            handler.handle(get("/files/a.txt", method="PUT"), "/d/", "a.txt")

        assert exc_info.value.method == "PUT"
