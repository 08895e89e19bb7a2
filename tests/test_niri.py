"""Tests for the niri IPC client."""

import io
import json
import shutil
import socket
import tempfile
import threading
from pathlib import Path

import pytest

from niri_launcher import niri as niri_module
from niri_launcher.errors import NotFoundError, RpcError
from niri_launcher.models import NiriWindow
from niri_launcher.niri import SOCKET_PATH_ENV, NiriSocket


class FakeNiriServer:
    """Unix socket server answering each connection with the next canned reply."""

    def __init__(self, path: Path, replies: list[bytes]) -> None:
        self.requests: list = []
        self._replies = list(replies)
        self._server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._server.bind(str(path))
        self._server.listen(len(replies))
        self._thread = threading.Thread(target=self._serve, daemon=True, name="FakeNiriServer")
        self._thread.start()

    def _serve(self) -> None:
        for reply in self._replies:
            conn, _ = self._server.accept()
            with conn, conn.makefile("rb") as stream:
                self.requests.append(json.loads(stream.readline()))
                conn.sendall(reply)

    def close(self) -> None:
        self._thread.join(timeout=5.0)
        self._server.close()


@pytest.fixture
def socket_dir():
    # AF_UNIX paths are limited to ~108 bytes, keep it short
    path = Path(tempfile.mkdtemp(prefix="niri", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def serve(socket_dir):
    servers = []

    def start(*replies):
        path = socket_dir / "niri.sock"
        server = FakeNiriServer(path, [json.dumps(r).encode() + b"\n" for r in replies])
        servers.append(server)
        return NiriSocket(path), server

    yield start
    for server in servers:
        server.close()


WINDOW = {"id": 12, "title": "nvim", "app_id": "neovide", "pid": 4242, "workspace_id": 1}


class TestNiriSocketPath:
    """Tests for locating the niri socket."""

    def test_path_from_environment(self, monkeypatch):
        """Test NIRI_SOCKET is used when no path is given."""
        monkeypatch.setenv(SOCKET_PATH_ENV, "/run/user/1000/niri.sock")

        assert NiriSocket().path == Path("/run/user/1000/niri.sock")

    def test_explicit_path_wins(self, monkeypatch):
        """Test an explicit path overrides the environment."""
        monkeypatch.setenv(SOCKET_PATH_ENV, "/run/user/1000/niri.sock")

        assert NiriSocket("/tmp/other.sock").path == Path("/tmp/other.sock")

    def test_missing_environment(self, monkeypatch):
        """Test running outside niri is reported as NotFoundError."""
        monkeypatch.delenv(SOCKET_PATH_ENV, raising=False)

        with pytest.raises(NotFoundError):
            NiriSocket()


class TestNiriSocketRequests:
    """Tests for NiriSocket requests against a fake server."""

    def test_focused_window(self, serve):
        """Test the focused window is requested and parsed."""
        client, server = serve({"Ok": {"FocusedWindow": WINDOW}})

        window = client.focused_window()

        assert window == NiriWindow(id=12, app_id="neovide", pid=4242, title="nvim")
        server.close()
        assert server.requests == ["FocusedWindow"]

    def test_nothing_focused(self, serve):
        """Test a null focused window maps to None."""
        client, _ = serve({"Ok": {"FocusedWindow": None}})

        assert client.focused_window() is None

    def test_window_by_id(self, serve):
        """Test a window is looked up in the full window list."""
        other = dict(WINDOW, id=13, app_id="kitty")
        client, server = serve({"Ok": {"Windows": [WINDOW, other]}}, {"Ok": {"Windows": [WINDOW]}})

        assert client.window(13).app_id == "kitty"
        assert client.window(13) is None
        server.close()
        assert server.requests == ["Windows", "Windows"]

    def test_set_window_width(self, serve):
        """Test the resize action is sent with a fixed pixel change."""
        client, server = serve({"Ok": "Handled"})

        client.set_window_width(12, 1730)

        server.close()
        assert server.requests == [
            {"Action": {"SetWindowWidth": {"id": 12, "change": {"SetFixed": 1730}}}}
        ]

    def test_err_reply(self, serve):
        """Test a rejected request raises RpcError with niri's message."""
        client, _ = serve({"Err": "window not found"})

        with pytest.raises(RpcError, match="window not found"):
            client.set_window_width(99, 100)

    def test_unexpected_variant(self, serve):
        """Test a reply for a different request is rejected."""
        client, _ = serve({"Ok": {"Windows": []}})

        with pytest.raises(RpcError):
            client.focused_window()

    def test_malformed_window(self, serve):
        """Test a window without an id is rejected."""
        client, _ = serve({"Ok": {"Windows": [{"title": "x"}]}})

        with pytest.raises(RpcError):
            client.windows()

    def test_unreachable_socket(self, socket_dir):
        """Test a missing socket raises RpcError."""
        client = NiriSocket(socket_dir / "missing.sock")

        with pytest.raises(RpcError):
            client.focused_window()


class GarbageSocket:
    """socket.socket stand-in that answers with a non-JSON line."""

    def __init__(self, *args) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    def connect(self, path) -> None:
        pass

    def sendall(self, data) -> None:
        pass

    def shutdown(self, how) -> None:
        pass

    def makefile(self, mode):
        return io.BytesIO(b"not json\n")


def test_garbage_reply(monkeypatch):
    """Test a non-JSON reply line raises RpcError."""
    monkeypatch.setattr(niri_module.socket, "socket", GarbageSocket)

    with pytest.raises(RpcError, match="Malformed"):
        NiriSocket("/tmp/unused.sock").send("FocusedWindow")
