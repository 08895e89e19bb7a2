"""Minimal niri IPC client."""

import json
import logging
import os
import socket
from pathlib import Path

from niri_launcher.errors import NotFoundError, RpcError
from niri_launcher.models import NiriWindow

logger = logging.getLogger(__name__)

SOCKET_PATH_ENV = "NIRI_SOCKET"


class NiriSocket:
    """
    Request/reply client for the niri IPC socket.

    A fresh connection is opened for every request, since niri closes the
    stream after each reply.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        """
        Initialize the NiriSocket.

        Args:
            path: Socket path. Defaults to the NIRI_SOCKET environment variable.

        Raises:
            NotFoundError: No path was given and NIRI_SOCKET is not set.
        """
        if path is None:
            path = os.environ.get(SOCKET_PATH_ENV)
            if not path:
                raise NotFoundError(
                    f"{SOCKET_PATH_ENV} is not set, are you running this within niri?"
                )
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Get the socket path."""
        return self._path

    def send(self, request: str | dict):
        """
        Send one request and return the unwrapped Ok payload.

        Raises:
            RpcError: The socket failed, the reply was malformed or niri returned Err.
        """
        data = json.dumps(request).encode() + b"\n"
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.connect(str(self._path))
                sock.sendall(data)
                sock.shutdown(socket.SHUT_WR)
                with sock.makefile("rb") as stream:
                    line = stream.readline()
        except OSError as err:
            raise RpcError(f"niri request {request!r} failed: {err}") from err

        try:
            reply = json.loads(line)
        except ValueError as err:
            raise RpcError(f"Malformed niri reply: {line!r}") from err

        if not isinstance(reply, dict):
            raise RpcError(f"Malformed niri reply: {reply!r}")
        if "Err" in reply:
            raise RpcError(f"niri rejected {request!r}: {reply['Err']}")
        if "Ok" not in reply:
            raise RpcError(f"Malformed niri reply: {reply!r}")
        return reply["Ok"]

    def _response(self, request: str, variant: str):
        payload = self.send(request)
        if not isinstance(payload, dict) or variant not in payload:
            raise RpcError(f"Unexpected response to {request}: {payload!r}")
        return payload[variant]

    @staticmethod
    def _parse_window(data) -> NiriWindow:
        try:
            return NiriWindow.from_json(data)
        except (KeyError, TypeError, AttributeError) as err:
            raise RpcError(f"Malformed niri window: {data!r}") from err

    def focused_window(self) -> NiriWindow | None:
        """Return the focused window, or None when nothing is focused."""
        window = self._response("FocusedWindow", "FocusedWindow")
        return self._parse_window(window) if window is not None else None

    def windows(self) -> list[NiriWindow]:
        """Return every window niri manages."""
        return [self._parse_window(w) for w in self._response("Windows", "Windows")]

    def window(self, window_id: int) -> NiriWindow | None:
        """Return the window with the given id, if it exists."""
        for window in self.windows():
            if window.id == window_id:
                return window
        return None

    def set_window_width(self, window_id: int, pixels: int) -> None:
        """Set the window's width to a fixed pixel value."""
        logger.debug("Setting width of window %d to %dpx", window_id, pixels)
        self.send(
            {
                "Action": {
                    "SetWindowWidth": {
                        "id": window_id,
                        "change": {"SetFixed": pixels},
                    }
                }
            }
        )
