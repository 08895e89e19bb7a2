"""kitty remote control client."""

import json
import logging
import os
import re
import socket
from pathlib import Path

from niri_launcher.errors import RpcError

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = [0, 37, 0]
COMMAND_PREFIX = b"\x1bP@kitty-cmd"
COMMAND_SUFFIX = b"\x1b\\"

_ENV_PATTERN = re.compile(r"\$\{([^{}\s]*)\}")
_PID_PATTERN = re.compile(r"\{pid\}")


def expand_socket_template(template: str, pid: int) -> str:
    """
    Expand a kitty socket path template.

    ${VAR} is replaced with the environment variable (empty when unset) and
    {pid} with the pid of the target kitty process.
    """
    path = _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), template)
    return _PID_PATTERN.sub(str(pid), path)


def encode_command(cmd: str, payload: dict | None = None, no_response: bool = False) -> bytes:
    """Frame a remote control command for the kitty socket."""
    envelope = {"cmd": cmd, "version": PROTOCOL_VERSION, "no_response": no_response}
    if payload is not None:
        envelope["payload"] = payload
    return COMMAND_PREFIX + json.dumps(envelope).encode() + COMMAND_SUFFIX


def decode_response(raw: bytes):
    """
    Unframe a kitty reply and return its decoded data field.

    Raises:
        RpcError: The framing, status or data field is invalid.
    """
    if not raw.startswith(b"\x1b"):
        raise RpcError("Got invalid head escape byte from kitty")
    if not raw.startswith(COMMAND_PREFIX):
        raise RpcError("Got invalid head escape sequence from kitty")
    body = raw[len(COMMAND_PREFIX):]
    end = body.find(b"\x1b")
    if end < 0 or body[end:end + 2] != COMMAND_SUFFIX:
        raise RpcError("Got invalid tail escape sequence from kitty")

    try:
        response = json.loads(body[:end])
    except ValueError as err:
        raise RpcError("kitty returned a malformed response") from err

    if not isinstance(response, dict) or "ok" not in response:
        raise RpcError("kitty returned a response without 'ok' field")
    if response["ok"] is not True:
        raise RpcError(f"Got error from kitty: {response.get('error', 'unknown error')}")
    if "data" not in response:
        raise RpcError("kitty returned a response without 'data' field")
    data = response["data"]
    if not isinstance(data, str):
        raise RpcError("kitty returned invalid data in 'data' field")
    try:
        return json.loads(data)
    except ValueError as err:
        raise RpcError("kitty returned invalid data in 'data' field") from err


class KittySocket:
    """Connection to the remote control socket of one kitty instance."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    @classmethod
    def connect(cls, path: str | Path) -> "KittySocket":
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(str(path))
        except OSError:
            sock.close()
            raise
        return cls(sock)

    def __enter__(self) -> "KittySocket":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._sock.close()

    def _read_response(self) -> bytes:
        buffer = bytearray()
        while not buffer.endswith(COMMAND_SUFFIX):
            chunk = self._sock.recv(4096)
            if not chunk:
                break
            buffer += chunk
        return bytes(buffer)

    def request(self, cmd: str, payload: dict | None = None):
        """Send a command and return the decoded data of its reply."""
        logger.debug("kitty request %s", cmd)
        try:
            self._sock.sendall(encode_command(cmd, payload))
            raw = self._read_response()
        except OSError as err:
            raise RpcError(f"kitty command {cmd!r} failed: {err}") from err
        return decode_response(raw)

    def ls(self) -> list[dict]:
        """Return kitty's OS windows with their tabs and windows."""
        return self.request("ls", {})


def find_focused_window(os_windows: list[dict]) -> dict | None:
    """Return the focused window of the focused tab of the focused OS window."""
    for os_window in os_windows:
        if not os_window.get("is_focused"):
            continue
        for tab in os_window.get("tabs", []):
            if not tab.get("is_focused"):
                continue
            for window in tab.get("windows", []):
                if window.get("is_focused"):
                    return window
    return None
