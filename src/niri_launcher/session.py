"""Editor session discovery and layout collection."""

import logging
from collections.abc import Callable
from pathlib import Path

import pynvim
from pynvim.api import Nvim, NvimError

from niri_launcher.config import DEFAULT_TEXT_WRAP_COLUMN, editor_socket_path
from niri_launcher.errors import RpcError, SessionNotFoundError
from niri_launcher.models import ProcessTreeNode, WindowGeometry

logger = logging.getLogger(__name__)


def attach_socket(path: str) -> Nvim:
    """
    Connect to the editor listening on a Unix socket.

    The socket is closed again when the handshake fails. A peer that hangs
    up during the handshake is reported as ConnectionResetError.
    """
    session = pynvim.socket_session(path)
    try:
        return Nvim.from_session(session)
    except EOFError as err:
        session.close()
        raise ConnectionResetError(f"Editor at {path} closed the connection") from err
    except BaseException:
        session.close()
        raise


def discover_session(
    node: ProcessTreeNode,
    user_id: int,
    connect: Callable[[str], Nvim] = attach_socket,
    runtime_dir: Path | None = None,
) -> Nvim:
    """
    Connect to the first editor socket found in the subtree of node.

    The node's own socket is tried first, then every child depth-first,
    left to right. When nothing connects, only the error from node's own
    socket is reported; errors from descendants are discarded.

    Args:
        node: Root of the subtree to search.
        user_id: Owner of the per-user runtime directory.
        connect: Opens a session for a socket path, raising OSError or EOFError
            on failure.
        runtime_dir: Directory holding the sockets. Defaults to /run/user/<uid>.

    Raises:
        SessionNotFoundError: No socket in the subtree accepted a connection.
    """
    path = editor_socket_path(user_id, node.record.pid, runtime_dir)
    try:
        session = connect(path)
        logger.debug("Connected to editor at %s", path)
        return session
    except (OSError, EOFError) as err:
        logger.debug("No editor at %s: %s", path, err)
        root_error = err

    for child in node.children:
        try:
            return discover_session(child, user_id, connect, runtime_dir)
        except SessionNotFoundError:
            continue

    raise SessionNotFoundError(node.record.pid, path) from root_error


def _text_wrap_column(window) -> int:
    """Return the buffer's textwidth, or the default when unset or unreadable."""
    try:
        value = window.buffer.options["textwidth"]
    except (NvimError, KeyError):
        return DEFAULT_TEXT_WRAP_COLUMN
    if not isinstance(value, int) or value <= 0:
        return DEFAULT_TEXT_WRAP_COLUMN
    return value


def collect_layout(nvim: Nvim) -> list[WindowGeometry]:
    """
    Read horizontal geometry of every window in the current tab.

    Windows come back in the order the editor lists them, which is not
    necessarily left to right.

    Raises:
        RpcError: The editor failed to report the window list or a geometry.
    """
    geometries: list[WindowGeometry] = []

    try:
        windows = nvim.current.tabpage.windows
        for window in windows:
            _row, col = window.position
            width = window.width
            geometries.append(
                WindowGeometry(
                    horizontal_start=col,
                    width=width,
                    text_wrap_column=_text_wrap_column(window),
                )
            )
    except (NvimError, OSError, TypeError, ValueError) as err:
        raise RpcError(f"Failed to read editor layout: {err}") from err

    return geometries
