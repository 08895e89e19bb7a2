"""Exception types raised by niri-launcher."""


class LauncherError(Exception):
    """Base class for every error the launcher surfaces to the user."""


class NotFoundError(LauncherError):
    """A window, pid, class or socket the launcher needs does not exist."""


class SessionNotFoundError(NotFoundError):
    """No editor socket in the process subtree accepted a connection."""

    def __init__(self, pid: int, path: str) -> None:
        super().__init__(f"No editor session found for pid {pid} (tried {path})")
        self.pid = pid
        self.path = path


class RpcError(LauncherError):
    """An editor, compositor or terminal request failed or returned garbage."""


class UnsupportedError(LauncherError):
    """The focused window belongs to an application the launcher can't handle."""
