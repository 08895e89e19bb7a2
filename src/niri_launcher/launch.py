"""Launching data collection and process launching."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field

import psutil

from niri_launcher.config import LauncherConfig
from niri_launcher.errors import LauncherError, NotFoundError, UnsupportedError
from niri_launcher.kitty import KittySocket, expand_socket_template, find_focused_window
from niri_launcher.models import LaunchingData, NiriWindow
from niri_launcher.niri import NiriSocket

logger = logging.getLogger(__name__)

TERMINAL_CLASS = "kitty"
EDITOR_CLASS = "neovide"


@dataclass(slots=True)
class LaunchCommand:
    """A program to exec together with its environment and working directory."""

    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None


def resolve_base_window(niri: NiriSocket, window_id: int | None = None) -> NiriWindow:
    """
    Return the window launching data is taken from.

    Raises:
        NotFoundError: The requested window does not exist or nothing is focused.
    """
    if window_id is not None:
        window = niri.window(window_id)
        if window is None:
            raise NotFoundError(f"No niri window with id {window_id}")
        return window
    window = niri.focused_window()
    if window is None:
        raise NotFoundError("No focused niri window")
    return window


def require_pid(window: NiriWindow) -> int:
    """Return the window's pid, raising NotFoundError when it has none."""
    if window.pid is None:
        raise NotFoundError(f"niri window {window.id} does not have pid")
    return window.pid


def launching_data_from_kitty(
    pid: int,
    socket_template: str,
    connect: Callable[[str], KittySocket] = KittySocket.connect,
) -> LaunchingData:
    """Take cwd and environment from the focused window of a kitty instance."""
    path = expand_socket_template(socket_template, pid)
    try:
        kitty = connect(path)
    except OSError as err:
        raise NotFoundError(f"Can not connect to kitty at {path}: {err}") from err
    with kitty:
        os_windows = kitty.ls()

    window = find_focused_window(os_windows)
    if window is None:
        raise NotFoundError("No focused kitty window")
    env = window.get("env") or {}
    return LaunchingData(env=dict(env), cwd=window.get("cwd") or None)


def launching_data_from_editor(pid: int) -> LaunchingData:
    """Take cwd and environment from the editor process itself."""
    try:
        proc = psutil.Process(pid)
        env = proc.environ()
    except psutil.NoSuchProcess as err:
        raise NotFoundError(f"No process with pid {pid}") from err
    except psutil.AccessDenied as err:
        raise LauncherError(f"Can not read environment of pid {pid}") from err

    try:
        cwd = proc.cwd()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        cwd = None
    return LaunchingData(env=env, cwd=cwd or None)


def collect_launching_data(niri: NiriSocket, config: LauncherConfig) -> LaunchingData:
    """
    Collect launching data from the base window.

    Raises:
        NotFoundError: No base window, class or pid is available.
        UnsupportedError: The base window's application is not understood.
    """
    window = resolve_base_window(niri, config.window)
    if window.app_id is None:
        raise NotFoundError(f"niri window {window.id} does not have class")

    if window.app_id == TERMINAL_CLASS:
        return launching_data_from_kitty(require_pid(window), config.kitty_socket)
    if window.app_id == EDITOR_CLASS:
        return launching_data_from_editor(require_pid(window))
    raise UnsupportedError(f"Can not get launching data from {window.app_id}")


def get_launching_data(niri: NiriSocket, config: LauncherConfig) -> LaunchingData:
    """Collect launching data, falling back to a clean launch on any failure."""
    if config.fresh:
        return LaunchingData()
    try:
        return collect_launching_data(niri, config)
    except LauncherError as err:
        logger.debug("Launching with defaults: %s", err)
        return LaunchingData()


def kitty_command(data: LaunchingData) -> LaunchCommand:
    """Build a kitty invocation that inherits data's cwd and environment."""
    argv = [TERMINAL_CLASS]
    for name, value in data.env.items():
        argv += ["-o", f"env={name}={value}"]
    if data.cwd is not None:
        argv += ["-d", data.cwd]
    return LaunchCommand(argv=argv)


def editor_command(data: LaunchingData) -> LaunchCommand:
    """Build a neovide invocation that inherits data's cwd and environment."""
    return LaunchCommand(argv=[EDITOR_CLASS], env=dict(data.env), cwd=data.cwd)


def exec_command(command: LaunchCommand) -> None:
    """Replace the current process with command. Only returns by raising."""
    env = {**os.environ, **command.env}
    logger.debug("Executing %s in %s", command.argv, command.cwd or os.getcwd())
    if command.cwd is not None:
        os.chdir(command.cwd)
    os.execvpe(command.argv[0], command.argv, env)
