"""Runtime configuration for niri-launcher."""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_KITTY_SOCKET = "${XDG_RUNTIME_DIR}/kitty-{pid}"
DEFAULT_WIDTH_COEFFICIENT = 1.2
# Rough glyph advance of the default neovide font, not measured from the live font.
DEFAULT_PIXELS_PER_SYMBOL = 8.0093
DEFAULT_TEXT_WRAP_COLUMN = 80

EDITOR_SOCKET_PREFIX = "nvim"


@dataclass(slots=True)
class LauncherConfig:
    """Options shared by every launcher command."""

    niri_socket: Path | None = None
    kitty_socket: str = DEFAULT_KITTY_SOCKET
    fresh: bool = False
    window: int | None = None
    width_coefficient: float = DEFAULT_WIDTH_COEFFICIENT
    pixels_per_symbol: float = DEFAULT_PIXELS_PER_SYMBOL
    editor_runtime_dir: Path | None = None
    verbose: bool = False

    @property
    def user_id(self) -> int:
        """Effective uid used to locate per-user sockets."""
        return os.geteuid()


def editor_socket_path(user_id: int, pid: int, runtime_dir: Path | None = None) -> str:
    """Return the socket path an editor with the given pid listens on."""
    base = runtime_dir if runtime_dir is not None else Path(f"/run/user/{user_id}")
    return str(base / f"{EDITOR_SOCKET_PREFIX}.{pid}.0")
