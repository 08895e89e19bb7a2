"""Editor width synchronization engine."""

import logging
import math
from collections.abc import Callable
from pathlib import Path

from pynvim.api import Nvim

from niri_launcher.columns import cluster
from niri_launcher.config import DEFAULT_PIXELS_PER_SYMBOL, DEFAULT_WIDTH_COEFFICIENT
from niri_launcher.models import Column
from niri_launcher.niri import NiriSocket
from niri_launcher.pstree import build_process_tree
from niri_launcher.session import attach_socket, collect_layout, discover_session

logger = logging.getLogger(__name__)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def desired_symbol_width(columns: list[Column], coefficient: float) -> int:
    """Get the width in symbols the columns should occupy."""
    return round_half_away(sum(coefficient * c.text_wrap_column for c in columns))


def current_symbol_width(columns: list[Column]) -> int:
    """Get the width in symbols the columns occupy now."""
    return max((c.end for c in columns), default=0)


def to_pixels(symbols: int, pixels_per_symbol: float) -> int:
    """Convert a symbol width to whole pixels."""
    return round_half_away(symbols * pixels_per_symbol)


class SyncSession:
    """
    One width synchronization pass against a running editor.

    Owns the editor connection and the column set clustered from its current
    tab. The column set is computed once, on construction.
    """

    def __init__(
        self,
        nvim: Nvim,
        width_coefficient: float = DEFAULT_WIDTH_COEFFICIENT,
        pixels_per_symbol: float = DEFAULT_PIXELS_PER_SYMBOL,
    ) -> None:
        """
        Initialize the SyncSession.

        Args:
            nvim: Connected editor session. Closed by close().
            width_coefficient: Scale from text-wrap column to desired symbol width.
            pixels_per_symbol: Estimated width of one symbol in pixels.
        """
        self._nvim = nvim
        self.width_coefficient = width_coefficient
        self.pixels_per_symbol = pixels_per_symbol
        self._columns = cluster(collect_layout(nvim))

    @classmethod
    def for_pid(
        cls,
        pid: int,
        user_id: int,
        width_coefficient: float = DEFAULT_WIDTH_COEFFICIENT,
        pixels_per_symbol: float = DEFAULT_PIXELS_PER_SYMBOL,
        runtime_dir: Path | None = None,
        connect: Callable[[str], Nvim] = attach_socket,
    ) -> "SyncSession":
        """Discover the editor started by pid and collect its layout."""
        tree = build_process_tree(pid)
        nvim = discover_session(tree.root, user_id, connect, runtime_dir)
        try:
            return cls(nvim, width_coefficient, pixels_per_symbol)
        except Exception:
            nvim.close()
            raise

    def __enter__(self) -> "SyncSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the editor connection."""
        self._nvim.close()

    @property
    def columns(self) -> list[Column]:
        """Get the clustered columns, left to right."""
        return self._columns

    @property
    def num_columns(self) -> int:
        """Get the number of clustered columns."""
        return len(self._columns)

    @property
    def desired_symbol_width(self) -> int:
        """Get the desired width in symbols."""
        return desired_symbol_width(self._columns, self.width_coefficient)

    @property
    def desired_pixel_width(self) -> int:
        """Get the desired width in pixels."""
        return to_pixels(self.desired_symbol_width, self.pixels_per_symbol)

    @property
    def current_symbol_width(self) -> int:
        """Get the current width in symbols."""
        return current_symbol_width(self._columns)

    @property
    def current_pixel_width(self) -> int:
        """Get the current width in pixels."""
        return to_pixels(self.current_symbol_width, self.pixels_per_symbol)

    def sync_width(self, window_id: int, compositor: NiriSocket) -> int:
        """
        Resize the compositor window to the desired width.

        Returns the pixel width that was requested.
        """
        pixels = self.desired_pixel_width
        logger.debug("Syncing window %d to %d columns, %dpx", window_id, self.num_columns, pixels)
        compositor.set_window_width(window_id, pixels)
        return pixels
