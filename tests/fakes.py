"""Stand-ins for the editor, compositor and terminal used across tests."""

from types import SimpleNamespace

from pynvim.api import NvimError

from niri_launcher.models import NiriWindow


class FailingOptions:
    """Buffer options whose every lookup fails like a dead buffer."""

    def __getitem__(self, name):
        raise NvimError(f"Invalid buffer for option {name}")


class FakeWindow:
    """Editor window with a fixed geometry."""

    def __init__(self, col, width, textwidth=80, row=0, options=None):
        self.position = (row, col)
        self.width = width
        self.buffer = SimpleNamespace(
            options=options if options is not None else {"textwidth": textwidth}
        )


class BrokenWindow:
    """Editor window whose geometry can't be read."""

    @property
    def position(self):
        raise NvimError("Invalid window id")

    width = 0


class FakeNvim:
    """Editor session exposing the current tab's windows."""

    def __init__(self, windows):
        self.current = SimpleNamespace(tabpage=SimpleNamespace(windows=list(windows)))
        self.closed = False

    def close(self):
        self.closed = True


class FakeNiri:
    """Compositor client serving a fixed window list."""

    def __init__(self, windows=(), focused=None):
        self._windows = list(windows)
        self._focused = focused
        self.resized = []
        self.path = "/tmp/niri.sock"

    def focused_window(self):
        return self._focused

    def windows(self):
        return self._windows

    def window(self, window_id):
        for window in self._windows:
            if window.id == window_id:
                return window
        return None

    def set_window_width(self, window_id, pixels):
        self.resized.append((window_id, pixels))


def niri_window(window_id=1, app_id="neovide", pid=4242):
    return NiriWindow(id=window_id, app_id=app_id, pid=pid, title=app_id)
