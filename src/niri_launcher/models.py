"""Data models for niri-launcher."""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of one process at enumeration time."""

    pid: int
    parent_pid: int


@dataclass(slots=True)
class ProcessTreeNode:
    """A process and the processes it spawned."""

    record: ProcessRecord
    children: list["ProcessTreeNode"] = field(default_factory=list)


@dataclass(slots=True)
class ProcessTree:
    """Process tree rooted at a queried pid."""

    root: ProcessTreeNode


@dataclass(slots=True, frozen=True)
class WindowGeometry:
    """Horizontal placement of one editor window."""

    horizontal_start: int
    width: int
    text_wrap_column: int


@dataclass(slots=True)
class Column:
    """Horizontal band of screen space shared by stacked editor windows."""

    start: int
    end: int
    text_wrap_column: int

    @classmethod
    def from_geometry(cls, geometry: WindowGeometry) -> "Column":
        return cls(
            start=geometry.horizontal_start,
            end=geometry.horizontal_start + geometry.width,
            text_wrap_column=geometry.text_wrap_column,
        )


@dataclass(slots=True, frozen=True)
class NiriWindow:
    """A compositor window as reported by niri."""

    id: int
    app_id: str | None = None
    pid: int | None = None
    title: str | None = None

    @classmethod
    def from_json(cls, data: dict) -> "NiriWindow":
        return cls(
            id=data["id"],
            app_id=data.get("app_id"),
            pid=data.get("pid"),
            title=data.get("title"),
        )


@dataclass(slots=True)
class LaunchingData:
    """Environment and working directory inherited by a launched tool."""

    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
