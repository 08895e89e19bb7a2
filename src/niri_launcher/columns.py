"""Clustering of editor windows into screen columns."""

import logging
from collections.abc import Iterable

from niri_launcher.models import Column, WindowGeometry

logger = logging.getLogger(__name__)

# Marker returned by place_column when the candidate must not be inserted.
NO_PLACEMENT = None


def place_column(columns: list[Column], candidate: Column) -> int | None:
    """
    Find where candidate belongs in columns, shrinking overlaps on the way.

    Returns the insertion index, or NO_PLACEMENT when the candidate was merged
    into an existing column or dropped. May mutate one existing column or the
    candidate itself.
    """
    for i, c in enumerate(columns):
        # Current ends before the candidate starts
        if c.end <= candidate.start:
            continue
        # Candidate ends before current starts
        if candidate.end <= c.start:
            return i
        # Same left edge: stacked windows, keep the narrower band
        if c.start == candidate.start:
            c.end = min(candidate.end, c.end)
            c.text_wrap_column = max(c.text_wrap_column, candidate.text_wrap_column)
            return NO_PLACEMENT
        # Same right edge: current yields space to the candidate
        if c.end == candidate.end:
            c.end = min(c.end, candidate.start)
            return i + 1
        if c.start < candidate.start and candidate.end > c.end:
            c.end = candidate.start
            return i + 1
        if candidate.start < c.start and c.end > candidate.end:
            candidate.end = c.start
            return i
        # No obvious column boundary
        logger.debug("Dropping window at %d-%d overlapping column %d-%d",
                     candidate.start, candidate.end, c.start, c.end)
        return NO_PLACEMENT

    return len(columns)


def cluster(geometries: Iterable[WindowGeometry]) -> list[Column]:
    """
    Reduce editor windows to an ordered list of non-overlapping columns.

    Windows are processed in the order given, which is the order the editor
    reports them. This works well for layouts that were split vertically first.
    A layout that was split horizontally first can produce odd columns.
    The result is not re-sorted after insertion.
    """
    columns: list[Column] = []

    for geometry in geometries:
        candidate = Column.from_geometry(geometry)
        place_to = place_column(columns, candidate)
        if place_to is not NO_PLACEMENT:
            columns.insert(place_to, candidate)

    return columns
