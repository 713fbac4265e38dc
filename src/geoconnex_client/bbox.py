"""Bounding box and point validation, run before any remote access."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from numbers import Real

from .types import BoundingBox, InvalidBoundingBoxOrdering, InvalidBoundingBoxShape, InvalidPoint


def _is_coordinate(value: object) -> bool:
    # bool is a Real subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def validate_bbox(bbox: Iterable[float]) -> BoundingBox:
    """
    Validate a caller-supplied bounding box.

    Args:
        bbox: (xmin, ymin, xmax, ymax) as any iterable of numbers

    Returns:
        The same four values as a BoundingBox

    Raises:
        InvalidBoundingBoxShape: If bbox is not exactly four finite numbers
        InvalidBoundingBoxOrdering: If xmin > xmax or ymin > ymax
    """
    # Any iterable of four numbers is accepted, e.g. GeoDataFrame.total_bounds
    if isinstance(bbox, (str, bytes, Mapping)) or not isinstance(bbox, Iterable):
        raise InvalidBoundingBoxShape(f"bbox must be a sequence of 4 numbers, got {type(bbox).__name__}")
    bbox = tuple(bbox)
    if len(bbox) != 4:
        raise InvalidBoundingBoxShape(f"bbox must be length 4, got {len(bbox)}")
    if not all(_is_coordinate(v) for v in bbox):
        raise InvalidBoundingBoxShape(f"bbox components must be finite numbers: {list(bbox)}")

    xmin, ymin, xmax, ymax = bbox
    if xmin > xmax:
        raise InvalidBoundingBoxOrdering("x", xmin, xmax)
    if ymin > ymax:
        raise InvalidBoundingBoxOrdering("y", ymin, ymax)

    return BoundingBox(float(xmin), float(ymin), float(xmax), float(ymax))


def validate_point(point: Sequence[float]) -> tuple[float, float]:
    """Validate an (x, y) coordinate pair."""
    if isinstance(point, (str, bytes)) or not isinstance(point, Sequence) or len(point) != 2:
        raise InvalidPoint(f"point must be an (x, y) pair, got {point!r}")
    if not all(_is_coordinate(v) for v in point):
        raise InvalidPoint(f"point coordinates must be finite numbers: {list(point)}")
    return float(point[0]), float(point[1])


def search_window(point: tuple[float, float], margin: float) -> BoundingBox:
    """Square window of half-width ``margin`` centered on ``point``."""
    x, y = point
    return BoundingBox(x - margin, y - margin, x + margin, y + margin)
