"""
Type definitions for the geoconnex client.

This module provides the bounding-box value type shared by every query path and
the exception hierarchy raised by the client. All client errors derive from
GeoconnexError so callers can catch a single base class.
"""

from __future__ import annotations
from typing import NamedTuple, Optional


class BoundingBox(NamedTuple):
    """Validated (xmin, ymin, xmax, ymax) bounding box.

    Only produced by ``bbox.validate_bbox``; the ordering invariant
    ``xmin <= xmax`` and ``ymin <= ymax`` always holds.
    """
    xmin: float
    ymin: float
    xmax: float
    ymax: float


class GeoconnexError(Exception):
    """Base exception for geoconnex client operations."""
    pass


class InvalidBoundingBox(GeoconnexError, ValueError):
    """Bounding box rejected before any remote access."""
    pass


class InvalidBoundingBoxShape(InvalidBoundingBox):
    """Bounding box does not have exactly four numeric components."""
    pass


class InvalidBoundingBoxOrdering(InvalidBoundingBox):
    """Bounding box minimum exceeds its maximum on one axis."""
    def __init__(self, axis: str, minimum: float, maximum: float):
        self.axis = axis
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"bbox {axis}min ({minimum}) must be less than or equal to {axis}max ({maximum})"
        )


class InvalidPoint(GeoconnexError, ValueError):
    """Point is not a pair of numeric coordinates."""
    pass


class InvalidColumnSelection(GeoconnexError, ValueError):
    """Requested column is not one of the recognized geoconnex columns."""
    def __init__(self, column: object, allowed: list[str]):
        self.column = column
        self.allowed = allowed
        super().__init__(f"Unknown column {column!r}; expected one of: {', '.join(allowed)}")


class RemoteSourceUnavailable(GeoconnexError):
    """Remote file could not be opened or queried."""
    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Remote source unavailable ({url}): {message}")


class MalformedRemoteRow(GeoconnexError):
    """Row returned by the remote source lacks a usable geometry."""
    def __init__(self, row_id: Optional[str], message: str):
        self.row_id = row_id
        super().__init__(f"Malformed row (id: {row_id}): {message}")
