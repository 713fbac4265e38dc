"""
geoconnex client

Fetch GeoJSON features from the geoconnex GeoParquet export by bounding box,
and look up the reference catchment containing a point, without downloading
either remote file.
"""

from .client import GeoconnexClient
from .config import Config, ConfigurationError
from .domain import Feature, FeatureCollection, GeoconnexColumn, QueryMode
from .types import (
    BoundingBox,
    GeoconnexError,
    InvalidBoundingBox,
    InvalidBoundingBoxOrdering,
    InvalidBoundingBoxShape,
    InvalidColumnSelection,
    InvalidPoint,
    MalformedRemoteRow,
    RemoteSourceUnavailable,
)

__version__ = "0.1.0"

__all__ = [
    "GeoconnexClient",
    "Config", "ConfigurationError",
    "Feature", "FeatureCollection", "GeoconnexColumn", "QueryMode",
    "BoundingBox",
    "GeoconnexError",
    "InvalidBoundingBox", "InvalidBoundingBoxOrdering", "InvalidBoundingBoxShape",
    "InvalidColumnSelection", "InvalidPoint",
    "MalformedRemoteRow", "RemoteSourceUnavailable",
]
