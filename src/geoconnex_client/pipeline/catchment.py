"""
Catchment lookup over the reference catchments and flowlines FlatGeobuf.

FlatGeobuf carries a packed R-tree, so a bbox-filtered read only fetches the
index pages and the features inside the window. Candidates are streamed one at
a time and tested with an exact point-in-polygon check; the first match wins.
Only polygonal candidates are tested: flowlines share the file, and a line
"contains" any point lying on it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Optional

import fiona
from fiona._err import CPLE_BaseError
from fiona.errors import FionaError
from shapely.errors import ShapelyError
from shapely.geometry import Point, mapping, shape

from ..bbox import search_window
from ..domain.models import Feature
from ..types import BoundingBox, RemoteSourceUnavailable

logger = logging.getLogger(__name__)

FeatureStreamOpener = Callable[[str, BoundingBox], AbstractContextManager[Iterator[Any]]]

CATCHMENT_GEOMETRY_TYPES = ("Polygon", "MultiPolygon")


@contextmanager
def open_feature_stream(url: str, window: BoundingBox) -> Iterator[Iterator[Any]]:
    """
    Open a lazy stream of features intersecting ``window``.

    Args:
        url: HTTP(S) URL or local path of a vector dataset Fiona can read
        window: Search window (minX, minY, maxX, maxY)

    Yields:
        Forward-only iterator of fiona features

    Raises:
        RemoteSourceUnavailable: If the dataset cannot be opened
    """
    try:
        src = fiona.open(url)
    except (FionaError, CPLE_BaseError, OSError) as e:
        logger.error(f"Failed to open boundary dataset {url}: {e}")
        raise RemoteSourceUnavailable(url, str(e)) from e

    with src:
        try:
            yield src.filter(bbox=tuple(window))
        except (FionaError, CPLE_BaseError) as e:
            logger.error(f"Reading boundary dataset {url} failed: {e}")
            raise RemoteSourceUnavailable(url, str(e)) from e


def _candidate_parts(candidate: Any) -> tuple[Any, dict, Any]:
    """Geometry, properties and id of a fiona feature or GeoJSON-like mapping."""
    if isinstance(candidate, dict):
        return candidate.get("geometry"), dict(candidate.get("properties") or {}), candidate.get("id")
    properties = candidate.properties
    return candidate.geometry, dict(properties) if properties is not None else {}, candidate.id


def locate_catchment(
    point: tuple[float, float],
    url: str,
    margin: float,
    opener: FeatureStreamOpener = open_feature_stream,
) -> Optional[Feature]:
    """
    Find the first feature whose polygon contains ``point``.

    Args:
        point: Validated (x, y) coordinate
        url: Boundary dataset location
        margin: Half-width of the square search window
        opener: Factory for the windowed feature stream

    Returns:
        Containing Feature, or None when the window holds no containing feature
    """
    window = search_window(point, margin)
    target = Point(point)
    start_time = time.time()
    tested = 0

    logger.debug(f"Searching {url} for catchment at {point} within {tuple(window)}")
    with opener(url, window) as candidates:
        for candidate in candidates:
            tested += 1
            geometry, properties, feature_id = _candidate_parts(candidate)
            if geometry is None:
                continue
            try:
                geom = shape(geometry)
            except (ShapelyError, ValueError, TypeError, KeyError) as e:
                logger.warning(f"Skipping candidate {feature_id} with invalid geometry: {e}")
                continue

            if geom.geom_type not in CATCHMENT_GEOMETRY_TYPES:
                continue
            if geom.contains(target):
                elapsed = time.time() - start_time
                logger.info(f"Found catchment {feature_id} after {tested} candidates in {elapsed:.2f} seconds")
                return Feature(geometry=mapping(geom), properties=properties, id=feature_id)

    logger.info(f"No catchment contains {point} ({tested} candidates tested)")
    return None
