"""
Row-to-feature mapping and feature collection assembly.

Pure transformations over rows already returned by the remote query; no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

import shapely.wkb as swkb
import shapely.wkt as swkt
from shapely.errors import ShapelyError
from shapely.geometry import mapping, shape
from shapely.geometry.base import BaseGeometry

from ..domain.enums import GeoconnexColumn
from ..domain.models import Feature, FeatureCollection
from ..types import MalformedRemoteRow


def convert_geometry(g: Any) -> Optional[BaseGeometry]:
    """Decode a geometry value as returned by DuckDB or a feature stream."""
    if g is None:
        return None
    elif isinstance(g, BaseGeometry):
        return g
    elif isinstance(g, (bytes, bytearray, memoryview)):
        return swkb.loads(bytes(g))
    elif isinstance(g, str):
        return swkt.loads(g)
    else:
        # GeoJSON-like mapping or anything exposing __geo_interface__
        return shape(g)


def _row_bbox(value: Any) -> Optional[tuple[float, float, float, float]]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return (value["xmin"], value["ymin"], value["xmax"], value["ymax"])
    xmin, ymin, xmax, ymax = value
    return (xmin, ymin, xmax, ymax)


def map_row(
    row: Mapping[str, Any],
    property_flags: Mapping[GeoconnexColumn, bool],
    include_bbox: bool = False,
) -> Feature:
    """
    Convert one query row into a Feature.

    Args:
        row: Column name -> value mapping for one matched row
        property_flags: Which optional attributes were requested
        include_bbox: Surface the row bbox as the feature-level bbox member

    Returns:
        Feature whose properties hold exactly the requested attributes

    Raises:
        MalformedRemoteRow: If the row has no decodable geometry
    """
    row_id = row.get(GeoconnexColumn.ID.value)
    try:
        geom = convert_geometry(row.get(GeoconnexColumn.GEOMETRY.value))
    except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as e:
        raise MalformedRemoteRow(row_id, f"undecodable geometry: {e}") from e
    if geom is None:
        raise MalformedRemoteRow(row_id, "missing geometry")

    # Requested attributes are always present; values absent from the row are None
    properties = {
        column.value: row.get(column.value)
        for column, wanted in property_flags.items()
        if wanted
    }

    return Feature(
        geometry=mapping(geom),
        properties=properties,
        bbox=_row_bbox(row.get(GeoconnexColumn.BBOX.value)) if include_bbox else None,
    )


def map_rows(
    rows: Iterable[Mapping[str, Any]],
    property_flags: Mapping[GeoconnexColumn, bool],
    echo_bbox: Sequence[float],
    include_bbox: bool = False,
) -> FeatureCollection:
    """Map rows in source order and wrap them with the caller's bbox."""
    features = [map_row(row, property_flags, include_bbox) for row in rows]
    return FeatureCollection(features=features, bbox=tuple(echo_bbox))
