"""Tests for row-to-feature mapping and collection assembly."""

from __future__ import annotations

import pytest
from shapely.geometry import Point, box

from geoconnex_client.domain.enums import GeoconnexColumn
from geoconnex_client.pipeline.transform import convert_geometry, map_row, map_rows
from geoconnex_client.types import MalformedRemoteRow

ALL_PROPERTIES = {GeoconnexColumn.ID: True, GeoconnexColumn.GEOCONNEX_SITEMAP: True}
ID_ONLY = {GeoconnexColumn.ID: True, GeoconnexColumn.GEOCONNEX_SITEMAP: False}
NO_PROPERTIES = {GeoconnexColumn.ID: False, GeoconnexColumn.GEOCONNEX_SITEMAP: False}


def _row(**overrides):
    row = {
        "id": "https://geoconnex.us/test/1",
        "geometry": Point(-73.1, 40.7).wkb,
        "geoconnex_sitemap": "https://geoconnex.us/sitemap/test__0.xml",
    }
    row.update(overrides)
    return row


class TestConvertGeometry:
    def test_wkb_bytes(self) -> None:
        assert convert_geometry(Point(1, 2).wkb).equals(Point(1, 2))

    def test_memoryview(self) -> None:
        assert convert_geometry(memoryview(Point(1, 2).wkb)).equals(Point(1, 2))

    def test_wkt(self) -> None:
        assert convert_geometry("POINT (1 2)").equals(Point(1, 2))

    def test_mapping(self) -> None:
        assert convert_geometry({"type": "Point", "coordinates": [1, 2]}).equals(Point(1, 2))

    def test_none(self) -> None:
        assert convert_geometry(None) is None


class TestMapRow:
    def test_all_properties(self) -> None:
        feature = map_row(_row(), ALL_PROPERTIES)
        assert feature.type == "Feature"
        assert feature.geometry == {"type": "Point", "coordinates": (-73.1, 40.7)}
        assert feature.properties == {
            "id": "https://geoconnex.us/test/1",
            "geoconnex_sitemap": "https://geoconnex.us/sitemap/test__0.xml",
        }
        assert feature.bbox is None

    def test_only_requested_properties(self) -> None:
        feature = map_row(_row(), ID_ONLY)
        assert feature.properties == {"id": "https://geoconnex.us/test/1"}

    def test_no_properties(self) -> None:
        assert map_row(_row(), NO_PROPERTIES).properties == {}

    def test_requested_but_absent_is_none(self) -> None:
        row = _row()
        del row["geoconnex_sitemap"]
        feature = map_row(row, ALL_PROPERTIES)
        assert feature.properties["geoconnex_sitemap"] is None

    def test_null_value_kept(self) -> None:
        feature = map_row(_row(geoconnex_sitemap=None), ALL_PROPERTIES)
        assert "geoconnex_sitemap" in feature.properties
        assert feature.properties["geoconnex_sitemap"] is None

    def test_row_bbox_as_feature_bbox(self) -> None:
        row = _row(geometry=box(0, 0, 1, 2).wkb, bbox={"xmin": 0.0, "ymin": 0.0, "xmax": 1.0, "ymax": 2.0})
        feature = map_row(row, ID_ONLY, include_bbox=True)
        assert feature.bbox == (0.0, 0.0, 1.0, 2.0)
        assert "bbox" not in feature.properties

    def test_missing_geometry(self) -> None:
        with pytest.raises(MalformedRemoteRow) as exc_info:
            map_row(_row(geometry=None), ALL_PROPERTIES)
        assert exc_info.value.row_id == "https://geoconnex.us/test/1"

    def test_undecodable_geometry(self) -> None:
        with pytest.raises(MalformedRemoteRow):
            map_row(_row(geometry=b"not a geometry"), ALL_PROPERTIES)


class TestMapRows:
    def test_preserves_order_and_echoes_bbox(self) -> None:
        rows = [_row(id=f"f{i}") for i in range(3)]
        fc = map_rows(rows, ID_ONLY, [-73.2, 40.5, -73.0, 41.0])
        assert [f.properties["id"] for f in fc.features] == ["f0", "f1", "f2"]
        assert fc.bbox == (-73.2, 40.5, -73.0, 41.0)
        assert fc.type == "FeatureCollection"

    def test_integer_bbox_kept(self) -> None:
        fc = map_rows([], ALL_PROPERTIES, [-73, 40, -72, 41])
        assert fc.bbox == (-73, 40, -72, 41)
        assert [type(v) for v in fc.bbox] == [int, int, int, int]

    def test_empty(self) -> None:
        fc = map_rows([], ALL_PROPERTIES, (0, 0, 1, 1))
        assert fc.features == []
        assert len(fc) == 0
        assert fc.to_geojson() == {"type": "FeatureCollection", "features": [], "bbox": [0.0, 0.0, 1.0, 1.0]}
