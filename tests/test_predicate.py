"""Tests for the row-bbox predicate builder."""

from __future__ import annotations

import pytest

from geoconnex_client.bbox import validate_bbox
from geoconnex_client.domain.enums import QueryMode
from geoconnex_client.pipeline.predicate import Comparison, build_predicate

QUERY = validate_bbox([-73.2, 40.5, -73.0, 41.0])


def _row(xmin: float, ymin: float, xmax: float, ymax: float) -> dict[str, float]:
    return {"xmin": xmin, "ymin": ymin, "xmax": xmax, "ymax": ymax}


class TestContained:
    def test_sql(self) -> None:
        predicate = build_predicate(QUERY, QueryMode.CONTAINED)
        assert predicate.to_sql() == (
            "bbox.xmin >= -73.2 AND bbox.xmax <= -73.0 AND bbox.ymin >= 40.5 AND bbox.ymax <= 41.0"
        )

    def test_matches_inside_and_edges(self) -> None:
        predicate = build_predicate(QUERY, QueryMode.CONTAINED)
        assert predicate.matches(_row(-73.1, 40.6, -73.05, 40.9))
        assert predicate.matches(_row(-73.2, 40.5, -73.0, 41.0))
        assert predicate.matches(_row(-73.2, 40.5, -73.2, 40.5))

    def test_rejects_straddling(self) -> None:
        predicate = build_predicate(QUERY, QueryMode.CONTAINED)
        assert not predicate.matches(_row(-73.3, 40.6, -73.1, 40.8))
        assert not predicate.matches(_row(-80.0, 35.0, -70.0, 45.0))


class TestIntersecting:
    def test_sql(self) -> None:
        predicate = build_predicate(QUERY, QueryMode.INTERSECTING)
        assert predicate.to_sql() == (
            "bbox.xmin <= -73.0 AND bbox.xmax >= -73.2 AND bbox.ymin <= 41.0 AND bbox.ymax >= 40.5"
        )

    def test_matches_overlap_and_enclosing(self) -> None:
        predicate = build_predicate(QUERY, QueryMode.INTERSECTING)
        assert predicate.matches(_row(-73.3, 40.6, -73.1, 40.8))
        assert predicate.matches(_row(-80.0, 35.0, -70.0, 45.0))
        # Touching edges count as intersecting
        assert predicate.matches(_row(-74.0, 40.0, -73.2, 40.5))

    def test_rejects_disjoint(self) -> None:
        predicate = build_predicate(QUERY, QueryMode.INTERSECTING)
        assert not predicate.matches(_row(-100.0, 35.0, -100.0, 35.0))
        assert not predicate.matches(_row(-72.9, 40.6, -72.0, 40.8))

    @pytest.mark.parametrize(
        "row",
        [
            _row(-73.15, 40.6, -73.05, 40.8),
            _row(-73.2, 40.5, -73.2, 40.5),
            _row(-73.0, 41.0, -73.0, 41.0),
        ],
    )
    def test_contained_implies_intersecting(self, row) -> None:
        assert build_predicate(QUERY, QueryMode.CONTAINED).matches(row)
        assert build_predicate(QUERY, QueryMode.INTERSECTING).matches(row)


class TestComparison:
    def test_literal_round_trips(self) -> None:
        clause = Comparison("xmin", ">=", 0.1 + 0.2)
        assert float(clause.to_sql().split()[-1]) == 0.1 + 0.2

    def test_mode_accepts_string(self) -> None:
        predicate = build_predicate(QUERY, "intersecting")
        assert predicate.mode is QueryMode.INTERSECTING

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            build_predicate(QUERY, "touching")
