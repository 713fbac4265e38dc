"""
Row-bbox predicates for contained and intersecting queries.

Every row of the geoconnex export carries a covering ``bbox`` struct
(xmin, ymin, xmax, ymax). Both query modes compare only that struct against the
query box, so DuckDB can prune row groups from Parquet statistics without
fetching geometry. The test is an approximation: a non-rectangular feature whose
bbox overlaps the query box may not overlap it geometrically, and the
intersecting mode can return large administrative boundaries.
"""

from __future__ import annotations

import operator
from collections.abc import Mapping
from dataclasses import dataclass

from ..domain.enums import QueryMode
from ..types import BoundingBox

_OPERATORS = {
    ">=": operator.ge,
    "<=": operator.le,
}


def _fmt_num(v: float) -> str:
    # Shortest text that round-trips to the same double
    return repr(float(v))


@dataclass(frozen=True)
class Comparison:
    """Single ``bbox.<field> <op> value`` clause."""
    field: str
    op: str
    value: float

    def to_sql(self, column: str = "bbox") -> str:
        return f"{column}.{self.field} {self.op} {_fmt_num(self.value)}"

    def matches(self, row_bbox: Mapping[str, float]) -> bool:
        return _OPERATORS[self.op](row_bbox[self.field], self.value)


@dataclass(frozen=True)
class PredicateExpression:
    """Conjunction of row-bbox comparisons."""
    mode: QueryMode
    clauses: tuple[Comparison, ...]

    def to_sql(self, column: str = "bbox") -> str:
        """Render as a WHERE fragment over the ``bbox`` struct column."""
        return " AND ".join(c.to_sql(column) for c in self.clauses)

    def matches(self, row_bbox: Mapping[str, float]) -> bool:
        """Evaluate against a row bbox mapping with xmin/ymin/xmax/ymax keys."""
        return all(c.matches(row_bbox) for c in self.clauses)


def build_predicate(bbox: BoundingBox, mode: QueryMode) -> PredicateExpression:
    """
    Build the row-bbox filter for a validated query box.

    Args:
        bbox: Validated query bounding box
        mode: QueryMode.CONTAINED or QueryMode.INTERSECTING

    Returns:
        PredicateExpression usable as SQL or evaluated in memory
    """
    xmin, ymin, xmax, ymax = bbox

    if mode == QueryMode.CONTAINED:
        clauses = (
            Comparison("xmin", ">=", xmin),
            Comparison("xmax", "<=", xmax),
            Comparison("ymin", ">=", ymin),
            Comparison("ymax", "<=", ymax),
        )
    elif mode == QueryMode.INTERSECTING:
        clauses = (
            Comparison("xmin", "<=", xmax),
            Comparison("xmax", ">=", xmin),
            Comparison("ymin", "<=", ymax),
            Comparison("ymax", ">=", ymin),
        )
    else:
        raise ValueError(f"Unsupported query mode: {mode}")

    return PredicateExpression(mode=QueryMode(mode), clauses=clauses)
