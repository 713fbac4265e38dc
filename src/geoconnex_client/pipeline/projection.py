"""Column projection: what is transferred and which properties are surfaced."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Optional

from ..domain.enums import GeoconnexColumn
from ..types import InvalidColumnSelection

# bbox is a filter input and is only returned when asked for
DEFAULT_COLUMNS = (
    GeoconnexColumn.ID,
    GeoconnexColumn.GEOMETRY,
    GeoconnexColumn.GEOCONNEX_SITEMAP,
)

# Optional attributes surfaced in feature properties
PROPERTY_COLUMNS = (
    GeoconnexColumn.ID,
    GeoconnexColumn.GEOCONNEX_SITEMAP,
)


@dataclass(frozen=True)
class ColumnProjection:
    """Resolved column selection for one query."""
    transfer_columns: tuple[str, ...]
    property_flags: dict[GeoconnexColumn, bool]
    include_bbox: bool = False

    def requested_properties(self) -> list[GeoconnexColumn]:
        return [col for col, wanted in self.property_flags.items() if wanted]


def _coerce(column: object) -> GeoconnexColumn:
    try:
        return GeoconnexColumn(column)
    except ValueError:
        raise InvalidColumnSelection(column, [c.value for c in GeoconnexColumn]) from None


def resolve_columns(
    requested: Optional[Iterable[str | GeoconnexColumn]] = None,
    available: Optional[Collection[str]] = None,
) -> ColumnProjection:
    """
    Resolve a requested column set into transfer columns and property flags.

    Args:
        requested: Columns asked for by the caller; None means DEFAULT_COLUMNS
        available: Column names present in the remote schema, when known.
            Requested columns missing from the schema are not transferred and
            surface as None-valued properties.

    Returns:
        ColumnProjection with geometry always transferred

    Raises:
        InvalidColumnSelection: If a requested column is not recognized
    """
    if requested is None:
        selection = set(DEFAULT_COLUMNS)
    elif isinstance(requested, str):
        selection = {_coerce(requested)}
    else:
        selection = {_coerce(c) for c in requested}

    selection.add(GeoconnexColumn.GEOMETRY)

    # Schema order keeps the SELECT list stable between calls
    transfer = tuple(
        col.value for col in GeoconnexColumn
        if col in selection and (available is None or col.value in available)
    )
    flags = {col: col in selection for col in PROPERTY_COLUMNS}

    return ColumnProjection(
        transfer_columns=transfer,
        property_flags=flags,
        include_bbox=GeoconnexColumn.BBOX in selection,
    )
