"""
geoconnex client pipeline components

Fetch -> filter -> assemble over large remote files:

Components:
- source: RemoteBuffer variants (PlainBuffer, CachingBuffer) over DuckDB read_parquet
- predicate: Row-bbox predicates for contained / intersecting queries
- projection: Column transfer and property presence rules
- transform: Row-to-feature mapping and feature collection assembly
- catchment: Point-in-polygon catchment lookup over a FlatGeobuf stream
- export: Exporter for GeoJSON and GeoPackage output
"""

from .catchment import locate_catchment, open_feature_stream
from .export import Exporter
from .predicate import PredicateExpression, build_predicate
from .projection import ColumnProjection, resolve_columns
from .source import CachingBuffer, PlainBuffer, RemoteBuffer, open_buffer
from .transform import map_row, map_rows

__all__ = [
    "CachingBuffer", "PlainBuffer", "RemoteBuffer", "open_buffer",
    "PredicateExpression", "build_predicate",
    "ColumnProjection", "resolve_columns",
    "map_row", "map_rows",
    "locate_catchment", "open_feature_stream",
    "Exporter",
]
