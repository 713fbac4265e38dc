"""
Client Enumerations

Core enums for type safety and clear interface definitions across the client.
"""

from enum import Enum
from pathlib import Path


class GeoconnexColumn(str, Enum):
    """Columns of the geoconnex features GeoParquet export."""
    ID = "id"                               # Persistent identifier URI
    GEOMETRY = "geometry"                   # WKB geometry
    BBOX = "bbox"                           # Per-row covering bbox struct
    GEOCONNEX_SITEMAP = "geoconnex_sitemap" # Sitemap the feature was harvested from


class QueryMode(str, Enum):
    """Row-bbox comparison used to select features."""
    CONTAINED = "contained"       # Row bbox lies entirely inside the query box
    INTERSECTING = "intersecting" # Row bbox overlaps the query box at all


class ExportFormat(str, Enum):
    """Export format options for query results."""
    GEOJSON = "geojson"     # Standards-compliant JSON format
    GPKG = "gpkg"           # SQLite-based format

    @classmethod
    def from_extension(cls, path: Path | str) -> 'ExportFormat':
        """Infer format from file extension"""
        ext = Path(path).suffix.lower()
        mapping = {
            '.geojson': cls.GEOJSON,
            '.json': cls.GEOJSON,
            '.gpkg': cls.GPKG,
        }
        return mapping.get(ext, cls.GEOJSON)
