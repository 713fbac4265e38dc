"""
Domain Models and Types

This module contains the core domain models and enumerations used throughout the client.

Models:
- Feature: GeoJSON feature with conditional properties
- FeatureCollection: Ordered features plus the echoed query bbox

Enums:
- GeoconnexColumn: Recognized columns of the features export
- QueryMode: Contained vs intersecting row-bbox semantics
- ExportFormat: Export format options (geojson, gpkg)
"""

from .enums import ExportFormat, GeoconnexColumn, QueryMode
from .models import Feature, FeatureCollection

__all__ = [
    "Feature", "FeatureCollection",
    "ExportFormat", "GeoconnexColumn", "QueryMode"
]
