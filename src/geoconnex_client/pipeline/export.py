"""
Exporter - write query results to disk.

GeoJSON is written from the collection itself so the echoed query bbox is
kept; GeoPackage goes through geopandas.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from shapely.geometry import shape

from ..domain.enums import ExportFormat
from ..domain.models import Feature, FeatureCollection
from ..utils import timer

logger = logging.getLogger(__name__)


class Exporter:
    """
    Feature collection exporter.

    Supports GeoJSON and GeoPackage with format detection from the file
    extension.
    """

    def __init__(self, out_path: Path, fmt: Optional[ExportFormat] = None):
        """
        Args:
            out_path: Destination file; its extension picks the format
            fmt: Format to use regardless of extension
        """
        self.out_path = Path(out_path)
        self.fmt = fmt or ExportFormat.from_extension(self.out_path)

    @timer
    def write(self, data: FeatureCollection | Feature, layer_name: str = "features") -> Path:
        """
        Write a feature collection or single feature.

        Args:
            data: Query result
            layer_name: Layer name for GeoPackage output

        Returns:
            out_path, once written
        """
        if isinstance(data, Feature):
            data = FeatureCollection(features=[data], bbox=self._feature_bounds(data))

        self.out_path.parent.mkdir(parents=True, exist_ok=True)

        if self.fmt == ExportFormat.GEOJSON:
            self._export_to_geojson(data)
        elif self.fmt == ExportFormat.GPKG:
            self._export_to_gpkg(data, layer_name)
        else:
            raise ValueError(f"Unsupported export format: {self.fmt}")

        return self.out_path

    @staticmethod
    def _feature_bounds(feature: Feature) -> tuple[float, float, float, float]:
        return tuple(shape(feature.geometry).bounds)

    def _export_to_geojson(self, data: FeatureCollection) -> None:
        with open(self.out_path, "w", encoding="utf-8") as f:
            json.dump(data.to_geojson(), f, default=str)

        problems = self._geojson_problems(self.out_path)
        if problems:
            logger.error(f"GeoJSON check failed for {self.out_path}: {'; '.join(problems)}")
            raise ValueError(f"Generated GeoJSON file is invalid: {self.out_path}")

        logger.info(f"GeoJSON export completed: {len(data):,} features written to {self.out_path}")

    def _export_to_gpkg(self, data: FeatureCollection, layer_name: str) -> None:
        gdf = data.to_geodataframe()
        gdf.to_file(self.out_path, driver="GPKG", layer=layer_name)
        logger.info(f"GeoPackage export completed: {len(gdf):,} features written to {self.out_path} ({layer_name})")

    @staticmethod
    def _geojson_problems(filepath: Path) -> list[str]:
        """Structural problems in a written FeatureCollection file, empty when sound."""
        try:
            with open(filepath, encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return [f"unreadable: {e}"]

        if not isinstance(doc, dict) or doc.get("type") != "FeatureCollection":
            return ["top level is not a FeatureCollection"]

        problems = []
        features = doc.get("features")
        if not isinstance(features, list):
            problems.append("'features' is not an array")
        elif any(not isinstance(f, dict) or f.get("type") != "Feature" for f in features):
            problems.append("'features' holds non-Feature members")
        bbox = doc.get("bbox")
        if bbox is not None and len(bbox) != 4:
            problems.append(f"'bbox' has {len(bbox)} values")
        return problems
