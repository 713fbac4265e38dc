"""
Client Domain Models

Pydantic models for the GeoJSON structures returned by the client.
"""

from typing import Any, Literal, Optional, Union

import geopandas as gpd
from pydantic import BaseModel, Field


class Feature(BaseModel):
    """GeoJSON feature: one geometry plus a flat property mapping."""
    type: Literal["Feature"] = "Feature"
    geometry: dict[str, Any] = Field(..., description="GeoJSON geometry object")
    properties: dict[str, Any] = Field(default_factory=dict, description="Flat attribute mapping")
    id: Optional[Union[str, int]] = Field(None, description="Feature identifier from the source")
    bbox: Optional[tuple[float, float, float, float]] = Field(None, description="Row bbox when requested")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def to_geojson(self) -> dict[str, Any]:
        """Plain GeoJSON mapping; optional members are omitted when unset."""
        data: dict[str, Any] = {
            "type": self.type,
            "geometry": self.geometry,
            "properties": dict(self.properties),
        }
        if self.id is not None:
            data["id"] = self.id
        if self.bbox is not None:
            data["bbox"] = list(self.bbox)
        return data


class FeatureCollection(BaseModel):
    """GeoJSON feature collection carrying the caller's query bbox."""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Feature] = Field(default_factory=list, description="Features in source order")
    # Union keeps ints as ints so the bbox is echoed exactly as given
    bbox: tuple[Union[int, float], Union[int, float], Union[int, float], Union[int, float]] = Field(
        ..., description="Query bbox echoed from the caller"
    )

    class Config:
        """Pydantic configuration."""
        frozen = True

    def __len__(self) -> int:
        return len(self.features)

    def to_geojson(self) -> dict[str, Any]:
        """Plain GeoJSON mapping, ready for json.dumps or map libraries."""
        return {
            "type": self.type,
            "features": [f.to_geojson() for f in self.features],
            "bbox": list(self.bbox),
        }

    def to_geodataframe(self) -> gpd.GeoDataFrame:
        """Build a GeoDataFrame (EPSG:4326) with one row per feature."""
        if not self.features:
            return gpd.GeoDataFrame(columns=["geometry"], geometry="geometry", crs="EPSG:4326")
        return gpd.GeoDataFrame.from_features(
            [f.to_geojson() for f in self.features], crs="EPSG:4326"
        )
