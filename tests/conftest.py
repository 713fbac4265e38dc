"""Shared pytest fixtures for the geoconnex client test suite."""

from __future__ import annotations

from pathlib import Path

import geopandas as gpd
import pytest
from shapely.geometry import LineString, Point, box

from geoconnex_client.config import Config

# Query box used throughout: a slice of Long Island
QUERY_BBOX = (-73.2, 40.5, -73.0, 41.0)

# File order of the features fixture
FEATURE_IDS = [
    "https://geoconnex.us/test/inside-point",
    "https://geoconnex.us/test/straddle",
    "https://geoconnex.us/test/inside-polygon",
    "https://geoconnex.us/test/far-away",
    "https://geoconnex.us/test/admin-boundary",
    "https://geoconnex.us/test/corner",
]

CONTAINED_IDS = [FEATURE_IDS[0], FEATURE_IDS[2], FEATURE_IDS[5]]
INTERSECTING_IDS = [FEATURE_IDS[0], FEATURE_IDS[1], FEATURE_IDS[2], FEATURE_IDS[4], FEATURE_IDS[5]]

CATCHMENT_POINT = (-107.8, 37.2)
EMPTY_POINT = (-50.0, 10.0)

ENV_VARS = (
    "GEOCONNEX_FEATURES_URL",
    "GEOCONNEX_CATCHMENTS_URL",
    "GEOCONNEX_CATCHMENT_MARGIN",
    "DUCKDB_MEMORY_LIMIT",
    "DUCKDB_THREADS",
    "ENVIRONMENT",
)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove client variables; anything load_dotenv sets is undone afterwards."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


# ---------------------------------------------------------------------------
# Data fixtures
# ---------------------------------------------------------------------------


def _features_frame() -> gpd.GeoDataFrame:
    geometries = [
        Point(-73.1, 40.7),
        box(-73.3, 40.6, -73.1, 40.8),
        box(-73.15, 40.6, -73.05, 40.8),
        Point(-100.0, 35.0),
        box(-80.0, 35.0, -70.0, 45.0),
        Point(-73.2, 40.5),
    ]
    return gpd.GeoDataFrame(
        {
            "id": FEATURE_IDS,
            "geoconnex_sitemap": [f"https://geoconnex.us/sitemap/test/test__{i}.xml" for i in range(len(FEATURE_IDS))],
        },
        geometry=geometries,
        crs="EPSG:4326",
    )


@pytest.fixture(scope="session")
def features_parquet(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """GeoParquet file with a per-row covering bbox struct column."""
    path = tmp_path_factory.mktemp("features") / "geoconnex_features.parquet"
    _features_frame().to_parquet(path, write_covering_bbox=True)
    return path


@pytest.fixture(scope="session")
def features_parquet_without_bbox(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """GeoParquet file lacking the covering bbox column."""
    path = tmp_path_factory.mktemp("features_no_bbox") / "features.parquet"
    _features_frame().to_parquet(path)
    return path


@pytest.fixture(scope="session")
def catchments_fgb(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """FlatGeobuf with two adjacent catchments and a flowline."""
    path = tmp_path_factory.mktemp("catchments") / "reference_catchments_and_flowlines.fgb"
    gdf = gpd.GeoDataFrame(
        {
            "featureid": ["cat-west", "flow-1", "cat-east"],
            "mainstem": [
                "https://geoconnex.us/ref/mainstems/29559",
                "https://geoconnex.us/ref/mainstems/29559",
                "https://geoconnex.us/ref/mainstems/1610",
            ],
        },
        geometry=[
            box(-108.0, 37.0, -107.5, 37.5),
            LineString([(-107.9, 37.1), (-107.7, 37.3)]),
            box(-107.5, 37.0, -107.0, 37.5),
        ],
        crs="EPSG:4326",
    )
    gdf.to_file(path, driver="FlatGeobuf", engine="fiona")
    return path


@pytest.fixture()
def local_config(clean_env: pytest.MonkeyPatch, features_parquet: Path, catchments_fgb: Path) -> Config:
    """Config pointing both datasets at local fixture files."""
    clean_env.setenv("GEOCONNEX_FEATURES_URL", str(features_parquet))
    clean_env.setenv("GEOCONNEX_CATCHMENTS_URL", str(catchments_fgb))
    clean_env.setenv("DUCKDB_THREADS", "1")
    return Config()
