"""
GeoconnexClient - bounding-box queries over the geoconnex features export.

Usage:
    client = GeoconnexClient(cache=True)
    fc = await client.get_features_inside_bbox((-73.2, 40.5, -73.0, 41.0))
    catchment = await client.get_catchment_with_mainstem_metadata_at_point((-107.8, 37.2))
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Optional

import duckdb

from .bbox import validate_bbox, validate_point
from .config import Config
from .domain.enums import GeoconnexColumn, QueryMode
from .domain.models import Feature, FeatureCollection
from .pipeline.catchment import locate_catchment
from .pipeline.predicate import PredicateExpression, build_predicate
from .pipeline.projection import ColumnProjection, resolve_columns
from .pipeline.source import CachingBuffer, PlainBuffer, RemoteBuffer, open_buffer
from .pipeline.transform import map_rows
from .types import RemoteSourceUnavailable

logger = logging.getLogger(__name__)

ColumnsArg = Optional[Iterable[str | GeoconnexColumn]]


class GeoconnexClient:
    """
    A client for fetching GeoJSON features from geoconnex.

    The remote buffer is opened lazily on the first query and reused by every
    later query on the same instance. With ``cache=True`` it is wrapped once in
    a CachingBuffer that keeps fetched byte ranges in memory until the client
    is discarded or closed.
    """

    def __init__(self, cache: bool = False, config: Optional[Config] = None):
        """
        Initialize the client.

        Args:
            cache: Keep fetched byte ranges in memory across queries
            config: Client configuration (loaded from the environment if omitted)
        """
        self.cache = cache
        self.config = config or Config()
        self.base_url = self.config.sources.features_url
        self._buffer: Optional[PlainBuffer] = None
        self._cache: Optional[CachingBuffer] = None
        self._init_lock = asyncio.Lock()

    async def acquire_buffer(self) -> RemoteBuffer:
        """
        Return the buffer for the features export, opening it on first use.

        Raises:
            RemoteSourceUnavailable: If the first open fails; the next call retries
        """
        async with self._init_lock:
            if self._buffer is None:
                logger.info(f"Opening remote buffer: {self.base_url}")
                self._buffer = await asyncio.to_thread(
                    open_buffer, self.base_url, self.config.get_duckdb_settings()
                )
            if not self.cache:
                return self._buffer
            if self._cache is None:
                self._cache = CachingBuffer(self._buffer)
            return self._cache

    async def get_features_inside_bbox(
        self,
        bbox: Sequence[float],
        columns: ColumnsArg = None,
    ) -> FeatureCollection:
        """
        Get all features whose bbox lies completely within a bounding box.

        Args:
            bbox: [xmin, ymin, xmax, ymax]
            columns: Columns to fetch; defaults to id, geometry, geoconnex_sitemap

        Returns:
            FeatureCollection of contained features, carrying ``bbox``
        """
        return await self._query_bbox(bbox, columns, QueryMode.CONTAINED)

    async def get_features_intersecting_bbox(
        self,
        bbox: Sequence[float],
        columns: ColumnsArg = None,
    ) -> FeatureCollection:
        """
        Get all features whose bbox intersects a bounding box.

        NOTE: this may return very large features representing administrative
        boundaries.

        Args:
            bbox: [xmin, ymin, xmax, ymax]
            columns: Columns to fetch; defaults to id, geometry, geoconnex_sitemap

        Returns:
            FeatureCollection of intersecting features, carrying ``bbox``
        """
        return await self._query_bbox(bbox, columns, QueryMode.INTERSECTING)

    async def get_catchment_with_mainstem_metadata_at_point(
        self,
        point: Sequence[float],
    ) -> Optional[Feature]:
        """
        Get the reference catchment containing a point.

        Args:
            point: (x, y) coordinate, i.e. (longitude, latitude)

        Returns:
            The first catchment feature containing the point, or None
        """
        xy = validate_point(point)
        return await asyncio.to_thread(
            locate_catchment,
            xy,
            self.config.sources.catchments_url,
            self.config.catchment.search_margin,
        )

    async def _query_bbox(
        self,
        bbox: Sequence[float],
        columns: ColumnsArg,
        mode: QueryMode,
    ) -> FeatureCollection:
        # Caller input is fully validated before the buffer is touched
        if isinstance(bbox, Iterator):
            bbox = tuple(bbox)
        query_box = validate_bbox(bbox)
        predicate = build_predicate(query_box, mode)
        if columns is not None and not isinstance(columns, str):
            columns = list(columns)
        resolve_columns(columns)

        buffer = await self.acquire_buffer()
        if GeoconnexColumn.BBOX.value not in buffer.columns:
            raise RemoteSourceUnavailable(buffer.url, "source has no 'bbox' covering column")
        projection = resolve_columns(columns, available=buffer.columns)

        start_time = time.time()
        rows = await asyncio.to_thread(self._execute, buffer, predicate, projection)
        fc = map_rows(rows, projection.property_flags, bbox, projection.include_bbox)

        elapsed = time.time() - start_time
        logger.info(f"Fetched {len(fc):,} {mode.value} features in {elapsed:.1f} seconds")
        return fc

    @staticmethod
    def _execute(
        buffer: RemoteBuffer,
        predicate: PredicateExpression,
        projection: ColumnProjection,
    ) -> list[dict[str, Any]]:
        """Run the filtered projection on a dedicated cursor and return rows as dicts."""
        select_list = ", ".join(f'"{c}"' for c in projection.transfer_columns)
        sql = f"SELECT {select_list} FROM {buffer.relation_sql()} WHERE {predicate.to_sql()}"
        logger.debug(f"SQL preview: {sql[:200]}...")

        cur = buffer.cursor()
        try:
            result = cur.execute(sql)
            names = [d[0] for d in result.description]
            return [dict(zip(names, values)) for values in result.fetchall()]
        except duckdb.Error as e:
            logger.error(f"Query against {buffer.url} failed: {e}")
            raise RemoteSourceUnavailable(buffer.url, str(e)) from e
        finally:
            cur.close()

    def close(self) -> None:
        """Release the remote buffer and its cache."""
        if self._buffer is not None:
            self._buffer.close()
        self._buffer = None
        self._cache = None

    def __repr__(self) -> str:
        return f"GeoconnexClient(base_url={self.base_url!r}, cache={self.cache})"
