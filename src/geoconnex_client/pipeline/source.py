"""
Remote GeoParquet buffers backed by DuckDB.

A buffer is a random-access view of one large remote Parquet file: DuckDB's
``read_parquet`` issues HTTP range requests for the footer, the row-group
statistics and the column chunks a query actually needs, so the file is never
downloaded whole.

Two variants satisfy the RemoteBuffer interface:
- PlainBuffer: every query re-reads the byte ranges it needs
- CachingBuffer: wraps a PlainBuffer and keeps fetched byte ranges and parquet
  metadata in memory for the lifetime of the owning client
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

import duckdb

from ..types import RemoteSourceUnavailable

logger = logging.getLogger(__name__)

REMOTE_PREFIXES = ("http://", "https://", "s3://", "gs://", "gcs://")

# Settings that keep byte ranges and parquet metadata in process memory.
# Not every DuckDB release knows all of them.
CACHE_SETTINGS = (
    "enable_external_file_cache",
    "enable_object_cache",
)
HTTP_CACHE_SETTINGS = ("enable_http_metadata_cache",)


class RemoteBuffer(Protocol):
    """Random-access byte source for a single remote parquet file."""
    url: str
    columns: tuple[str, ...]

    @property
    def cached(self) -> bool: ...

    def relation_sql(self) -> str: ...

    def cursor(self) -> duckdb.DuckDBPyConnection: ...

    def close(self) -> None: ...


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _is_remote(url: str) -> bool:
    return url.startswith(REMOTE_PREFIXES)


def _cache_settings(url: str) -> tuple[str, ...]:
    if _is_remote(url):
        return CACHE_SETTINGS + HTTP_CACHE_SETTINGS
    return CACHE_SETTINGS


def _apply_flag(con: duckdb.DuckDBPyConnection, name: str, enabled: bool) -> bool:
    """Set a boolean DuckDB option, tolerating options missing from this DuckDB version."""
    try:
        con.execute(f"SET {name}={str(enabled).lower()};")
        return True
    except duckdb.Error:
        logger.debug(f"{name} not available in this DuckDB version")
        return False


def _setup_duckdb(url: str, duckdb_settings: dict) -> duckdb.DuckDBPyConnection:
    """Configure an in-memory DuckDB connection for remote parquet reads."""
    con = duckdb.connect()

    if _is_remote(url):
        con.execute("INSTALL httpfs; LOAD httpfs;")
        con.execute("SET http_keep_alive=true;")

    con.execute(f"SET memory_limit='{duckdb_settings.get('memory_limit', '2GB')}';")
    con.execute(f"SET threads={int(duckdb_settings.get('threads', 4))};")

    # Result order must follow file order so repeated queries are identical
    con.execute("SET preserve_insertion_order=true;")
    con.execute("SET enable_progress_bar=false;")

    # Geometry stays WKB; shapely decodes it during mapping
    _apply_flag(con, "enable_geoparquet_conversion", False)

    for name in _cache_settings(url):
        _apply_flag(con, name, False)

    return con


class PlainBuffer:
    """Uncached remote parquet buffer."""

    def __init__(self, url: str, connection: duckdb.DuckDBPyConnection, columns: tuple[str, ...]):
        self.url = url
        self.columns = columns
        self._connection = connection

    @property
    def cached(self) -> bool:
        return False

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        if self._connection is None:
            raise RemoteSourceUnavailable(self.url, "buffer has been closed")
        return self._connection

    def relation_sql(self) -> str:
        """Table expression that scans the remote file."""
        return f"read_parquet({_quote_literal(self.url)})"

    def cursor(self) -> duckdb.DuckDBPyConnection:
        """Independent cursor on the shared connection, one per query."""
        return self.connection.cursor()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __repr__(self) -> str:
        return f"PlainBuffer(url={self.url!r}, columns={list(self.columns)})"


class CachingBuffer:
    """Wraps a buffer and retains fetched byte ranges in memory.

    The cache is never invalidated or evicted; the remote file is treated as
    immutable for the life of the buffer.
    """

    def __init__(self, base: PlainBuffer):
        self._base = base
        self.url = base.url
        self.columns = base.columns

        enabled = [name for name in _cache_settings(self.url) if _apply_flag(base.connection, name, True)]
        logger.debug(f"Byte-range caching enabled for {self.url}: {', '.join(enabled) or 'none available'}")

    @property
    def cached(self) -> bool:
        return True

    @property
    def base(self) -> PlainBuffer:
        return self._base

    def relation_sql(self) -> str:
        return self._base.relation_sql()

    def cursor(self) -> duckdb.DuckDBPyConnection:
        return self._base.cursor()

    def close(self) -> None:
        self._base.close()

    def __repr__(self) -> str:
        return f"CachingBuffer({self._base!r})"


def open_buffer(url: str, duckdb_settings: dict) -> PlainBuffer:
    """
    Open a remote parquet file without downloading it.

    Reads only the footer to discover the schema, which also verifies the
    source is reachable.

    Args:
        url: HTTP(S)/S3 URL or local path of the parquet file
        duckdb_settings: memory_limit/threads from Config.get_duckdb_settings()

    Returns:
        PlainBuffer bound to the file

    Raises:
        RemoteSourceUnavailable: If the file cannot be reached or read
    """
    start_time = time.time()
    con = None
    try:
        con = _setup_duckdb(url, duckdb_settings)
        schema = con.execute(
            f"DESCRIBE SELECT * FROM read_parquet({_quote_literal(url)})"
        ).fetchall()
    except duckdb.Error as e:
        if con is not None:
            con.close()
        logger.error(f"Failed to open remote parquet {url}: {e}")
        raise RemoteSourceUnavailable(url, str(e)) from e

    columns = tuple(row[0] for row in schema)
    elapsed = time.time() - start_time
    logger.info(f"Opened {url} ({len(columns)} columns) in {elapsed:.2f} seconds")
    logger.debug(f"Schema: {columns}")
    return PlainBuffer(url, con, columns)
