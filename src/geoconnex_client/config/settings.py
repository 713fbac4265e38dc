"""
Configuration management for the geoconnex client.

Usage:
    from geoconnex_client.config.settings import Config
    config = Config()
    client = GeoconnexClient(cache=True, config=config)

Environment Variables:
    GEOCONNEX_FEATURES_URL: GeoParquet export of geoconnex features
    GEOCONNEX_CATCHMENTS_URL: FlatGeobuf of reference catchments and flowlines
    GEOCONNEX_CATCHMENT_MARGIN: Half-width of the catchment search window
    DUCKDB_MEMORY_LIMIT: DuckDB memory_limit setting, e.g. 512MB or 2GB
    DUCKDB_THREADS: DuckDB worker threads
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from ..types import GeoconnexError

logger = logging.getLogger(__name__)

DEFAULT_FEATURES_URL = (
    "https://storage.googleapis.com/metadata-geoconnex-us/exports/geoconnex_features.parquet"
)
DEFAULT_CATCHMENTS_URL = (
    "https://storage.googleapis.com/national-hydrologic-geospatial-fabric-reference-hydrofabric/"
    "reference_catchments_and_flowlines.fgb"
)
DEFAULT_CATCHMENT_MARGIN = 0.1
DEFAULT_MEMORY_LIMIT = "2GB"
DEFAULT_THREADS = 4

MEMORY_UNITS = ("MB", "GB", "TB")
PROJECT_MARKERS = ("pyproject.toml", ".git")


class ConfigurationError(GeoconnexError):
    """Environment configuration could not be turned into valid settings."""
    pass


@dataclass
class SourceConfig:
    """Remote dataset locations."""
    features_url: str = DEFAULT_FEATURES_URL
    catchments_url: str = DEFAULT_CATCHMENTS_URL

    def __post_init__(self):
        for name in ("features_url", "catchments_url"):
            if not getattr(self, name):
                raise ValueError(f"{name} cannot be empty")


@dataclass
class CatchmentConfig:
    """Catchment lookup configuration."""
    search_margin: float = DEFAULT_CATCHMENT_MARGIN

    def __post_init__(self):
        if not self.search_margin > 0:
            raise ValueError(f"Catchment search margin must be positive, got {self.search_margin}")


@dataclass
class ProcessingConfig:
    """DuckDB connection limits."""
    memory_limit: str = DEFAULT_MEMORY_LIMIT
    threads: int = DEFAULT_THREADS

    def __post_init__(self):
        if self.threads < 1:
            raise ValueError(f"DuckDB needs at least one thread, got {self.threads}")
        if not self.memory_limit.endswith(MEMORY_UNITS):
            raise ValueError(f"Memory limit {self.memory_limit!r} must end with one of {', '.join(MEMORY_UNITS)}")


class Config:
    """
    Settings for one client, read from the process environment.

    Before reading variables, ``.env`` files are loaded without overriding
    variables already set. With an explicit ``env_file`` only that file is
    loaded; otherwise ``.env.{ENVIRONMENT}`` and then ``.env`` from the
    project root are tried.

    Example:
        config = Config()
        config = Config(env_file=Path("~/geoconnex.env").expanduser())
    """

    def __init__(self,
                 environment: Optional[str] = None,
                 env_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            environment: Name used to pick ``.env.{environment}`` (defaults to $ENVIRONMENT or development)
            env_file: Load only this file; it must exist
        """
        self.environment = environment or os.getenv("ENVIRONMENT", "development")
        self.project_root = self._find_project_root()
        self.loaded_env_files = self._load_env_files(env_file)

        self.sources = self._build("source", self._source_config)
        self.catchment = self._build("catchment", self._catchment_config)
        self.processing = self._build("processing", self._processing_config)

    @staticmethod
    def _find_project_root() -> Path:
        """Nearest ancestor of this package holding a project marker, else the cwd."""
        for parent in Path(__file__).resolve().parents:
            if any((parent / marker).exists() for marker in PROJECT_MARKERS):
                return parent
        return Path.cwd()

    def _env_file_candidates(self) -> list[Path]:
        return [
            self.project_root / f".env.{self.environment}",
            self.project_root / ".env",
        ]

    def _load_env_files(self, env_file: Optional[Path]) -> list[str]:
        if env_file is not None:
            env_file = Path(env_file)
            if not env_file.exists():
                raise ConfigurationError(f"Env file not found: {env_file}")
            candidates = [env_file]
        else:
            candidates = [path for path in self._env_file_candidates() if path.exists()]

        for path in candidates:
            load_dotenv(path)
            logger.info(f"Loaded settings from {path}")

        if not candidates:
            logger.debug(f"No .env files under {self.project_root}; using process environment")
        logger.debug(f"Environment: {self.environment}")
        return [str(path) for path in candidates]

    @staticmethod
    def _build(section: str, factory):
        # Dataclass validation and env parsing both raise ValueError
        try:
            return factory()
        except ValueError as e:
            raise ConfigurationError(f"Invalid {section} configuration: {e}") from e

    @staticmethod
    def _source_config() -> SourceConfig:
        return SourceConfig(
            features_url=os.getenv("GEOCONNEX_FEATURES_URL", DEFAULT_FEATURES_URL),
            catchments_url=os.getenv("GEOCONNEX_CATCHMENTS_URL", DEFAULT_CATCHMENTS_URL),
        )

    @staticmethod
    def _catchment_config() -> CatchmentConfig:
        margin = os.getenv("GEOCONNEX_CATCHMENT_MARGIN")
        return CatchmentConfig(search_margin=float(margin) if margin is not None else DEFAULT_CATCHMENT_MARGIN)

    @staticmethod
    def _processing_config() -> ProcessingConfig:
        threads = os.getenv("DUCKDB_THREADS")
        return ProcessingConfig(
            memory_limit=os.getenv("DUCKDB_MEMORY_LIMIT", DEFAULT_MEMORY_LIMIT),
            threads=int(threads) if threads is not None else DEFAULT_THREADS,
        )

    def get_duckdb_settings(self) -> dict[str, Any]:
        """memory_limit and threads for ``pipeline.source.open_buffer``."""
        return {
            "memory_limit": self.processing.memory_limit,
            "threads": self.processing.threads,
        }

    def __repr__(self) -> str:
        return (
            f"Config(environment={self.environment}, "
            f"features_url={self.sources.features_url}, "
            f"catchments_url={self.sources.catchments_url})"
        )
