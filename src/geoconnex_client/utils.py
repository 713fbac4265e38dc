"""
Logging and timing helpers shared by the CLI and the client.
"""

import functools
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Optional

# Third-party loggers that are chatty at DEBUG/INFO
NOISY_LOGGERS = ("fiona", "fiona.ogrext", "fiona.env", "pyogrio", "urllib3")


def setup_logging(verbose: bool, log_file: Optional[Path] = None) -> None:
    """
    Route log records to stderr, and optionally to a file.

    stdout is left alone so GeoJSON printed by the CLI can be piped.

    Args:
        verbose: DEBUG for this package when True, INFO otherwise
        log_file: Extra destination for the same records
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def timer(func: Callable) -> Callable:
    """Log how long each call to ``func`` took."""
    log = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def timed(*args, **kwargs):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            log.info(f"{func.__qualname__} took {time.perf_counter() - started:.2f}s")
    return timed
