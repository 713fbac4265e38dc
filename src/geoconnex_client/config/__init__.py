"""
Configuration module for the geoconnex client.
"""

from .settings import (
    CatchmentConfig,
    Config,
    ConfigurationError,
    ProcessingConfig,
    SourceConfig,
)

__all__ = [
    'Config',
    'ConfigurationError',
    'CatchmentConfig',
    'ProcessingConfig',
    'SourceConfig'
]
