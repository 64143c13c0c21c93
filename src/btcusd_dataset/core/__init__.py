"""Core Module - Konfiguration, Logging und Exceptions"""

from .config import PipelineConfig, BalancingStrategy, StatsMethod
from .logger import Logger, get_logger
from .exceptions import (
    DatasetError,
    DataError,
    DataValidationError,
    DataFormatError,
    MissingDataError,
    ConfigError,
    FeatureCountMismatchError,
    SaveError,
)

__all__ = [
    'PipelineConfig',
    'BalancingStrategy',
    'StatsMethod',
    'Logger',
    'get_logger',
    # Exceptions
    'DatasetError',
    'DataError',
    'DataValidationError',
    'DataFormatError',
    'MissingDataError',
    'ConfigError',
    'FeatureCountMismatchError',
    'SaveError',
]
