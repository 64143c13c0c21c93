"""Utils Module - Hilfsfunktionen"""

from .helpers import (
    format_percentage,
    format_duration,
    clamp,
    validate_dataframe,
)

__all__ = [
    'format_percentage',
    'format_duration',
    'clamp',
    'validate_dataframe',
]
