"""Data Module - Markt-Zeitreihe, Feature-Registry und Feature-Vektoren"""

from .series import MarketSeries
from .window import FeatureWindow
from .registry import (
    FeatureCategory,
    Importance,
    FeatureDescriptor,
    FeatureRegistry,
    FEATURE_REGISTRY,
    build_default_registry,
    detect_feature_count,
)
from .processor import FeatureVectorAssembler

__all__ = [
    'MarketSeries',
    'FeatureWindow',
    'FeatureCategory',
    'Importance',
    'FeatureDescriptor',
    'FeatureRegistry',
    'FEATURE_REGISTRY',
    'build_default_registry',
    'detect_feature_count',
    'FeatureVectorAssembler',
]
