"""
Unit Tests fuer die Feature-Registry
"""

import pytest


def _descriptor(name, compute=lambda w: 1.0):
    from btcusd_dataset.data import FeatureDescriptor, FeatureCategory, Importance
    return FeatureDescriptor(name, FeatureCategory.CORE, Importance.MEDIUM, name, compute)


class TestFeatureRegistry:
    """Tests fuer FeatureRegistry."""

    def test_default_feature_count(self):
        """Test: Standard-Registry enthaelt 66 eindeutige Features."""
        from btcusd_dataset.data import FEATURE_REGISTRY, detect_feature_count

        assert FEATURE_REGISTRY.feature_count == 66
        assert len(FEATURE_REGISTRY) == 66
        assert detect_feature_count(FEATURE_REGISTRY) == 66
        assert len(set(FEATURE_REGISTRY.names)) == 66

    def test_canonical_order(self):
        """Test: Reihenfolge der Features ist fest."""
        from btcusd_dataset.data import FEATURE_REGISTRY

        names = FEATURE_REGISTRY.names
        assert names[:5] == ['price_change_pct', 'high_low_range', 'price_volatility',
                             'price_position', 'relative_volume']
        assert FEATURE_REGISTRY.index_of('rsi') == 5
        assert FEATURE_REGISTRY.index_of('cmf') == 57
        assert names[-1] == 'head_and_shoulders'

    def test_categories(self):
        """Test: Kategorien decken alle Features ab."""
        from btcusd_dataset.data import FEATURE_REGISTRY, FeatureCategory

        patterns = FEATURE_REGISTRY.by_category(FeatureCategory.PATTERN)
        assert patterns == ['double_top', 'double_bottom', 'triple_top',
                            'triple_bottom', 'head_and_shoulders']
        assert sum(FEATURE_REGISTRY.summary().values()) == 66

    def test_importance(self):
        """Test: Wichtigkeit und Gewichte."""
        from btcusd_dataset.data import FEATURE_REGISTRY, Importance

        assert FEATURE_REGISTRY.importance_of('rsi') == Importance.HIGH
        weights = FEATURE_REGISTRY.importance_weights()
        assert len(weights) == 66
        assert set(weights) <= {1, 2, 3}

    def test_fingerprint_depends_on_order(self):
        """Test: Fingerprint aendert sich mit der Reihenfolge."""
        from btcusd_dataset.data import FeatureRegistry, build_default_registry

        a = FeatureRegistry([_descriptor('a'), _descriptor('b')])
        b = FeatureRegistry([_descriptor('b'), _descriptor('a')])
        assert a.fingerprint() != b.fingerprint()
        assert build_default_registry().fingerprint() == build_default_registry().fingerprint()

    def test_duplicate_names_rejected(self):
        """Test: Doppelte Namen fuehren zu ConfigError."""
        from btcusd_dataset.data import FeatureRegistry
        from btcusd_dataset.core import ConfigError

        with pytest.raises(ConfigError):
            FeatureRegistry([_descriptor('a'), _descriptor('a')])

    def test_empty_registry_rejected(self):
        """Test: Leere Registry ist ungueltig."""
        from btcusd_dataset.data import FeatureRegistry
        from btcusd_dataset.core import ConfigError

        with pytest.raises(ConfigError):
            FeatureRegistry([])

    def test_validate_feature_count(self):
        """Test: Abweichende Feature-Anzahl ist ein fataler Fehler."""
        from btcusd_dataset.data import FEATURE_REGISTRY
        from btcusd_dataset.core import FeatureCountMismatchError

        FEATURE_REGISTRY.validate_feature_count(66)
        with pytest.raises(FeatureCountMismatchError) as exc_info:
            FEATURE_REGISTRY.validate_feature_count(62)
        assert exc_info.value.expected == 62
        assert exc_info.value.actual == 66

    def test_unknown_name(self):
        """Test: Unbekannter Name liefert KeyError."""
        from btcusd_dataset.data import FEATURE_REGISTRY

        with pytest.raises(KeyError):
            FEATURE_REGISTRY.index_of('does_not_exist')
