"""
Unit Tests fuer FeatureStatsComputer und NormalizationStats
"""

import pytest
import numpy as np


class TestFeatureStatsComputer:
    """Tests fuer FeatureStatsComputer."""

    def test_robust_stats(self):
        """Test: Median und 1.4826 * MAD je Feature."""
        from btcusd_dataset.training import FeatureStatsComputer

        data = np.array([1.0, 2.0, 3.0, 4.0, 100.0]).reshape(1, 5, 1)
        stats = FeatureStatsComputer().compute(data)

        assert stats.location[0] == 3.0
        assert stats.scale[0] == pytest.approx(1.4826)

    def test_constant_feature_scale_is_one(self):
        """Test: MAD = 0 ergibt Skalierung 1.0 statt 0."""
        from btcusd_dataset.training import FeatureStatsComputer

        data = np.zeros((4, 5, 2))
        data[..., 0] = 7.0
        data[..., 1] = np.arange(20).reshape(4, 5)
        stats = FeatureStatsComputer().compute(data)

        assert stats.location[0] == 7.0
        assert stats.scale[0] == 1.0
        assert stats.scale[1] > 0

    def test_standard_stats(self):
        """Test: Mittelwert/Std mit Untergrenze 0.01 und Obergrenze 10."""
        from btcusd_dataset.training import FeatureStatsComputer
        from btcusd_dataset.core import StatsMethod

        data = np.zeros((2, 2, 3))
        data[..., 0] = 5.0
        data[..., 1] = [[0.0, 1000.0], [-1000.0, 0.0]]
        data[..., 2] = [[1.0, 3.0], [1.0, 3.0]]
        stats = FeatureStatsComputer(method=StatsMethod.STANDARD).compute(data)

        np.testing.assert_allclose(stats.location, [5.0, 0.0, 2.0])
        np.testing.assert_allclose(stats.scale, [0.01, 10.0, 1.0])
        assert stats.method == StatsMethod.STANDARD

    def test_identity_selection_by_default(self):
        """Test: Ohne Auswahl werden alle Indizes beibehalten."""
        from btcusd_dataset.training import FeatureStatsComputer

        stats = FeatureStatsComputer().compute(np.random.RandomState(0).normal(size=(3, 4, 6)))
        assert stats.retained_indices == (0, 1, 2, 3, 4, 5)

    def test_correlated_feature_dropped(self):
        """Test: Von zwei korrelierten Features bleibt eines erhalten."""
        from btcusd_dataset.training import FeatureStatsComputer

        rng = np.random.RandomState(0)
        base = rng.normal(size=200)
        data = np.stack([base, base * 2 + 1, rng.normal(size=200)], axis=1).reshape(20, 10, 3)
        computer = FeatureStatsComputer(min_selected_features=1)
        stats = computer.compute(data, select_features=True)

        assert stats.retained_indices == (0, 2)

    def test_selection_respects_minimum(self):
        """Test: Mindestanzahl beibehaltener Features wird eingehalten."""
        from btcusd_dataset.training import FeatureStatsComputer

        base = np.random.RandomState(0).normal(size=100)
        data = np.stack([base, base, base], axis=1).reshape(10, 10, 3)
        stats = FeatureStatsComputer(min_selected_features=2).compute(data, select_features=True)

        assert len(stats.retained_indices) == 2

    def test_empty_data(self):
        """Test: Leere Daten fuehren zu MissingDataError."""
        from btcusd_dataset.training import FeatureStatsComputer
        from btcusd_dataset.core import MissingDataError

        with pytest.raises(MissingDataError):
            FeatureStatsComputer().compute(np.empty((0, 5, 3)))


class TestNormalizationStats:
    """Tests fuer NormalizationStats."""

    def _stats(self):
        from btcusd_dataset.training import NormalizationStats

        rng = np.random.RandomState(3)
        return NormalizationStats(
            location=rng.normal(size=4) / 3.0,
            scale=rng.uniform(0.1, 5.0, size=4) / 7.0,
            retained_indices=(0, 2, 3),
            feature_names=('a', 'b', 'c', 'd'),
            registry_fingerprint='abc',
        )

    def test_json_round_trip_exact(self):
        """Test: JSON-Kodierung erhaelt location/scale bitgenau."""
        from btcusd_dataset.training import NormalizationStats

        stats = self._stats()
        restored = NormalizationStats.from_json(stats.to_json())

        np.testing.assert_array_equal(restored.location, stats.location)
        np.testing.assert_array_equal(restored.scale, stats.scale)
        assert restored.retained_indices == stats.retained_indices
        assert restored.feature_names == stats.feature_names
        assert restored.registry_fingerprint == 'abc'

    def test_save_and_load(self, tmp_path):
        """Test: Speichern und Laden ueber eine Datei."""
        from btcusd_dataset.training import NormalizationStats

        stats = self._stats()
        path = stats.save(tmp_path / 'stats' / 'normalization.json')
        loaded = NormalizationStats.load(path)

        np.testing.assert_array_equal(loaded.location, stats.location)
        assert loaded.retained_names == ['a', 'c', 'd']

    def test_load_missing_file(self, tmp_path):
        """Test: Fehlende Datei fuehrt zu MissingDataError."""
        from btcusd_dataset.training import NormalizationStats
        from btcusd_dataset.core import MissingDataError

        with pytest.raises(MissingDataError):
            NormalizationStats.load(tmp_path / 'missing.json')

    def test_invalid_payload(self):
        """Test: Ungueltiges JSON oder fehlende Schluessel -> DataFormatError."""
        from btcusd_dataset.training import NormalizationStats
        from btcusd_dataset.core import DataFormatError

        with pytest.raises(DataFormatError):
            NormalizationStats.from_json('{not json')
        with pytest.raises(DataFormatError):
            NormalizationStats.from_json('{"location": [1.0]}')
        with pytest.raises(DataFormatError):
            NormalizationStats.from_json('[1, 2]')
        with pytest.raises(DataFormatError):
            NormalizationStats.from_dict({'location': [1.0, 2.0], 'scale': [1.0]})

    def test_apply(self):
        """Test: Normalisierung und Auswahl der Features."""
        from btcusd_dataset.training import NormalizationStats

        stats = NormalizationStats(np.array([1.0, 2.0, 3.0]), np.array([2.0, 1.0, 0.5]), (0, 2))
        result = stats.apply(np.array([[[3.0, 5.0, 4.0]]]))

        assert result.shape == (1, 1, 2)
        np.testing.assert_allclose(result[0, 0], [1.0, 2.0])

    def test_apply_wrong_feature_count(self):
        """Test: Falsche Feature-Anzahl beim Anwenden."""
        from btcusd_dataset.training import NormalizationStats
        from btcusd_dataset.core import FeatureCountMismatchError

        stats = NormalizationStats(np.zeros(3), np.ones(3), (0, 1, 2))
        with pytest.raises(FeatureCountMismatchError):
            stats.apply(np.zeros((2, 4)))

    def test_validate_against_registry(self):
        """Test: Stats passen nur zur Registry, mit der sie erzeugt wurden."""
        from btcusd_dataset.training import FeatureStatsComputer
        from btcusd_dataset.data import (
            FEATURE_REGISTRY, FeatureRegistry, FeatureDescriptor, FeatureCategory, Importance
        )
        from btcusd_dataset.core import ConfigError, FeatureCountMismatchError

        data = np.random.RandomState(0).normal(size=(2, 3, FEATURE_REGISTRY.feature_count))
        stats = FeatureStatsComputer(registry=FEATURE_REGISTRY).compute(data)
        stats.validate_against(FEATURE_REGISTRY)
        assert stats.feature_names[0] == 'price_change_pct'

        reordered = FeatureRegistry(list(FEATURE_REGISTRY)[::-1])
        with pytest.raises(ConfigError):
            stats.validate_against(reordered)

        small = FeatureRegistry([FeatureDescriptor('x', FeatureCategory.CORE, Importance.LOW,
                                                   '', lambda w: 0.0)])
        with pytest.raises(FeatureCountMismatchError):
            stats.validate_against(small)
