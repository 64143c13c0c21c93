"""
Integration Tests fuer die komplette Dataset-Pipeline
"""

import pytest
import numpy as np


@pytest.fixture
def small_config():
    """Kurze Sequenzen, damit die Tests schnell bleiben."""
    from btcusd_dataset.core import PipelineConfig
    return PipelineConfig(timesteps=10, warmup=34, step=2)


class TestDatasetPipeline:
    """End-to-End Tests: Preisreihe -> balanciertes Dataset."""

    def test_build_shapes(self, market_series, small_config):
        """Test: Form, Labels und Feature-Anzahl des Ergebnisses."""
        from btcusd_dataset.training import DatasetPipeline

        pipeline = DatasetPipeline(small_config)
        result = pipeline.build(market_series)

        assert result.config.feature_count == 66
        assert result.dataset.sequences.shape[1:] == (10, 66)
        assert set(np.unique(result.dataset.labels)) <= {0, 1}
        assert np.isfinite(result.dataset.sequences).all()

        candidates = pipeline.end_indices(len(market_series))
        assert candidates.start == 43
        assert len(result.raw_dataset) + len(result.skipped_indices) == len(candidates)
        assert len(result.raw_dataset) > 0

    def test_labels_match_prices(self, market_series, small_config):
        """Test: Label jedes Samples folgt aus dem Preis horizon Tage spaeter."""
        from btcusd_dataset.training import DatasetPipeline

        result = DatasetPipeline(small_config).build(market_series)
        prices = market_series.prices
        for end_index, label in zip(result.raw_dataset.end_indices, result.raw_dataset.labels):
            change = (prices[end_index + 7] - prices[end_index]) / prices[end_index]
            assert label == int(change > 0.001)

    def test_undersample_is_balanced(self, market_series, small_config):
        """Test: Undersampling ergibt gleich viele BUY und SELL Samples."""
        from btcusd_dataset.training import DatasetPipeline

        result = DatasetPipeline(small_config).build(market_series)
        raw_counts = result.raw_dataset.class_counts()
        counts = result.dataset.class_counts()

        target = min(min(raw_counts.values()), int(max(raw_counts.values()) * 0.8))
        assert counts == {0: target, 1: target}

    def test_smote_is_balanced(self, market_series, small_config):
        """Test: SMOTE fuellt die Minderheitsklasse bis zur Mehrheit auf."""
        from dataclasses import replace
        from btcusd_dataset.training import DatasetPipeline

        config = replace(small_config, balancing_strategy='smote')
        result = DatasetPipeline(config).build(market_series)
        majority = max(result.raw_dataset.class_counts().values())

        assert result.dataset.class_counts() == {0: majority, 1: majority}

    def test_curriculum_reduces_dataset(self, market_series, small_config):
        """Test: Curriculum-Level < 1 behaelt nur die leichtesten Samples."""
        from dataclasses import replace
        from btcusd_dataset.training import DatasetPipeline

        full = DatasetPipeline(small_config).build(market_series).dataset
        filtered = DatasetPipeline(replace(small_config, curriculum_level=0.5)).build(
            market_series).dataset

        expected = min(len(full), max(50, int(len(full) * 0.5)))
        assert len(filtered) == expected
        assert filtered.difficulty is not None
        assert np.all(np.diff(filtered.difficulty) >= 0)

    def test_seeded_runs_are_reproducible(self, market_series, small_config):
        """Test: Gleicher Seed liefert identisches Dataset."""
        from btcusd_dataset.training import DatasetPipeline

        first = DatasetPipeline(small_config).build(market_series).dataset
        second = DatasetPipeline(small_config).build(market_series).dataset

        np.testing.assert_array_equal(first.labels, second.labels)
        np.testing.assert_array_equal(first.end_indices, second.end_indices)

    def test_dataframe_input(self, sample_ohlcv_data, small_config):
        """Test: DataFrame wird direkt akzeptiert."""
        from btcusd_dataset.training import DatasetPipeline

        result = DatasetPipeline(small_config).build(sample_ohlcv_data)
        assert len(result.raw_dataset) > 0

    def test_stats_match_registry(self, market_series, small_config):
        """Test: Stats sind an die Registry gebunden und anwendbar."""
        from btcusd_dataset.training import DatasetPipeline
        from btcusd_dataset.data import FEATURE_REGISTRY

        result = DatasetPipeline(small_config).build(market_series)
        stats = result.stats
        stats.validate_against(FEATURE_REGISTRY)

        assert stats.feature_count == 66
        assert stats.feature_names == tuple(FEATURE_REGISTRY.names)
        normalized = stats.apply(result.dataset.sequences)
        assert normalized.shape == result.dataset.sequences.shape

    def test_feature_selection(self, market_series, small_config):
        """Test: Feature-Auswahl behaelt mindestens min_selected_features."""
        from dataclasses import replace
        from btcusd_dataset.training import DatasetPipeline

        config = replace(small_config, feature_selection=True, min_selected_features=30)
        stats = DatasetPipeline(config).build(market_series).stats

        assert 30 <= len(stats.retained_indices) <= 66
        assert list(stats.retained_indices) == sorted(stats.retained_indices)

    def test_feature_count_mismatch(self):
        """Test: Abweichende feature_count ist ein fataler Fehler."""
        from btcusd_dataset.core import PipelineConfig, FeatureCountMismatchError
        from btcusd_dataset.training import DatasetPipeline

        with pytest.raises(FeatureCountMismatchError):
            DatasetPipeline(PipelineConfig(feature_count=62))

    def test_series_too_short(self, sample_ohlcv_data, small_config):
        """Test: Zu kurze Zeitreihe fuehrt zu DataValidationError."""
        from btcusd_dataset.core import DataValidationError
        from btcusd_dataset.training import DatasetPipeline

        with pytest.raises(DataValidationError):
            DatasetPipeline(small_config).build(sample_ohlcv_data.iloc[:50])

    def test_all_sequences_rejected(self, market_series, small_config):
        """Test: Ohne gueltige Sequenz meldet die Pipeline DataValidationError."""
        from btcusd_dataset.core import DataValidationError
        from btcusd_dataset.data import MarketSeries
        from btcusd_dataset.training import DatasetPipeline

        silent = MarketSeries(market_series.prices, np.zeros(len(market_series)))
        with pytest.raises(DataValidationError) as exc_info:
            DatasetPipeline(small_config).build(silent)
        assert 'volumes' in exc_info.value.invalid_fields

    def test_records_export(self, market_series, small_config):
        """Test: Export als Liste von {sequence, label}."""
        from btcusd_dataset.training import DatasetPipeline

        dataset = DatasetPipeline(small_config).build(market_series).dataset
        records = dataset.to_records()

        assert len(records) == len(dataset)
        assert set(records[0]) == {'sequence', 'label'}
        assert len(records[0]['sequence']) == 10
        assert len(records[0]['sequence'][0]) == 66
        assert records[0]['label'] == int(dataset.labels[0])

    def test_torch_handoff(self, market_series, small_config):
        """Test: Ergebnis laesst sich als torch DataLoader verwenden."""
        import torch
        from torch.utils.data import DataLoader
        from btcusd_dataset.training import DatasetPipeline, SequenceDataset, compute_class_weights

        dataset = DatasetPipeline(small_config).build(market_series).dataset
        torch_dataset = SequenceDataset.from_dataset(dataset)
        loader = DataLoader(torch_dataset, batch_size=8, shuffle=False)

        X, y = next(iter(loader))
        assert X.dtype == torch.float32
        assert y.dtype == torch.int64
        assert X.shape[1:] == (10, 66)

        weights = compute_class_weights(dataset.labels)
        assert torch.allclose(weights, torch.ones(2))
