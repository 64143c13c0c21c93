"""
Pytest Konfiguration und gemeinsame Fixtures
"""

import pytest
import pandas as pd
import numpy as np
from pathlib import Path


@pytest.fixture
def sample_ohlcv_data():
    """Erstellt Beispiel-OHLCV-Tagesdaten fuer Tests."""
    np.random.seed(42)
    n_samples = 320

    # Startpreis
    base_price = 50000.0

    # Random Walk fuer Close-Preise
    returns = np.random.normal(0.0005, 0.02, n_samples)
    close = base_price * np.cumprod(1 + returns)

    # OHLCV generieren
    high = close * (1 + np.abs(np.random.normal(0, 0.01, n_samples)))
    low = close * (1 - np.abs(np.random.normal(0, 0.01, n_samples)))
    open_ = np.roll(close, 1)
    open_[0] = base_price
    volume = np.random.uniform(100, 1000, n_samples)

    dates = pd.date_range(start='2024-01-01', periods=n_samples, freq='D')

    return pd.DataFrame({
        'Open': open_,
        'High': high,
        'Low': low,
        'Close': close,
        'Volume': volume
    }, index=dates)


@pytest.fixture
def market_series(sample_ohlcv_data):
    """MarketSeries aus Schlusskurs und Volumen (High/Low = Close)."""
    from btcusd_dataset.data import MarketSeries
    return MarketSeries.from_dataframe(sample_ohlcv_data)


@pytest.fixture
def ohlc_series(sample_ohlcv_data):
    """MarketSeries mit echten High/Low-Reihen."""
    from btcusd_dataset.data import MarketSeries
    return MarketSeries.from_dataframe(sample_ohlcv_data, use_high_low=True)


@pytest.fixture
def random_prices():
    """Zufaellige positive Preisreihe (200 Werte)."""
    np.random.seed(42)
    return 100.0 * np.cumprod(1 + np.random.normal(0, 0.02, 200))


@pytest.fixture
def make_dataset():
    """Factory fuer kleine Datasets mit vorgegebener Klassenverteilung."""
    from btcusd_dataset.training import Dataset

    def _make(n_buy: int, n_sell: int, timesteps: int = 5, features: int = 3, seed: int = 0):
        rng = np.random.RandomState(seed)
        n = n_buy + n_sell
        sequences = rng.normal(size=(n, timesteps, features))
        labels = np.array([1] * n_buy + [0] * n_sell, dtype=np.int64)
        return Dataset(sequences, labels, end_indices=np.arange(n))

    return _make


@pytest.fixture
def project_root():
    """Gibt den Projekt-Root-Pfad zurueck."""
    return Path(__file__).parent.parent
