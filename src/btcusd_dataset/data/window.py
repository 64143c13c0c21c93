"""
Feature Window Modul - Nachlaufende Fenster fuer einen Tag

Ein FeatureWindow enthaelt alle Reihen abgeschnitten bei day_index
(einschliesslich). Kein Feature kann damit Daten nach day_index lesen.
Gemeinsame Zwischenwerte (SMA20, RSI, MACD, ...) werden pro Fenster
einmal berechnet und zwischengespeichert.
"""

from functools import cached_property

import numpy as np

from ..indicators import (
    PERIODS,
    PATTERN_WINDOW,
    BollingerBands,
    MACDResult,
    MomentumRegime,
    TrendRegime,
    VolatilityRegime,
    bollinger_bands,
    classify_momentum_regime,
    classify_trend_regime,
    classify_volatility_regime,
    macd,
    realized_volatility,
    rsi,
    sma,
)
from .series import MarketSeries


class FeatureWindow:
    """
    Schreibgeschuetzte Sicht auf eine MarketSeries bis einschliesslich day_index.

    Attributes:
        day_index: Index des aktuellen Tages
        prices: Schlusskurse [0 .. day_index]
        volumes: Volumen [0 .. day_index]
        highs: Hochs (oder Schlusskurse) [0 .. day_index]
        lows: Tiefs (oder Schlusskurse) [0 .. day_index]
    """

    def __init__(self, series: MarketSeries, day_index: int):
        if not 0 <= day_index < len(series):
            raise IndexError(f"day_index {day_index} ausserhalb [0, {len(series) - 1}]")
        end = day_index + 1
        self.day_index = day_index
        self.prices = series.prices[:end]
        self.volumes = series.volumes[:end]
        self.highs = series.high_series[:end]
        self.lows = series.low_series[:end]

    @property
    def current_price(self) -> float:
        return float(self.prices[-1])

    @property
    def previous_price(self) -> float:
        """Preis des Vortags (aktueller Preis am ersten Tag)."""
        return float(self.prices[-2]) if self.day_index >= 1 else self.current_price

    # -------------------------------------------------------------------------
    # Gemeinsame Zwischenwerte
    # -------------------------------------------------------------------------

    @cached_property
    def rsi(self) -> float:
        return rsi(self.prices[-(PERIODS['RSI'] + 1):])

    @cached_property
    def previous_rsi(self) -> float:
        if self.day_index < 1:
            return self.rsi
        return rsi(self.prices[-(PERIODS['RSI'] + 2):-1])

    @cached_property
    def macd(self) -> MACDResult:
        return macd(self.prices)

    @cached_property
    def sma20(self) -> float:
        return sma(self.prices[-PERIODS['SMA_MEDIUM']:])

    @cached_property
    def sma50(self) -> float:
        """SMA50, vor Tag 50 ersetzt durch SMA20."""
        if self.day_index >= PERIODS['SMA_50']:
            return sma(self.prices[-PERIODS['SMA_50']:])
        return self.sma20

    @cached_property
    def sma200(self) -> float:
        """SMA200, vor Tag 200 ersetzt durch SMA20."""
        if self.day_index >= PERIODS['SMA_200']:
            return sma(self.prices[-PERIODS['SMA_200']:])
        return self.sma20

    @cached_property
    def bands(self) -> BollingerBands:
        return bollinger_bands(self.prices, PERIODS['SMA_MEDIUM'])

    @cached_property
    def momentum(self) -> float:
        """Preisdifferenz zu vor 10 Tagen (0 vorher)."""
        period = PERIODS['MOMENTUM']
        if self.day_index >= period:
            return self.current_price - float(self.prices[-1 - period])
        return 0.0

    @cached_property
    def range20(self) -> tuple:
        """(Tief, Hoch) der letzten 20 Preise."""
        window = self.prices[-20:]
        return float(window.min()), float(window.max())

    @cached_property
    def volume_ma20(self) -> float:
        return sma(self.volumes[-20:])

    @cached_property
    def volatility_regime(self) -> VolatilityRegime:
        return classify_volatility_regime(realized_volatility(self.prices, 20))

    @cached_property
    def trend_regime(self) -> TrendRegime:
        return classify_trend_regime(self.current_price, self.sma20, self.sma50, self.sma200)

    @cached_property
    def momentum_regime(self) -> MomentumRegime:
        return classify_momentum_regime(self.rsi, self.momentum,
                                        self.macd.macd, self.macd.signal)

    @cached_property
    def pattern_prices(self) -> np.ndarray:
        return self.prices[-PATTERN_WINDOW:]

    @cached_property
    def pattern_volumes(self) -> np.ndarray:
        return self.volumes[-PATTERN_WINDOW:]
