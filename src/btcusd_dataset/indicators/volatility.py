"""
Volatilitaet und Kanaele - ATR, Keltner, Donchian, Price Channel,
historische/realisierte Volatilitaet, Mass Index, Camarilla Pivots
"""

import math
from typing import NamedTuple

import numpy as np

from ._common import ArrayLike, as_array, mean, total
from .moving_averages import ema, ema_series
from .periods import PERIODS


class KeltnerChannels(NamedTuple):
    """Keltner-Kanal mit Position des Preises (0 = unteres, 1 = oberes Band)."""
    upper: float
    middle: float
    lower: float
    position: float


class DonchianChannels(NamedTuple):
    """Donchian-Kanal mit Position des Preises (0 = Tief, 1 = Hoch)."""
    upper: float
    middle: float
    lower: float
    position: float


def atr(prices: ArrayLike, period: int = PERIODS['ATR']) -> float:
    """
    Average True Range aus Schlusskursen: Mittel der letzten `period`
    absoluten Tagesaenderungen.

    Returns:
        ATR (0 bei weniger als period + 1 Preisen)
    """
    data = as_array(prices)
    if len(data) < period + 1:
        return 0.0
    ranges = np.abs(np.diff(data[-(period + 1):]))
    return total(ranges) / period


def keltner_channels(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike,
                     period: int = 20, multiplier: float = 2.0) -> KeltnerChannels:
    """
    Keltner-Kanal: EMA des Typical Price +- multiplier * ATR.

    Die True Range nutzt den vorherigen Typical Price als Referenz.

    Returns:
        KeltnerChannels (0, 0, 0, 0.5 bei zu kurzer Historie)
    """
    close = as_array(closes)
    if len(close) < period:
        return KeltnerChannels(0.0, 0.0, 0.0, 0.5)

    high = as_array(highs)[-period:]
    low = as_array(lows)[-period:]
    typical = (high + low + close[-period:]) / 3
    middle = ema(typical, period)

    true_ranges = [
        max(float(high[i] - low[i]),
            abs(float(high[i] - typical[i - 1])),
            abs(float(low[i] - typical[i - 1])))
        for i in range(1, period)
    ]
    average_range = mean(true_ranges)

    upper = middle + multiplier * average_range
    lower = middle - multiplier * average_range
    position = 0.5 if upper == lower else (float(close[-1]) - lower) / (upper - lower)
    return KeltnerChannels(upper, middle, lower, position)


def donchian_channels(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike,
                      period: int = 20) -> DonchianChannels:
    """Donchian-Kanal aus hoechstem Hoch und tiefstem Tief der Periode."""
    close = as_array(closes)
    if len(close) < period:
        return DonchianChannels(0.0, 0.0, 0.0, 0.5)
    upper = float(as_array(highs)[-period:].max())
    lower = float(as_array(lows)[-period:].min())
    middle = (upper + lower) / 2
    position = 0.5 if upper == lower else (float(close[-1]) - lower) / (upper - lower)
    return DonchianChannels(upper, middle, lower, position)


def price_channel(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 20) -> float:
    """Position des Schlusskurses im Preiskanal (0 bei kurzer Historie, 0.5 wenn flach)."""
    close = as_array(closes)
    if len(close) < period:
        return 0.0
    highest = float(as_array(highs)[-period:].max())
    lowest = float(as_array(lows)[-period:].min())
    channel = highest - lowest
    if channel == 0:
        return 0.5
    return (float(close[-1]) - lowest) / channel


def _log_returns(data: np.ndarray) -> np.ndarray:
    return np.log(data[1:] / data[:-1])


def historical_volatility(prices: ArrayLike, period: int = 20) -> float:
    """Annualisierte Volatilitaet der Log-Renditen in Prozent (sqrt(365))."""
    data = as_array(prices)
    if len(data) < period + 1 or np.any(data[-(period + 1):] <= 0):
        return 0.0
    returns = _log_returns(data[-(period + 1):])
    center = mean(returns)
    variance = total((r - center) ** 2 for r in returns) / period
    return math.sqrt(variance) * math.sqrt(365) * 100


def realized_volatility(prices: ArrayLike, period: int = 20) -> float:
    """Annualisierte realisierte Volatilitaet (252 Handelstage) als Anteil."""
    data = as_array(prices)
    if len(data) < period + 1 or np.any(data[-(period + 1):] <= 0):
        return 0.0
    returns = _log_returns(data[-(period + 1):])
    center = mean(returns)
    variance = total((r - center) ** 2 for r in returns) / period
    return math.sqrt(variance * 252)


def mass_index(highs: ArrayLike, lows: ArrayLike, ema_period: int = 9, sum_period: int = 25) -> float:
    """
    Mass Index: Summe der Verhaeltnisse EMA(range) / EMA(EMA(range)).

    Bei fehlender Spanne (z.B. reine Schlusskurse) ist jedes Verhaeltnis 1.

    Returns:
        Mass Index (0 bei weniger als `sum_period` Werten)
    """
    high = as_array(highs)
    low = as_array(lows)
    n = min(len(high), len(low))
    if n < sum_period:
        return 0.0
    ranges = high[-n:] - low[-n:]
    single = ema_series(ranges, ema_period)
    double = ema_series(single, ema_period)
    ratios = [float(s) / float(d) if d != 0 else 1.0
              for s, d in zip(single[-sum_period:], double[-sum_period:])]
    return total(ratios)


def camarilla_pivots(prices: ArrayLike, period: int = 20) -> float:
    """
    Position des Preises relativ zu den Camarilla-Niveaus des Vortags.

    Returns:
        1.0 (ueber H4), 0.75 (ueber H3), 0.5 (ueber Vortagesschluss),
        0.25 (ueber L3), 0.0 (ueber L4), -0.25 (darunter); 0 bei kurzer Historie
    """
    data = as_array(prices)
    if len(data) < period + 1:
        return 0.0

    previous = data[-period:-1]
    span = float(previous.max()) - float(previous.min())
    previous_close = float(data[-2])
    current = float(data[-1])

    h3 = previous_close + span * 1.1 / 4
    l3 = previous_close - span * 1.1 / 4
    h4 = previous_close + span * 1.1 / 2
    l4 = previous_close - span * 1.1 / 2

    if current > h4:
        return 1.0
    if current > h3:
        return 0.75
    if current > previous_close:
        return 0.5
    if current > l3:
        return 0.25
    if current > l4:
        return 0.0
    return -0.25
