"""
Volumen-Indikatoren - VWAP, VWMA, OBV, VPT, CMF, Chaikin, Elder Force, Klinger
"""

import numpy as np

from ._common import ArrayLike, as_array, mean, total
from .moving_averages import ema
from .periods import PERIODS


def vwap(prices: ArrayLike, volumes: ArrayLike, period: int = PERIODS['VWAP']) -> float:
    """
    Volume Weighted Average Price der letzten `period` Tage.

    Returns:
        VWAP; der letzte Preis bei zu kurzer Historie oder ohne Volumen
    """
    price = as_array(prices)
    volume = as_array(volumes)
    if len(price) == 0:
        return 0.0
    if len(price) < period or len(volume) < period:
        return float(price[-1])
    recent_price = price[-period:]
    recent_volume = volume[-period:]
    volume_sum = total(recent_volume)
    if volume_sum <= 0:
        return float(price[-1])
    return total(recent_price * recent_volume) / volume_sum


def vwma(prices: ArrayLike, volumes: ArrayLike, period: int = 20) -> float:
    """
    Volume Weighted Moving Average.

    Returns:
        VWMA; 0 bei zu kurzer Historie, der letzte Preis ohne Volumen
    """
    price = as_array(prices)
    volume = as_array(volumes)
    if len(price) < period or len(volume) < period:
        return 0.0
    volume_sum = total(volume[-period:])
    if volume_sum == 0:
        return float(price[-1])
    return total(price[-period:] * volume[-period:]) / volume_sum


def obv(prices: ArrayLike, volumes: ArrayLike) -> float:
    """On-Balance Volume ueber das gesamte Fenster (Start bei 0)."""
    price = as_array(prices)
    volume = as_array(volumes)
    result = 0.0
    for i in range(1, min(len(price), len(volume))):
        change = price[i] - price[i - 1]
        if change > 0:
            result += float(volume[i])
        elif change < 0:
            result -= float(volume[i])
    return result


def volume_oscillator(volumes: ArrayLike,
                      short_period: int = PERIODS['VOL_SMA_SHORT'],
                      long_period: int = PERIODS['VOL_SMA_LONG']) -> float:
    """Abstand SMA(short) zu SMA(long) des Volumens in Prozent (0 ohne Volumen)."""
    volume = as_array(volumes)
    short_sma = mean(volume[-short_period:])
    long_sma = mean(volume[-long_period:])
    return (short_sma - long_sma) / long_sma * 100 if long_sma != 0 else 0.0


def vpt(prices: ArrayLike, volumes: ArrayLike) -> float:
    """Volume Price Trend, normiert auf das durchschnittliche Volumen."""
    price = as_array(prices)
    volume = as_array(volumes)
    if len(price) < 2 or len(volume) < 2:
        return 0.0
    trend = 0.0
    for i in range(1, len(price)):
        previous = float(price[i - 1])
        if previous != 0:
            trend += float(volume[i]) * (float(price[i]) - previous) / previous
    average_volume = mean(volume)
    return trend / average_volume if average_volume > 0 else 0.0


def _money_flow_multipliers(high: np.ndarray, low: np.ndarray, close: np.ndarray) -> np.ndarray:
    """((C - L) - (H - C)) / (H - L), 0 bei fehlender Spanne."""
    span = high - low
    safe_span = np.where(span != 0, span, 1.0)
    return np.where(span != 0, ((close - low) - (high - close)) / safe_span, 0.0)


def cmf(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, volumes: ArrayLike,
        period: int = 20) -> float:
    """Chaikin Money Flow der letzten `period` Tage (0 ohne Volumen oder Historie)."""
    close = as_array(closes)
    volume = as_array(volumes)
    if len(close) < period or len(volume) < period:
        return 0.0
    multipliers = _money_flow_multipliers(
        as_array(highs)[-period:], as_array(lows)[-period:], close[-period:]
    )
    recent_volume = volume[-period:]
    volume_sum = total(recent_volume)
    return total(multipliers * recent_volume) / volume_sum if volume_sum > 0 else 0.0


def chaikin_oscillator(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, volumes: ArrayLike,
                       fast_period: int = 3, slow_period: int = 10) -> float:
    """Chaikin Oszillator: EMA(fast) - EMA(slow) der Accumulation/Distribution Line."""
    close = as_array(closes)
    volume = as_array(volumes)
    if len(close) < slow_period or len(volume) < slow_period:
        return 0.0
    n = min(len(close), len(volume))
    multipliers = _money_flow_multipliers(as_array(highs)[-n:], as_array(lows)[-n:], close[-n:])
    adl = np.cumsum(multipliers * volume[-n:])
    return ema(adl, fast_period) - ema(adl, slow_period)


def elder_force_index(prices: ArrayLike, volumes: ArrayLike, period: int = 13) -> float:
    """Elder Force Index: EMA von Preisaenderung * Volumen."""
    price = as_array(prices)
    volume = as_array(volumes)
    if len(price) < period + 1 or len(volume) < period + 1:
        return 0.0
    n = min(len(price), len(volume))
    forces = np.diff(price[-n:]) * volume[-n:][1:]
    return ema(forces, period)


def klinger_volume_oscillator(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike,
                              volumes: ArrayLike, short_period: int = 34,
                              long_period: int = 55) -> float:
    """
    Klinger Volume Oscillator: EMA(short) - EMA(long) der Daily Force.

    Daily Force = Volumen * |Multiplikator| * 2 * Trendrichtung (HLC-Summe
    gegenueber Vortag); 0 bei fehlender Tagesspanne.
    """
    close = as_array(closes)
    volume = as_array(volumes)
    if len(close) < long_period or len(volume) < long_period:
        return 0.0
    n = min(len(close), len(volume))
    high = as_array(highs)[-n:]
    low = as_array(lows)[-n:]
    close = close[-n:]
    volume = volume[-n:]

    sums = high + low + close
    trends = np.sign(np.diff(sums))
    multipliers = _money_flow_multipliers(high, low, close)[1:]
    forces = volume[1:] * np.abs(multipliers) * 2 * trends
    return ema(forces, short_period) - ema(forces, long_period)
