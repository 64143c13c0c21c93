"""
Gleitende Durchschnitte - SMA, EMA, WMA, MACD, Bollinger, Hull, KAMA, Rainbow

Alle Funktionen sind rein und total: zu kurze Fenster liefern einen
dokumentierten neutralen Wert statt einer Exception.
"""

import math
from typing import NamedTuple

import numpy as np

from ._common import ArrayLike, as_array, mean, total
from .periods import PERIODS


class MACDResult(NamedTuple):
    """MACD-Linie, Signal-Linie und Histogramm."""
    macd: float
    signal: float
    histogram: float


class BollingerBands(NamedTuple):
    """Bollinger-Baender mit Bandbreite in Prozent des Mittelbands."""
    upper: float
    middle: float
    lower: float
    width: float


def sma(values: ArrayLike) -> float:
    """Einfacher Durchschnitt des gesamten Fensters (0 bei leerem Fenster)."""
    return mean(as_array(values))


def ema(values: ArrayLike, period: int) -> float:
    """
    Exponentieller Durchschnitt, gestartet mit dem ersten Wert.

    ema = alpha * x + (1 - alpha) * ema, alpha = 2 / (period + 1)

    Args:
        values: Fenster (chronologisch)
        period: EMA-Periode

    Returns:
        Letzter EMA-Wert (0 bei leerem Fenster)
    """
    data = as_array(values)
    if len(data) == 0:
        return 0.0
    alpha = 2.0 / (period + 1)
    result = float(data[0])
    for x in data[1:]:
        result = alpha * float(x) + (1 - alpha) * result
    return result


def ema_series(values: ArrayLike, period: int) -> np.ndarray:
    """EMA fuer jeden Zeitpunkt des Fensters (gleiche Rekursion wie ema())."""
    data = as_array(values)
    out = np.zeros(len(data), dtype=np.float64)
    if len(data) == 0:
        return out
    alpha = 2.0 / (period + 1)
    current = float(data[0])
    out[0] = current
    for i in range(1, len(data)):
        current = alpha * float(data[i]) + (1 - alpha) * current
        out[i] = current
    return out


def wma(values: ArrayLike) -> float:
    """Linear gewichteter Durchschnitt, juengster Wert mit hoechstem Gewicht."""
    data = as_array(values)
    n = len(data)
    if n == 0:
        return 0.0
    weighted = 0.0
    for i, x in enumerate(data):
        weighted += float(x) * (i + 1)
    return weighted / (n * (n + 1) / 2)


def std_dev(values: ArrayLike, center: float) -> float:
    """Populations-Standardabweichung um einen vorgegebenen Mittelwert."""
    data = as_array(values)
    if len(data) < 1:
        return 0.0
    return math.sqrt(total((x - center) ** 2 for x in data) / len(data))


def macd(prices: ArrayLike,
         fast: int = PERIODS['EMA_SHORT'],
         slow: int = PERIODS['EMA_LONG'],
         signal: int = PERIODS['MACD_SIGNAL']) -> MACDResult:
    """
    Moving Average Convergence Divergence.

    Jeder MACD-Wert ist EMA(fast) der letzten `fast` Preise minus EMA(slow)
    der letzten `slow` Preise. Die Signal-Linie ist die EMA(signal) der
    MACD-Werte der letzten `signal` Tage in chronologischer Reihenfolge.

    Args:
        prices: Preisfenster bis einschliesslich des aktuellen Tages
        fast: Kurze EMA-Periode
        slow: Lange EMA-Periode
        signal: Periode der Signal-Linie

    Returns:
        MACDResult (0, 0, 0 bei leerem Fenster)
    """
    data = as_array(prices)
    n = len(data)
    if n == 0:
        return MACDResult(0.0, 0.0, 0.0)

    def macd_at(end: int) -> float:
        window = data[max(0, end - slow):end]
        return ema(window[-fast:], fast) - ema(window, slow)

    line = macd_at(n)
    history = [macd_at(n - offset) for offset in range(min(signal, n) - 1, -1, -1)]
    signal_line = ema(history, signal)
    return MACDResult(line, signal_line, line - signal_line)


def bollinger_bands(prices: ArrayLike, period: int = PERIODS['SMA_MEDIUM'],
                    multiplier: float = 2.0) -> BollingerBands:
    """
    Bollinger-Baender ueber die letzten `period` Preise.

    Bei kuerzerer Historie wird das verfuegbare Fenster verwendet.
    width = (upper - lower) / middle * 100, 0 wenn middle <= 0.
    """
    window = as_array(prices)[-period:]
    if len(window) == 0:
        return BollingerBands(0.0, 0.0, 0.0, 0.0)
    middle = mean(window)
    deviation = std_dev(window, middle)
    upper = middle + multiplier * deviation
    lower = middle - multiplier * deviation
    width = (upper - lower) / middle * 100 if middle > 0 else 0.0
    return BollingerBands(upper, middle, lower, width)


def bollinger_band_width(prices: ArrayLike, period: int = 20, multiplier: float = 2.0) -> float:
    """Bollinger-Bandbreite in Prozent (0 bei weniger als `period` Preisen)."""
    if len(prices) < period:
        return 0.0
    return bollinger_bands(prices, period, multiplier).width


def hull_moving_average(prices: ArrayLike, period: int = 20) -> float:
    """
    Hull Moving Average: WMA(2 * WMA(n/2) - WMA(n), sqrt(n)).

    Die aeussere WMA laeuft ueber die Roh-HMA-Werte der letzten sqrt(n) Tage
    (weniger, falls die Historie nicht reicht).

    Returns:
        HMA (letzter Preis bei weniger als `period` Preisen)
    """
    data = as_array(prices)
    n = len(data)
    if n == 0:
        return 0.0
    if n < period:
        return float(data[-1])

    half = period // 2
    root = int(math.floor(math.sqrt(period)))

    raw = []
    for end in range(max(period, n - root + 1), n + 1):
        window = data[:end]
        raw.append(2 * wma(window[-half:]) - wma(window[-period:]))
    return wma(raw)


def kaufman_adaptive_moving_average(prices: ArrayLike, period: int = 10,
                                    fast: int = 2, slow: int = 30) -> float:
    """
    Kaufman Adaptive Moving Average.

    Startwert ist der vorletzte Preis des ersten vollstaendigen Fensters,
    danach kama += sc * (preis - kama) mit sc = (ER * (fastSC - slowSC) + slowSC)^2.

    Returns:
        KAMA (letzter Preis bei weniger als period + 1 Preisen)
    """
    data = as_array(prices)
    n = len(data)
    if n == 0:
        return 0.0
    if n < period + 1:
        return float(data[-1])

    fast_sc = 2.0 / (fast + 1)
    slow_sc = 2.0 / (slow + 1)

    kama = float(data[period - 1])
    for end in range(period + 1, n + 1):
        volatility = 0.0
        for i in range(1, period + 1):
            volatility += abs(float(data[end - i]) - float(data[end - i - 1]))
        net_change = abs(float(data[end - 1]) - float(data[end - period - 1]))
        efficiency = net_change / volatility if volatility > 0 else 0.0
        sc = (efficiency * (fast_sc - slow_sc) + slow_sc) ** 2
        kama = kama + sc * (float(data[end - 1]) - kama)
    return kama


def rainbow_moving_average(prices: ArrayLike, base_period: int = 2) -> float:
    """
    Position des Preises relativ zu zehn EMAs (base, 2*base, ..., 10*base).

    Returns:
        (ueber - unter) / 10 in [-1, 1]; 0 bei weniger als 10 * base Preisen
    """
    data = as_array(prices)
    if len(data) < base_period * 10:
        return 0.0

    current = float(data[-1])
    above = below = 0
    for multiple in range(1, 11):
        value = ema(data, base_period * multiple)
        if current > value:
            above += 1
        elif current < value:
            below += 1
    return (above - below) / 10
