"""
Momentum-Oszillatoren - RSI, StochRSI, Williams %R, CCI, MFI, TSI, PMO, Fisher, ...

Eingaben sind Fenster bis einschliesslich des aktuellen Tages. Fehlen
High/Low-Reihen, uebergibt der Aufrufer die Schlusskurse als Naeherung.
"""

import math
from typing import NamedTuple

import numpy as np

from ._common import ArrayLike, as_array, mean
from .moving_averages import ema, ema_series
from .periods import PERIODS


class StochRSIResult(NamedTuple):
    """Stochastic RSI und geglaettete Signal-Linie (beide 0..100)."""
    stoch_rsi: float
    signal: float


def rsi(prices: ArrayLike, period: int = PERIODS['RSI']) -> float:
    """
    Relative Strength Index nach Wilder.

    Die ersten `period` Aenderungen bilden den Startwert, alle weiteren
    werden mit (avg * (period - 1) + x) / period geglaettet.
    Ohne Verluste gilt rs = unendlich und der RSI ist 100; das betrifft
    auch eine komplett flache Reihe.

    Returns:
        RSI in [0, 100] (50 bei weniger als period + 1 Preisen)
    """
    data = as_array(prices)
    if len(data) < period + 1:
        return 50.0

    gains = losses = 0.0
    for i in range(1, period + 1):
        change = float(data[i] - data[i - 1])
        if change > 0:
            gains += change
        else:
            losses += abs(change)
    avg_gain = gains / period
    avg_loss = losses / period

    for i in range(period + 1, len(data)):
        change = float(data[i] - data[i - 1])
        gain = change if change > 0 else 0.0
        loss = abs(change) if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss <= 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def _stochastic(window) -> float:
    """Position des letzten Werts zwischen Minimum und Maximum (50 wenn flach)."""
    lowest = min(window)
    highest = max(window)
    if highest == lowest:
        return 50.0
    return (window[-1] - lowest) / (highest - lowest) * 100


def stoch_rsi(prices: ArrayLike,
              rsi_period: int = PERIODS['STOCH_RSI'],
              stoch_period: int = PERIODS['STOCH_RSI'],
              smooth_period: int = PERIODS['STOCH_SMOOTH']) -> StochRSIResult:
    """
    Stochastic RSI mit SMA-geglaetteter Signal-Linie.

    Jeder RSI-Wert wird ueber genau rsi_period + 1 Preise berechnet; die
    Stochastik laeuft ueber die letzten `stoch_period` RSI-Werte, das Signal
    ist der Durchschnitt der letzten `smooth_period` Stochastik-Werte.

    Returns:
        StochRSIResult (50, 50 bei weniger als rsi_period + stoch_period Preisen)
    """
    data = as_array(prices)
    n = len(data)
    if n < rsi_period + stoch_period:
        return StochRSIResult(50.0, 50.0)

    first_end = max(rsi_period + 1, n - (stoch_period + smooth_period - 2))
    rsi_values = [rsi(data[end - rsi_period - 1:end], rsi_period)
                  for end in range(first_end, n + 1)]

    count = len(rsi_values)
    stochs = [_stochastic(rsi_values[max(0, k - stoch_period):k])
              for k in range(max(stoch_period, count - smooth_period + 1), count + 1)]
    return StochRSIResult(stochs[-1], mean(stochs))


def williams_r(prices: ArrayLike, period: int = 14) -> float:
    """Williams %R in [-100, 0] (-50 bei zu kurzem oder flachem Fenster)."""
    data = as_array(prices)
    if len(data) < period:
        return -50.0
    window = data[-period:]
    highest = float(window.max())
    lowest = float(window.min())
    if highest == lowest:
        return -50.0
    return (highest - float(data[-1])) / (highest - lowest) * -100


def stochastic_k(prices: ArrayLike, period: int = 14) -> float:
    """Stochastik %K in [0, 100] (50 bei zu kurzem oder flachem Fenster)."""
    data = as_array(prices)
    if len(data) < period:
        return 50.0
    return _stochastic([float(x) for x in data[-period:]])


def cci(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 20) -> float:
    """Commodity Channel Index mit Konstante 0.015 (0 ohne Abweichung)."""
    close = as_array(closes)
    if len(close) < period:
        return 0.0
    typical = (as_array(highs)[-period:] + as_array(lows)[-period:] + close[-period:]) / 3
    average = mean(typical)
    mean_deviation = mean(np.abs(typical - average))
    if mean_deviation == 0:
        return 0.0
    return (float(typical[-1]) - average) / (0.015 * mean_deviation)


def mfi(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, volumes: ArrayLike,
        period: int = 14) -> float:
    """
    Money Flow Index ueber die letzten `period` Aenderungen des Typical Price.

    Returns:
        MFI in [0, 100]; 50 bei zu kurzer Historie, 100 ohne negativen Geldfluss
    """
    close = as_array(closes)
    volume = as_array(volumes)
    if len(close) < period + 1 or len(volume) < period + 1:
        return 50.0

    typical = (as_array(highs)[-(period + 1):] + as_array(lows)[-(period + 1):]
               + close[-(period + 1):]) / 3
    recent_volume = volume[-(period + 1):]

    positive = negative = 0.0
    for i in range(period, 0, -1):
        current = float(typical[i])
        previous = float(typical[i - 1])
        if current > previous:
            positive += current * float(recent_volume[i])
        elif current < previous:
            negative += current * float(recent_volume[i])

    if negative == 0:
        return 100.0
    return 100 - 100 / (1 + positive / negative)


def proc(prices: ArrayLike, period: int = 10) -> float:
    """Price Rate of Change in Prozent."""
    data = as_array(prices)
    if len(data) < period + 1:
        return 0.0
    past = float(data[-1 - period])
    return (float(data[-1]) - past) / past * 100 if past > 0 else 0.0


def price_acceleration(prices: ArrayLike, period: int = 7) -> float:
    """Aenderung der Preisgeschwindigkeit, normiert auf den aktuellen Preis."""
    data = as_array(prices)
    if len(data) < 2 * period + 1:
        return 0.0
    velocity = (float(data[-1]) - float(data[-1 - period])) / period
    previous_velocity = (float(data[-1 - period]) - float(data[-1 - 2 * period])) / period
    current = float(data[-1])
    return (velocity - previous_velocity) / current if current > 0 else 0.0


def center_of_gravity(prices: ArrayLike, period: int = 10) -> float:
    """Center of Gravity Oszillator: linear gewichteter gegen einfachen Durchschnitt in %."""
    data = as_array(prices)
    if len(data) < period:
        return 0.0
    window = data[-period:]
    weighted = 0.0
    weight_sum = 0.0
    for i, price in enumerate(window):
        weighted += float(price) * (i + 1)
        weight_sum += i + 1
    gravity = weighted / weight_sum
    average = mean(window)
    return (gravity - average) / average * 100 if average > 0 else 0.0


def tsi(prices: ArrayLike, long_period: int = 25, short_period: int = 13) -> float:
    """
    True Strength Index: doppelt EMA-geglaettete Preisaenderungen relativ
    zu den doppelt geglaetteten absoluten Aenderungen.

    Returns:
        TSI in [-100, 100] (0 bei zu kurzer Historie oder ohne Bewegung)
    """
    data = as_array(prices)
    if len(data) < long_period + short_period + 1:
        return 0.0
    changes = np.diff(data)
    smoothed = ema(ema_series(changes, long_period), short_period)
    smoothed_abs = ema(ema_series(np.abs(changes), long_period), short_period)
    return smoothed / smoothed_abs * 100 if smoothed_abs != 0 else 0.0


def pmo(prices: ArrayLike, first_period: int = 35, second_period: int = 20) -> float:
    """Price Momentum Oscillator: doppelt EMA-geglaettete prozentuale Rate of Change."""
    data = as_array(prices)
    if len(data) < first_period + second_period + 1:
        return 0.0
    previous = data[:-1]
    safe_previous = np.where(previous != 0, previous, 1.0)
    roc = np.where(previous != 0, np.diff(data) / safe_previous * 100, 0.0)
    return ema(ema_series(roc, first_period), second_period)


def accelerator_oscillator(prices: ArrayLike, short_period: int = 5, long_period: int = 34) -> float:
    """Abstand SMA(short) zu SMA(long) in Prozent von SMA(long)."""
    data = as_array(prices)
    if len(data) < long_period:
        return 0.0
    short_sma = mean(data[-short_period:])
    long_sma = mean(data[-long_period:])
    return (short_sma - long_sma) / long_sma * 100 if long_sma > 0 else 0.0


def fisher_transform(highs: ArrayLike, lows: ArrayLike, period: int = 10) -> float:
    """
    Fisher Transform (Ehlers) ueber den Median-Preis (High + Low) / 2.

    value  = 0.66 * (normierte Position - 0.5) + 0.67 * value_vorher, begrenzt auf +-0.999
    fisher = 0.5 * ln((1 + value) / (1 - value)) + 0.5 * fisher_vorher

    Returns:
        Fisher-Wert (0 bei weniger als `period` Werten)
    """
    high = as_array(highs)
    low = as_array(lows)
    n = min(len(high), len(low))
    if n < period:
        return 0.0

    median = (high[-n:] + low[-n:]) / 2
    value = 0.0
    fisher = 0.0
    for end in range(period, n + 1):
        window = median[end - period:end]
        highest = float(window.max())
        lowest = float(window.min())
        position = (float(window[-1]) - lowest) / (highest - lowest) if highest != lowest else 0.5
        value = 0.33 * 2 * (position - 0.5) + 0.67 * value
        value = max(-0.999, min(0.999, value))
        fisher = 0.5 * math.log((1 + value) / (1 - value)) + 0.5 * fisher
    return fisher


def mesa_sine_wave(prices: ArrayLike, period: int = 20) -> float:
    """
    Vereinfachte MESA Sine Wave: Sinus des Phasenwinkels aus normierter
    Preisaenderung ueber das Fenster (ohne Hilbert-Transformation).

    Returns:
        Wert in (-1, 1), 0 bei zu kurzem oder flachem Fenster
    """
    data = as_array(prices)
    if len(data) < period:
        return 0.0
    window = data[-period:]
    change = float(window[-1]) - float(window[0])
    span = float(window.max()) - float(window.min())
    if span == 0:
        return 0.0
    return math.sin(math.atan2(change / span, 1))
