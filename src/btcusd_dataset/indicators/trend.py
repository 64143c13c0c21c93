"""
Trend-Indikatoren - ADX, Aroon, Parabolic SAR, Ichimoku, Fibonacci
sowie die Klassifikation von Markt-Regimes
"""

from enum import Enum
from typing import NamedTuple, Tuple

import numpy as np

from ._common import ArrayLike, as_array, mean
from .periods import PERIODS


class AroonResult(NamedTuple):
    """Aroon Up/Down (0..100) und Oszillator (-100..100)."""
    up: float
    down: float
    oscillator: float


class ParabolicSARResult(NamedTuple):
    """SAR-Wert und vorzeichenbehafteter relativer Abstand zum Preis."""
    sar: float
    trend: float


class IchimokuResult(NamedTuple):
    """Ichimoku-Linien und Position zur Wolke (1 darueber, -1 darunter, 0 innerhalb)."""
    conversion: float
    base: float
    span_a: float
    span_b: float
    position: float


class FibonacciRetracement(NamedTuple):
    """Retracement-Niveaus vom Swing-Hoch aus und diskrete Preisposition."""
    level_236: float
    level_382: float
    level_500: float
    level_618: float
    position: float


class FibonacciLevels(NamedTuple):
    """Extension-Niveaus vom Swing-Tief aus (23.6/38.2/50/61.8/100 %)."""
    levels: Tuple[float, float, float, float, float]
    high: float
    low: float


def adx(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = PERIODS['ADX']) -> float:
    """
    Average Directional Index nach Wilder.

    TR, +DM und -DM werden Wilder-geglaettet, daraus DI+/DI- und DX;
    der ADX ist der Wilder-Durchschnitt der DX-Werte (Start: Mittel der
    ersten `period` DX-Werte bzw. aller verfuegbaren).

    Returns:
        ADX in [0, 100] (0 bei weniger als period + 1 Werten oder ohne Bewegung)
    """
    high = as_array(highs)
    low = as_array(lows)
    close = as_array(closes)
    n = min(len(high), len(low), len(close))
    if n < period + 1:
        return 0.0
    high, low, close = high[-n:], low[-n:], close[-n:]

    up_move = np.diff(high)
    down_move = low[:-1] - low[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    true_range = np.maximum.reduce([
        high[1:] - low[1:],
        np.abs(high[1:] - close[:-1]),
        np.abs(low[1:] - close[:-1]),
    ])

    smoothed_tr = float(np.sum(true_range[:period]))
    smoothed_plus = float(np.sum(plus_dm[:period]))
    smoothed_minus = float(np.sum(minus_dm[:period]))

    def directional_index() -> float:
        if smoothed_tr <= 0:
            return 0.0
        plus_di = smoothed_plus / smoothed_tr * 100
        minus_di = smoothed_minus / smoothed_tr * 100
        di_sum = plus_di + minus_di
        return abs(plus_di - minus_di) / di_sum * 100 if di_sum > 0 else 0.0

    dx_values = [directional_index()]
    for i in range(period, len(true_range)):
        smoothed_tr = smoothed_tr - smoothed_tr / period + float(true_range[i])
        smoothed_plus = smoothed_plus - smoothed_plus / period + float(plus_dm[i])
        smoothed_minus = smoothed_minus - smoothed_minus / period + float(minus_dm[i])
        dx_values.append(directional_index())

    result = mean(dx_values[:period])
    for dx in dx_values[period:]:
        result = (result * (period - 1) + dx) / period
    return result


def aroon(highs: ArrayLike, lows: ArrayLike, period: int = 25) -> AroonResult:
    """
    Aroon Up/Down aus dem Abstand zum letzten Auftreten von Hoch bzw. Tief.

    Returns:
        AroonResult (50, 50, 0 bei zu kurzer Historie oder NaN im Fenster)
    """
    high = as_array(highs)
    low = as_array(lows)
    if len(high) < period or len(low) < period:
        return AroonResult(50.0, 50.0, 0.0)

    recent_high = high[-period:]
    recent_low = low[-period:]
    if not (np.all(np.isfinite(recent_high)) and np.all(np.isfinite(recent_low))):
        return AroonResult(50.0, 50.0, 0.0)
    # letztes Auftreten des Extremwerts
    days_since_high = period - 1 - int(np.flatnonzero(recent_high == recent_high.max())[-1])
    days_since_low = period - 1 - int(np.flatnonzero(recent_low == recent_low.min())[-1])

    up = (period - days_since_high) / period * 100
    down = (period - days_since_low) / period * 100
    return AroonResult(up, down, up - down)


def parabolic_sar(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike,
                  acceleration: float = 0.02, maximum: float = 0.2) -> ParabolicSARResult:
    """
    Parabolic SAR ueber das gesamte Fenster, Start im Aufwaertstrend.

    Returns:
        ParabolicSARResult(sar, trend * |(close - sar) / close|); (0, 0) bei < 2 Werten
    """
    high = as_array(highs)
    low = as_array(lows)
    close = as_array(closes)
    n = min(len(high), len(low), len(close))
    if n < 2:
        return ParabolicSARResult(0.0, 0.0)
    high, low, close = high[-n:], low[-n:], close[-n:]

    sar = float(low[0])
    af = acceleration
    extreme = float(high[0])
    trend = 1

    for i in range(1, n):
        current_high = float(high[i])
        current_low = float(low[i])
        if trend == 1:
            if current_low > sar:
                sar = sar + af * (extreme - sar)
                if current_high > extreme:
                    extreme = current_high
                    af = min(af + acceleration, maximum)
            else:
                trend = -1
                sar = extreme
                extreme = current_low
                af = acceleration
        else:
            if current_high < sar:
                sar = sar + af * (extreme - sar)
                if current_low < extreme:
                    extreme = current_low
                    af = min(af + acceleration, maximum)
            else:
                trend = 1
                sar = extreme
                extreme = current_high
                af = acceleration

    current = float(close[-1])
    if current == 0:
        return ParabolicSARResult(sar, 0.0)
    return ParabolicSARResult(sar, trend * abs((current - sar) / current))


def _midpoint(prices: ArrayLike, period: int) -> float:
    data = as_array(prices)
    if len(data) == 0:
        return 0.0
    if len(data) < period:
        return float(data[-1])
    window = data[-period:]
    return (float(window.max()) + float(window.min())) / 2


def ichimoku_tenkan(prices: ArrayLike, period: int = 9) -> float:
    """Tenkan-sen (Umwandlungslinie); letzter Preis bei zu kurzer Historie."""
    return _midpoint(prices, period)


def ichimoku_kijun(prices: ArrayLike, period: int = 26) -> float:
    """Kijun-sen (Basislinie); letzter Preis bei zu kurzer Historie."""
    return _midpoint(prices, period)


def _cloud_position(current: float, span_a: float, span_b: float) -> float:
    top = max(span_a, span_b)
    bottom = min(span_a, span_b)
    if current > top:
        return 1.0
    if current < bottom:
        return -1.0
    return 0.0


def ichimoku_cloud_position(current_price: float, prices: ArrayLike) -> float:
    """Position zur Wolke aus Span A = (Tenkan + Kijun) / 2 und Span B = Mitte(52)."""
    span_a = (ichimoku_tenkan(prices, 9) + ichimoku_kijun(prices, 26)) / 2
    span_b = ichimoku_kijun(prices, 52)
    return _cloud_position(current_price, span_a, span_b)


def ichimoku(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike) -> IchimokuResult:
    """Vollstaendiges Ichimoku aus Schlusskursen (Nullen bei weniger als 52 Werten)."""
    close = as_array(closes)
    if len(as_array(highs)) < 52 or len(as_array(lows)) < 52 or len(close) < 52:
        return IchimokuResult(0.0, 0.0, 0.0, 0.0, 0.0)
    conversion = ichimoku_tenkan(close, 9)
    base = ichimoku_kijun(close, 26)
    span_a = (conversion + base) / 2
    span_b = ichimoku_kijun(close, 52)
    return IchimokuResult(conversion, base, span_a, span_b,
                          _cloud_position(float(close[-1]), span_a, span_b))


def fibonacci_retracement(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike,
                          period: int = 20) -> FibonacciRetracement:
    """
    Fibonacci-Retracement vom Swing-Hoch der letzten `period` Tage.

    Position: 1 ueber dem Hoch, 0.8/0.6/0.4/0.2 zwischen den Niveaus,
    -0.2 zwischen 61.8 % und Tief, -1 darunter; 0 ohne Spanne.
    """
    close = as_array(closes)
    if len(close) < period:
        return FibonacciRetracement(0.0, 0.0, 0.0, 0.0, 0.0)

    swing_high = float(as_array(highs)[-period:].max())
    swing_low = float(as_array(lows)[-period:].min())
    span = swing_high - swing_low
    if span == 0:
        return FibonacciRetracement(swing_high, swing_high, swing_high, swing_high, 0.0)

    level_236 = swing_high - span * 0.236
    level_382 = swing_high - span * 0.382
    level_500 = swing_high - span * 0.5
    level_618 = swing_high - span * 0.618

    current = float(close[-1])
    if current > swing_high:
        position = 1.0
    elif current > level_236:
        position = 0.8
    elif current > level_382:
        position = 0.6
    elif current > level_500:
        position = 0.4
    elif current > level_618:
        position = 0.2
    elif current > swing_low:
        position = -0.2
    else:
        position = -1.0
    return FibonacciRetracement(level_236, level_382, level_500, level_618, position)


def fibonacci_levels(prices: ArrayLike, period: int = PERIODS['FIBONACCI']) -> FibonacciLevels:
    """Fibonacci-Niveaus vom Tief der letzten `period` Preise aus."""
    data = as_array(prices)
    if len(data) < period:
        high = float(data[-1]) if len(data) else 0.0
        low = float(data[0]) if len(data) else 0.0
        return FibonacciLevels((0.0, 0.0, 0.0, 0.0, 0.0), high, low)
    window = data[-period:]
    high = float(window.max())
    low = float(window.min())
    span = high - low
    levels = (low + span * 0.236, low + span * 0.382, low + span * 0.5, low + span * 0.618, high)
    return FibonacciLevels(levels, high, low)


# =============================================================================
# Markt-Regimes
# =============================================================================

class VolatilityRegime(Enum):
    """Volatilitaets-Regime (Score 1 = sehr niedrig ... 5 = extrem)."""
    EXTREME_HIGH = 5
    HIGH = 4
    MEDIUM = 3
    LOW = 2
    VERY_LOW = 1


class TrendRegime(Enum):
    """Trend-Regime (Score 1 = starker Abwaertstrend ... 7 = starker Aufwaertstrend)."""
    STRONG_UPTREND = 7
    UPTREND = 6
    WEAK_UPTREND = 5
    SIDEWAYS = 4
    WEAK_DOWNTREND = 3
    DOWNTREND = 2
    STRONG_DOWNTREND = 1


class MomentumRegime(Enum):
    """Momentum-Regime (Score 1 = starke Umkehr ... 5 = starkes Momentum)."""
    STRONG_MOMENTUM = 5
    MOMENTUM = 4
    NEUTRAL = 3
    REVERSAL = 2
    STRONG_REVERSAL = 1


def classify_volatility_regime(realized: float) -> VolatilityRegime:
    """Ordnet die annualisierte Volatilitaet einem Regime zu."""
    if realized > 1.0:
        return VolatilityRegime.EXTREME_HIGH
    if realized > 0.6:
        return VolatilityRegime.HIGH
    if realized > 0.35:
        return VolatilityRegime.MEDIUM
    if realized > 0.2:
        return VolatilityRegime.LOW
    return VolatilityRegime.VERY_LOW


def _relative(a: float, b: float) -> float:
    return (a - b) / b if b != 0 else 0.0


def classify_trend_regime(price: float, sma20: float, sma50: float, sma200: float) -> TrendRegime:
    """Trend-Regime aus den relativen Abstaenden Preis/SMA20/SMA50/SMA200."""
    short_trend = _relative(price, sma20)
    medium_trend = _relative(sma20, sma50)
    long_trend = _relative(sma50, sma200)

    if short_trend > 0.05 and medium_trend > 0.03 and long_trend > 0.02:
        return TrendRegime.STRONG_UPTREND
    if short_trend < -0.05 and medium_trend < -0.03 and long_trend < -0.02:
        return TrendRegime.STRONG_DOWNTREND
    if short_trend > 0.02 and medium_trend > 0.01:
        return TrendRegime.UPTREND
    if short_trend < -0.02 and medium_trend < -0.01:
        return TrendRegime.DOWNTREND
    if short_trend > 0.005:
        return TrendRegime.WEAK_UPTREND
    if short_trend < -0.005:
        return TrendRegime.WEAK_DOWNTREND
    return TrendRegime.SIDEWAYS


def classify_momentum_regime(rsi_value: float, momentum: float,
                             macd_line: float, signal_line: float) -> MomentumRegime:
    """Momentum-Regime aus RSI-Zone, Preis-Momentum und MACD gegen Signal."""
    rsi_zone = 'OVERBOUGHT' if rsi_value > 75 else 'OVERSOLD' if rsi_value < 25 else 'NEUTRAL'

    if momentum > 0.01:
        price_momentum = 'STRONG_POSITIVE'
    elif momentum > 0:
        price_momentum = 'POSITIVE'
    elif momentum < -0.01:
        price_momentum = 'STRONG_NEGATIVE'
    else:
        price_momentum = 'NEGATIVE'

    if macd_line > signal_line * 1.1:
        macd_momentum = 'STRONG_POSITIVE'
    elif macd_line > signal_line:
        macd_momentum = 'POSITIVE'
    elif macd_line < signal_line * 0.9:
        macd_momentum = 'STRONG_NEGATIVE'
    else:
        macd_momentum = 'NEGATIVE'

    if rsi_zone == 'NEUTRAL' and price_momentum == macd_momentum == 'STRONG_POSITIVE':
        return MomentumRegime.STRONG_MOMENTUM
    if rsi_zone == 'NEUTRAL' and price_momentum == macd_momentum == 'STRONG_NEGATIVE':
        return MomentumRegime.STRONG_REVERSAL
    if price_momentum == 'POSITIVE' and macd_momentum == 'POSITIVE':
        return MomentumRegime.MOMENTUM
    if price_momentum == 'NEGATIVE' and macd_momentum == 'NEGATIVE':
        return MomentumRegime.REVERSAL
    if rsi_zone == 'OVERBOUGHT' and price_momentum == 'NEGATIVE':
        return MomentumRegime.REVERSAL
    if rsi_zone == 'OVERSOLD' and price_momentum == 'POSITIVE':
        return MomentumRegime.MOMENTUM
    return MomentumRegime.NEUTRAL


_VOLATILITY_ADJUSTMENT = {
    VolatilityRegime.EXTREME_HIGH: 20,
    VolatilityRegime.HIGH: 10,
    VolatilityRegime.VERY_LOW: -10,
}
_TREND_ADJUSTMENT = {
    TrendRegime.STRONG_UPTREND: 15,
    TrendRegime.UPTREND: 8,
    TrendRegime.STRONG_DOWNTREND: -15,
    TrendRegime.DOWNTREND: -8,
}
_MOMENTUM_ADJUSTMENT = {
    MomentumRegime.STRONG_MOMENTUM: 15,
    MomentumRegime.MOMENTUM: 8,
    MomentumRegime.STRONG_REVERSAL: -15,
    MomentumRegime.REVERSAL: -8,
}


def market_regime_score(volatility: VolatilityRegime, trend: TrendRegime,
                        momentum: MomentumRegime) -> float:
    """Gesamt-Score 0..100 (50 = neutral) aus den drei Regimes."""
    score = 50
    score += _VOLATILITY_ADJUSTMENT.get(volatility, 0)
    score += _TREND_ADJUSTMENT.get(trend, 0)
    score += _MOMENTUM_ADJUSTMENT.get(momentum, 0)
    return float(max(0, min(100, score)))
