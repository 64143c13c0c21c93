"""Indicators Module - Reine Indikator-Funktionen ueber nachlaufende Fenster

Jede Funktion ist deterministisch und total: zu kurze Historie oder
Division durch Null liefern einen dokumentierten neutralen Wert.
"""

from .periods import PERIODS, PATTERN_WINDOW

# Gleitende Durchschnitte
from .moving_averages import (
    MACDResult,
    BollingerBands,
    sma,
    ema,
    ema_series,
    wma,
    std_dev,
    macd,
    bollinger_bands,
    bollinger_band_width,
    hull_moving_average,
    kaufman_adaptive_moving_average,
    rainbow_moving_average,
)

# Momentum
from .momentum import (
    StochRSIResult,
    rsi,
    stoch_rsi,
    williams_r,
    stochastic_k,
    cci,
    mfi,
    proc,
    price_acceleration,
    center_of_gravity,
    tsi,
    pmo,
    accelerator_oscillator,
    fisher_transform,
    mesa_sine_wave,
)

# Volatilitaet und Kanaele
from .volatility import (
    KeltnerChannels,
    DonchianChannels,
    atr,
    keltner_channels,
    donchian_channels,
    price_channel,
    historical_volatility,
    realized_volatility,
    mass_index,
    camarilla_pivots,
)

# Volumen
from .volume import (
    vwap,
    vwma,
    obv,
    volume_oscillator,
    vpt,
    cmf,
    chaikin_oscillator,
    elder_force_index,
    klinger_volume_oscillator,
)

# Trend und Regimes
from .trend import (
    AroonResult,
    ParabolicSARResult,
    IchimokuResult,
    FibonacciRetracement,
    FibonacciLevels,
    VolatilityRegime,
    TrendRegime,
    MomentumRegime,
    adx,
    aroon,
    parabolic_sar,
    ichimoku_tenkan,
    ichimoku_kijun,
    ichimoku_cloud_position,
    ichimoku,
    fibonacci_retracement,
    fibonacci_levels,
    classify_volatility_regime,
    classify_trend_regime,
    classify_momentum_regime,
    market_regime_score,
)

# Chartmuster
from .patterns import (
    detect_double_top,
    detect_double_bottom,
    detect_triple_top,
    detect_triple_bottom,
    detect_head_and_shoulders,
)

__all__ = [
    'PERIODS',
    'PATTERN_WINDOW',
    # Gleitende Durchschnitte
    'MACDResult',
    'BollingerBands',
    'sma',
    'ema',
    'ema_series',
    'wma',
    'std_dev',
    'macd',
    'bollinger_bands',
    'bollinger_band_width',
    'hull_moving_average',
    'kaufman_adaptive_moving_average',
    'rainbow_moving_average',
    # Momentum
    'StochRSIResult',
    'rsi',
    'stoch_rsi',
    'williams_r',
    'stochastic_k',
    'cci',
    'mfi',
    'proc',
    'price_acceleration',
    'center_of_gravity',
    'tsi',
    'pmo',
    'accelerator_oscillator',
    'fisher_transform',
    'mesa_sine_wave',
    # Volatilitaet
    'KeltnerChannels',
    'DonchianChannels',
    'atr',
    'keltner_channels',
    'donchian_channels',
    'price_channel',
    'historical_volatility',
    'realized_volatility',
    'mass_index',
    'camarilla_pivots',
    # Volumen
    'vwap',
    'vwma',
    'obv',
    'volume_oscillator',
    'vpt',
    'cmf',
    'chaikin_oscillator',
    'elder_force_index',
    'klinger_volume_oscillator',
    # Trend und Regimes
    'AroonResult',
    'ParabolicSARResult',
    'IchimokuResult',
    'FibonacciRetracement',
    'FibonacciLevels',
    'VolatilityRegime',
    'TrendRegime',
    'MomentumRegime',
    'adx',
    'aroon',
    'parabolic_sar',
    'ichimoku_tenkan',
    'ichimoku_kijun',
    'ichimoku_cloud_position',
    'ichimoku',
    'fibonacci_retracement',
    'fibonacci_levels',
    'classify_volatility_regime',
    'classify_trend_regime',
    'classify_momentum_regime',
    'market_regime_score',
    # Chartmuster
    'detect_double_top',
    'detect_double_bottom',
    'detect_triple_top',
    'detect_triple_bottom',
    'detect_head_and_shoulders',
]
