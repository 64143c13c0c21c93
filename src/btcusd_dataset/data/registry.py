"""
Feature Registry Modul - Kanonische Reihenfolge aller Features

Die Registry ist die einzige Quelle fuer Anzahl und Reihenfolge der
Features. Sie wird einmal beim Import aufgebaut (keine Reflection) und
danach nur gelesen. Jede Aenderung der Reihenfolge ist ein Schema-Bruch:
gespeicherte Normalisierungs-Stats und Modellgewichte werden ungueltig.
"""

import hashlib
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

from ..core.exceptions import ConfigError, FeatureCountMismatchError
from ..indicators import (
    PERIODS,
    accelerator_oscillator,
    adx,
    aroon,
    atr,
    bollinger_band_width,
    camarilla_pivots,
    cci,
    center_of_gravity,
    chaikin_oscillator,
    cmf,
    detect_double_bottom,
    detect_double_top,
    detect_head_and_shoulders,
    detect_triple_bottom,
    detect_triple_top,
    donchian_channels,
    elder_force_index,
    fibonacci_retracement,
    fisher_transform,
    historical_volatility,
    hull_moving_average,
    ichimoku,
    ichimoku_cloud_position,
    ichimoku_kijun,
    ichimoku_tenkan,
    kaufman_adaptive_moving_average,
    keltner_channels,
    klinger_volume_oscillator,
    market_regime_score,
    mass_index,
    mesa_sine_wave,
    mfi,
    obv,
    parabolic_sar,
    pmo,
    price_acceleration,
    price_channel,
    proc,
    rainbow_moving_average,
    sma,
    std_dev,
    stoch_rsi,
    stochastic_k,
    tsi,
    volume_oscillator,
    vpt,
    vwap,
    vwma,
    williams_r,
)
from .window import FeatureWindow


class FeatureCategory(Enum):
    """Fachliche Gruppe eines Features."""
    CORE = "core"
    TECHNICAL = "technical"
    RATIO = "ratio"
    ENHANCED = "enhanced"
    MICROSTRUCTURE = "microstructure"
    PATTERN = "pattern"


class Importance(Enum):
    """Wichtigkeit eines Features (Gewicht fuer die Feature-Auswahl)."""
    HIGH = 3
    MEDIUM = 2
    LOW = 1


@dataclass(frozen=True)
class FeatureDescriptor:
    """
    Beschreibung eines Features.

    Attributes:
        name: Eindeutiger Name (snake_case)
        category: Fachliche Gruppe
        importance: Gewicht fuer die korrelationsbasierte Auswahl
        description: Kurzbeschreibung
        compute: Funktion FeatureWindow -> float
    """
    name: str
    category: FeatureCategory
    importance: Importance
    description: str
    compute: Callable[[FeatureWindow], float] = field(repr=False, compare=False)


class FeatureRegistry:
    """
    Geordnete, unveraenderliche Liste von FeatureDescriptoren.

    Example:
        >>> registry = build_default_registry()
        >>> registry.feature_count
        66
        >>> registry.index_of('rsi')
        5
    """

    def __init__(self, descriptors: Iterable[FeatureDescriptor]):
        self._descriptors: Tuple[FeatureDescriptor, ...] = tuple(descriptors)
        if not self._descriptors:
            raise ConfigError("Registry ohne Features", config_key='registry')

        self._index: Dict[str, int] = {}
        duplicates: List[str] = []
        for i, descriptor in enumerate(self._descriptors):
            if descriptor.name in self._index:
                duplicates.append(descriptor.name)
            self._index[descriptor.name] = i
        if duplicates:
            raise ConfigError(f"Doppelte Feature-Namen: {', '.join(duplicates)}",
                              config_key='registry')

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[FeatureDescriptor]:
        return iter(self._descriptors)

    def __getitem__(self, index: int) -> FeatureDescriptor:
        return self._descriptors[index]

    @property
    def feature_count(self) -> int:
        """Anzahl registrierter Features (= Laenge jedes Feature-Vektors)."""
        return len(self._descriptors)

    @property
    def names(self) -> List[str]:
        """Feature-Namen in Registrierungsreihenfolge."""
        return [d.name for d in self._descriptors]

    def index_of(self, name: str) -> int:
        """
        Position eines Features im Vektor.

        Raises:
            KeyError: Wenn der Name nicht registriert ist
        """
        return self._index[name]

    def by_category(self, category: FeatureCategory) -> List[str]:
        """Namen aller Features einer Kategorie (in Vektor-Reihenfolge)."""
        return [d.name for d in self._descriptors if d.category == category]

    def importance_of(self, name: str) -> Importance:
        """Wichtigkeit eines Features."""
        return self._descriptors[self._index[name]].importance

    def importance_weights(self) -> List[int]:
        """Wichtigkeits-Gewichte (3/2/1) in Vektor-Reihenfolge."""
        return [d.importance.value for d in self._descriptors]

    def fingerprint(self) -> str:
        """SHA-256 ueber die geordneten Feature-Namen (Schema-Version)."""
        joined = '\n'.join(self.names).encode('utf-8')
        return hashlib.sha256(joined).hexdigest()

    def validate_feature_count(self, expected: int):
        """
        Prueft eine erwartete Feature-Anzahl gegen die Registry.

        Raises:
            FeatureCountMismatchError: Bei Abweichung
        """
        if expected != self.feature_count:
            raise FeatureCountMismatchError(expected=expected, actual=self.feature_count)

    def summary(self) -> Dict[str, int]:
        """Anzahl Features pro Kategorie."""
        counts: Dict[str, int] = {}
        for descriptor in self._descriptors:
            key = descriptor.category.value
            counts[key] = counts.get(key, 0) + 1
        return counts


def detect_feature_count(registry: FeatureRegistry) -> int:
    """Reine Funktion: Feature-Anzahl einer Registry (wird in PipelineConfig abgelegt)."""
    return registry.feature_count


# =============================================================================
# Feature-Funktionen
# =============================================================================

def _price_change_pct(w: FeatureWindow) -> float:
    if w.day_index < 1:
        return 0.0
    return (w.current_price - w.previous_price) / w.previous_price * 100


def _high_low_range(w: FeatureWindow) -> float:
    if w.day_index < 20:
        return 0.0
    low, high = w.range20
    return high - low


def _price_volatility(w: FeatureWindow) -> float:
    if w.day_index < 5:
        return 0.0
    window = w.prices[-5:]
    return std_dev(window, sma(window))


def _price_position(w: FeatureWindow) -> float:
    if w.day_index < 20:
        return 0.5
    low, high = w.range20
    return (w.current_price - low) / ((high - low) or 1)


def _relative_volume(w: FeatureWindow) -> float:
    # ohne Volumen ist das Verhaeltnis undefiniert -> Tag wird verworfen
    if w.volume_ma20 == 0:
        return math.nan
    return float(w.volumes[-1]) / w.volume_ma20


def _ratio_to(value: float, w: FeatureWindow) -> float:
    return w.current_price / (value or w.current_price)


def _trend_regime(w: FeatureWindow) -> float:
    if w.sma50 == 0 or w.sma200 == 0:
        return 0.0
    return (w.sma50 - w.sma200) / w.sma200


def _bollinger_squeeze(w: FeatureWindow) -> float:
    if w.day_index < 20:
        return 0.1
    return (w.bands.upper - w.bands.lower) / w.current_price


def _rsi_divergence(w: FeatureWindow) -> float:
    if w.day_index < 1:
        return 0.0
    price_direction = math.copysign(1, w.current_price - w.previous_price) \
        if w.current_price != w.previous_price else 0.0
    rsi_direction = math.copysign(1, w.rsi - w.previous_rsi) if w.rsi != w.previous_rsi else 0.0
    return price_direction * rsi_direction


def _pattern(detector) -> Callable[[FeatureWindow], float]:
    def compute(w: FeatureWindow) -> float:
        return 1.0 if detector(w.pattern_prices, w.pattern_volumes, w.current_price) else 0.0
    return compute


def _descriptor(name: str, category: FeatureCategory, importance: Importance,
                description: str, compute: Callable[[FeatureWindow], float]) -> FeatureDescriptor:
    return FeatureDescriptor(name, category, importance, description, compute)


def build_default_registry() -> FeatureRegistry:
    """
    Baut die Standard-Registry mit allen Features in kanonischer Reihenfolge.

    Returns:
        FeatureRegistry mit 66 Features
    """
    C = FeatureCategory
    I = Importance

    features = [
        # 1-5: Preisaktion und Volatilitaet
        _descriptor('price_change_pct', C.CORE, I.HIGH, "Prozentuale Preisaenderung zum Vortag",
                    _price_change_pct),
        _descriptor('high_low_range', C.CORE, I.MEDIUM, "Spanne Hoch-Tief der letzten 20 Tage",
                    _high_low_range),
        _descriptor('price_volatility', C.CORE, I.HIGH, "Standardabweichung der letzten 5 Preise",
                    _price_volatility),
        _descriptor('price_position', C.CORE, I.MEDIUM, "Position im 20-Tage-Bereich",
                    _price_position),
        _descriptor('relative_volume', C.CORE, I.MEDIUM, "Volumen relativ zum 20-Tage-Mittel",
                    _relative_volume),

        # 6-10: Technische Indikatoren
        _descriptor('rsi', C.TECHNICAL, I.HIGH, "RSI (14)", lambda w: w.rsi),
        _descriptor('macd_signal', C.TECHNICAL, I.HIGH, "MACD Signal-Linie",
                    lambda w: w.macd.signal),
        _descriptor('vwap_ratio', C.TECHNICAL, I.HIGH, "Preis / VWAP (7)",
                    lambda w: _ratio_to(vwap(w.prices, w.volumes), w)),
        _descriptor('atr', C.TECHNICAL, I.HIGH, "Average True Range (14)",
                    lambda w: atr(w.prices)),
        _descriptor('obv', C.TECHNICAL, I.HIGH, "On-Balance Volume",
                    lambda w: obv(w.prices, w.volumes)),

        # 11-15: Momentum und Verhaeltnisse zu Durchschnitten
        _descriptor('momentum', C.ENHANCED, I.MEDIUM, "Preisdifferenz zu vor 10 Tagen",
                    lambda w: w.momentum),
        _descriptor('macd_histogram', C.ENHANCED, I.MEDIUM, "MACD - Signal",
                    lambda w: w.macd.histogram),
        _descriptor('price_sma7_ratio', C.RATIO, I.MEDIUM, "Preis / SMA7",
                    lambda w: _ratio_to(sma(w.prices[-PERIODS['SMA_SHORT']:]), w)),
        _descriptor('price_sma21_ratio', C.RATIO, I.MEDIUM, "Preis / SMA21",
                    lambda w: _ratio_to(sma(w.prices[-PERIODS['SMA_LONG']:]), w)),
        _descriptor('price_sma50_ratio', C.RATIO, I.MEDIUM, "Preis / SMA50",
                    lambda w: _ratio_to(w.sma50 or w.sma20, w)),

        # 16-20: Markt-Regime und Ichimoku
        _descriptor('trend_regime', C.ENHANCED, I.HIGH, "(SMA50 - SMA200) / SMA200",
                    _trend_regime),
        _descriptor('volatility_regime', C.ENHANCED, I.MEDIUM, "Volatilitaets-Regime / 5",
                    lambda w: w.volatility_regime.value / 5.0),
        _descriptor('ichimoku_tenkan', C.MICROSTRUCTURE, I.MEDIUM, "Ichimoku Tenkan-sen (9)",
                    lambda w: ichimoku_tenkan(w.prices)),
        _descriptor('ichimoku_kijun', C.MICROSTRUCTURE, I.MEDIUM, "Ichimoku Kijun-sen (26)",
                    lambda w: ichimoku_kijun(w.prices)),
        _descriptor('ichimoku_cloud_position', C.MICROSTRUCTURE, I.MEDIUM,
                    "Position zur Ichimoku-Wolke",
                    lambda w: ichimoku_cloud_position(w.current_price, w.prices)),

        # 21-26: Mikrostruktur und Volumen
        _descriptor('williams_r', C.MICROSTRUCTURE, I.MEDIUM, "Williams %R (14)",
                    lambda w: williams_r(w.prices)),
        _descriptor('vpt', C.MICROSTRUCTURE, I.HIGH, "Volume Price Trend",
                    lambda w: vpt(w.prices, w.volumes)),
        _descriptor('volume_ma20', C.TECHNICAL, I.MEDIUM, "Volumen-Durchschnitt (20)",
                    lambda w: w.volume_ma20),
        _descriptor('volume_oscillator', C.TECHNICAL, I.MEDIUM, "Volumen-Oszillator (5/14)",
                    lambda w: volume_oscillator(w.volumes)),
        _descriptor('bollinger_squeeze', C.ENHANCED, I.LOW, "Bollinger-Bandbreite / Preis",
                    _bollinger_squeeze),
        _descriptor('rsi_divergence', C.ENHANCED, I.LOW, "Richtung Preis * Richtung RSI",
                    _rsi_divergence),

        # 27-40: Oszillatoren und Kanaele
        _descriptor('cci', C.MICROSTRUCTURE, I.MEDIUM, "Commodity Channel Index (20)",
                    lambda w: cci(w.highs, w.lows, w.prices)),
        _descriptor('mfi', C.MICROSTRUCTURE, I.MEDIUM, "Money Flow Index (14)",
                    lambda w: mfi(w.highs, w.lows, w.prices, w.volumes)),
        _descriptor('aroon_oscillator', C.MICROSTRUCTURE, I.MEDIUM, "Aroon-Oszillator (25)",
                    lambda w: aroon(w.highs, w.lows).oscillator),
        _descriptor('donchian_position', C.MICROSTRUCTURE, I.MEDIUM, "Position im Donchian-Kanal",
                    lambda w: donchian_channels(w.highs, w.lows, w.prices).position),
        _descriptor('parabolic_sar', C.MICROSTRUCTURE, I.MEDIUM, "Parabolic SAR Trend",
                    lambda w: parabolic_sar(w.highs, w.lows, w.prices).trend),
        _descriptor('adx', C.MICROSTRUCTURE, I.MEDIUM, "Average Directional Index (14)",
                    lambda w: adx(w.highs, w.lows, w.prices)),
        _descriptor('ichimoku_position', C.MICROSTRUCTURE, I.MEDIUM, "Ichimoku-Position (52)",
                    lambda w: ichimoku(w.highs, w.lows, w.prices).position),
        _descriptor('fibonacci_position', C.MICROSTRUCTURE, I.MEDIUM,
                    "Position zu den Fibonacci-Retracements",
                    lambda w: fibonacci_retracement(w.highs, w.lows, w.prices).position),
        _descriptor('stochastic_k', C.MICROSTRUCTURE, I.MEDIUM, "Stochastik %K (14)",
                    lambda w: stochastic_k(w.prices)),
        _descriptor('price_acceleration', C.MICROSTRUCTURE, I.LOW, "Preisbeschleunigung (7)",
                    lambda w: price_acceleration(w.prices)),
        _descriptor('proc', C.MICROSTRUCTURE, I.MEDIUM, "Price Rate of Change (10)",
                    lambda w: proc(w.prices)),
        _descriptor('stoch_rsi', C.MICROSTRUCTURE, I.MEDIUM, "Stochastic RSI",
                    lambda w: stoch_rsi(w.prices).stoch_rsi),
        _descriptor('vwma', C.MICROSTRUCTURE, I.MEDIUM, "Volume Weighted Moving Average (20)",
                    lambda w: vwma(w.prices, w.volumes)),
        _descriptor('center_of_gravity', C.MICROSTRUCTURE, I.LOW, "Center of Gravity (10)",
                    lambda w: center_of_gravity(w.prices)),

        # 41-56: Erweiterte Oszillatoren und Durchschnitte
        _descriptor('tsi', C.MICROSTRUCTURE, I.MEDIUM, "True Strength Index (25/13)",
                    lambda w: tsi(w.prices)),
        _descriptor('pmo', C.MICROSTRUCTURE, I.MEDIUM, "Price Momentum Oscillator (35/20)",
                    lambda w: pmo(w.prices)),
        _descriptor('bollinger_band_width', C.MICROSTRUCTURE, I.MEDIUM, "Bollinger-Bandbreite in %",
                    lambda w: bollinger_band_width(w.prices)),
        _descriptor('historical_volatility', C.MICROSTRUCTURE, I.MEDIUM,
                    "Historische Volatilitaet (20)",
                    lambda w: historical_volatility(w.prices)),
        _descriptor('camarilla_pivots', C.MICROSTRUCTURE, I.LOW, "Position zu Camarilla-Pivots",
                    lambda w: camarilla_pivots(w.prices)),
        _descriptor('accelerator_oscillator', C.MICROSTRUCTURE, I.LOW, "Accelerator (5/34)",
                    lambda w: accelerator_oscillator(w.prices)),
        _descriptor('chaikin_oscillator', C.MICROSTRUCTURE, I.MEDIUM, "Chaikin-Oszillator (3/10)",
                    lambda w: chaikin_oscillator(w.highs, w.lows, w.prices, w.volumes)),
        _descriptor('elder_force_index', C.MICROSTRUCTURE, I.MEDIUM, "Elder Force Index (13)",
                    lambda w: elder_force_index(w.prices, w.volumes)),
        _descriptor('klinger_volume_oscillator', C.MICROSTRUCTURE, I.LOW,
                    "Klinger Volume Oscillator (34/55)",
                    lambda w: klinger_volume_oscillator(w.highs, w.lows, w.prices, w.volumes)),
        _descriptor('mass_index', C.MICROSTRUCTURE, I.LOW, "Mass Index (9/25)",
                    lambda w: mass_index(w.highs, w.lows)),
        _descriptor('price_channel', C.MICROSTRUCTURE, I.MEDIUM, "Position im Preiskanal (20)",
                    lambda w: price_channel(w.highs, w.lows, w.prices)),
        _descriptor('fisher_transform', C.MICROSTRUCTURE, I.MEDIUM, "Fisher Transform (10)",
                    lambda w: fisher_transform(w.highs, w.lows)),
        _descriptor('hull_moving_average', C.MICROSTRUCTURE, I.MEDIUM, "Hull Moving Average (20)",
                    lambda w: hull_moving_average(w.prices)),
        _descriptor('kaufman_adaptive_ma', C.MICROSTRUCTURE, I.MEDIUM, "KAMA (10/2/30)",
                    lambda w: kaufman_adaptive_moving_average(w.prices)),
        _descriptor('mesa_sine_wave', C.MICROSTRUCTURE, I.LOW, "MESA Sine Wave (20)",
                    lambda w: mesa_sine_wave(w.prices)),
        _descriptor('rainbow_moving_average', C.MICROSTRUCTURE, I.MEDIUM,
                    "Position zu zehn EMAs",
                    lambda w: rainbow_moving_average(w.prices)),

        # 57-61: Kanal-Position, Geldfluss und Regime-Scores
        _descriptor('keltner_position', C.MICROSTRUCTURE, I.MEDIUM, "Position im Keltner-Kanal",
                    lambda w: keltner_channels(w.highs, w.lows, w.prices).position),
        _descriptor('cmf', C.MICROSTRUCTURE, I.LOW, "Chaikin Money Flow (20)",
                    lambda w: cmf(w.highs, w.lows, w.prices, w.volumes)),
        _descriptor('trend_regime_score', C.ENHANCED, I.MEDIUM, "Trend-Regime / 7",
                    lambda w: w.trend_regime.value / 7.0),
        _descriptor('momentum_regime_score', C.ENHANCED, I.MEDIUM, "Momentum-Regime / 5",
                    lambda w: w.momentum_regime.value / 5.0),
        _descriptor('market_regime_score', C.ENHANCED, I.LOW, "Gesamt-Regime-Score / 100",
                    lambda w: market_regime_score(w.volatility_regime, w.trend_regime,
                                                  w.momentum_regime) / 100.0),

        # 62-66: Chartmuster (0/1)
        _descriptor('double_top', C.PATTERN, I.LOW, "Double Top erkannt",
                    _pattern(detect_double_top)),
        _descriptor('double_bottom', C.PATTERN, I.LOW, "Double Bottom erkannt",
                    _pattern(detect_double_bottom)),
        _descriptor('triple_top', C.PATTERN, I.LOW, "Triple Top erkannt",
                    _pattern(detect_triple_top)),
        _descriptor('triple_bottom', C.PATTERN, I.LOW, "Triple Bottom erkannt",
                    _pattern(detect_triple_bottom)),
        _descriptor('head_and_shoulders', C.PATTERN, I.LOW, "Head and Shoulders erkannt",
                    _pattern(detect_head_and_shoulders)),
    ]
    return FeatureRegistry(features)


# Einmal beim Import aufgebaut, danach nur lesend verwendet
FEATURE_REGISTRY = build_default_registry()
