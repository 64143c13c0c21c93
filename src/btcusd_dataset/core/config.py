"""
Config Modul - Zentrale Pipeline-Konfiguration

Die Konfiguration wird einmal erzeugt und explizit durch alle Komponenten
gereicht. Es gibt keinen globalen Zustand: auch die erkannte Feature-Anzahl
ist ein Feld dieser (unveraenderlichen) Konfiguration.
"""

import os
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .exceptions import ConfigError, FeatureCountMismatchError


class BalancingStrategy(Enum):
    """Verfuegbare Strategien zum Klassenausgleich."""
    UNDERSAMPLE = "undersample"
    SMOTE = "smote"
    NONE = "none"


class StatsMethod(Enum):
    """Verfuegbare Verfahren fuer Normalisierungs-Statistiken."""
    ROBUST = "robust"        # Median / MAD
    STANDARD = "standard"    # Mittelwert / Standardabweichung


@dataclass(frozen=True)
class PipelineConfig:
    """
    Parameter der Dataset-Pipeline.

    Attributes:
        timesteps: Laenge T jeder Sequenz
        label_threshold: Mindestrendite fuer Label 1 (BUY)
        label_horizon: Anzahl Tage bis zum Vergleichspreis
        curriculum_level: Anteil der leichtesten Samples (0.1 - 1.0)
        balancing_strategy: undersample, smote oder none
        seed: Seed fuer Shuffle und SMOTE
        step: Schrittweite zwischen zwei Sequenz-Enden
        warmup: Tage vor dem ersten Sequenz-Fenster
        undersample_ratio: Obergrenze relativ zur Mehrheitsklasse
        smote_neighbors: Anzahl Nachbarn fuer SMOTE
        stats_method: robust (Median/MAD) oder standard (Mean/Std)
        feature_selection: Korrelationsbasierte Feature-Auswahl aktivieren
        correlation_threshold: Ab dieser |Korrelation| gilt ein Paar als redundant
        min_selected_features: Mindestanzahl behaltener Features
        feature_count: Erwartete Feature-Anzahl (None = aus Registry uebernehmen)
    """
    # Sequenz-Parameter
    timesteps: int = 35
    step: int = 1
    warmup: int = 34

    # Label-Parameter
    label_threshold: float = 0.001
    label_horizon: int = 7

    # Balancing
    balancing_strategy: BalancingStrategy = BalancingStrategy.UNDERSAMPLE
    undersample_ratio: float = 0.8
    smote_neighbors: int = 5
    seed: int = 42

    # Curriculum
    curriculum_level: float = 1.0

    # Normalisierung / Feature-Auswahl
    stats_method: StatsMethod = StatsMethod.ROBUST
    feature_selection: bool = False
    correlation_threshold: float = 0.85
    min_selected_features: int = 30

    # Schema
    feature_count: Optional[int] = None

    def __post_init__(self):
        # Strings aus .env / JSON in Enums umwandeln
        if isinstance(self.balancing_strategy, str):
            object.__setattr__(self, 'balancing_strategy',
                               _parse_enum(BalancingStrategy, self.balancing_strategy,
                                           'balancing_strategy'))
        if isinstance(self.stats_method, str):
            object.__setattr__(self, 'stats_method',
                               _parse_enum(StatsMethod, self.stats_method, 'stats_method'))

    def validate(self) -> 'PipelineConfig':
        """
        Prueft alle Werte auf Plausibilitaet.

        Returns:
            Self fuer Method Chaining

        Raises:
            ConfigError: Bei ungueltigen Werten
        """
        if self.timesteps < 1:
            raise ConfigError(f"timesteps muss >= 1 sein (ist {self.timesteps})",
                              config_key='timesteps')
        if self.step < 1:
            raise ConfigError(f"step muss >= 1 sein (ist {self.step})", config_key='step')
        if self.warmup < 0:
            raise ConfigError(f"warmup darf nicht negativ sein (ist {self.warmup})",
                              config_key='warmup')
        if self.label_horizon < 1:
            raise ConfigError(f"label_horizon muss >= 1 sein (ist {self.label_horizon})",
                              config_key='label_horizon')
        if not 0.1 <= self.curriculum_level <= 1.0:
            raise ConfigError(
                f"curriculum_level muss in [0.1, 1.0] liegen (ist {self.curriculum_level})",
                config_key='curriculum_level'
            )
        if not 0.0 < self.undersample_ratio <= 1.0:
            raise ConfigError(
                f"undersample_ratio muss in (0, 1] liegen (ist {self.undersample_ratio})",
                config_key='undersample_ratio'
            )
        if self.smote_neighbors < 1:
            raise ConfigError(f"smote_neighbors muss >= 1 sein (ist {self.smote_neighbors})",
                              config_key='smote_neighbors')
        if not 0.0 < self.correlation_threshold <= 1.0:
            raise ConfigError(
                f"correlation_threshold muss in (0, 1] liegen (ist {self.correlation_threshold})",
                config_key='correlation_threshold'
            )
        if self.min_selected_features < 1:
            raise ConfigError("min_selected_features muss >= 1 sein",
                              config_key='min_selected_features')
        if self.feature_count is not None and self.feature_count < 1:
            raise ConfigError("feature_count muss >= 1 sein", config_key='feature_count')
        return self

    def with_feature_count(self, detected: int) -> 'PipelineConfig':
        """
        Uebernimmt die erkannte Feature-Anzahl oder prueft sie gegen den Sollwert.

        Args:
            detected: Feature-Anzahl der Registry

        Returns:
            Konfiguration mit gesetztem feature_count

        Raises:
            FeatureCountMismatchError: Wenn ein abweichender Wert konfiguriert ist
        """
        if self.feature_count is not None and self.feature_count != detected:
            raise FeatureCountMismatchError(expected=self.feature_count, actual=detected)
        return replace(self, feature_count=detected)

    def to_dict(self) -> Dict[str, Any]:
        """Konvertiert zu Dictionary (Enums als Strings)."""
        data = asdict(self)
        data['balancing_strategy'] = self.balancing_strategy.value
        data['stats_method'] = self.stats_method.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PipelineConfig':
        """Erstellt Konfiguration aus Dictionary (unbekannte Schluessel werden ignoriert)."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    @classmethod
    def from_env(cls, prefix: str = 'BTCUSD_DATASET_', dotenv_path: Optional[str] = None
                 ) -> 'PipelineConfig':
        """
        Laedt Ueberschreibungen aus Umgebungsvariablen (und .env Datei).

        Beispiel: BTCUSD_DATASET_TIMESTEPS=50, BTCUSD_DATASET_BALANCING_STRATEGY=smote

        Args:
            prefix: Praefix der Umgebungsvariablen
            dotenv_path: Optionaler Pfad zur .env Datei

        Returns:
            Validierte Konfiguration

        Raises:
            ConfigError: Wenn ein Wert nicht konvertiert werden kann
        """
        load_dotenv(dotenv_path)

        converters = {
            'timesteps': int,
            'step': int,
            'warmup': int,
            'label_threshold': float,
            'label_horizon': int,
            'balancing_strategy': str,
            'undersample_ratio': float,
            'smote_neighbors': int,
            'seed': int,
            'curriculum_level': float,
            'stats_method': str,
            'feature_selection': _parse_bool,
            'correlation_threshold': float,
            'min_selected_features': int,
            'feature_count': int,
        }

        overrides: Dict[str, Any] = {}
        for key, convert in converters.items():
            raw = os.getenv(f'{prefix}{key.upper()}')
            if raw is None or raw == '':
                continue
            try:
                overrides[key] = convert(raw)
            except ValueError as e:
                raise ConfigError(f"Ungueltiger Wert fuer {prefix}{key.upper()}: '{raw}'",
                                  config_key=key, details=str(e)) from e

        return cls(**overrides).validate()


def _parse_enum(enum_cls, value: str, key: str):
    """Wandelt einen String in den passenden Enum-Wert um."""
    try:
        return enum_cls(value.strip().lower())
    except ValueError as e:
        allowed = ', '.join(m.value for m in enum_cls)
        raise ConfigError(f"Unbekannter Wert '{value}' fuer {key} (erlaubt: {allowed})",
                          config_key=key) from e


def _parse_bool(value: str) -> bool:
    """Interpretiert typische Wahrheitswerte aus Umgebungsvariablen."""
    normalized = value.strip().lower()
    if normalized in ('1', 'true', 'yes', 'on', 'ja'):
        return True
    if normalized in ('0', 'false', 'no', 'off', 'nein'):
        return False
    raise ValueError(f"Kein Wahrheitswert: {value}")
