"""
Normalizer Modul - Feature-Statistiken und Normalisierung fuer Sequenzdaten

Robust (Standard): Median und MAD-basierte Standardabweichung (1.4826 * MAD).
Standard: Mittelwert und Standardabweichung mit Untergrenze 0.01 und Obergrenze 10.
Die Statistiken sind 1:1 an die Feature-Reihenfolge der Registry gebunden.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from ..core.config import StatsMethod
from ..core.exceptions import (
    ConfigError,
    DataFormatError,
    FeatureCountMismatchError,
    MissingDataError,
    SaveError,
)
from ..core.logger import get_logger
from ..data.registry import FeatureRegistry
from .dataset import Dataset

MAD_TO_STD = 1.4826
MIN_STD = 0.01
MAX_STD = 10.0


def _frozen(values, dtype=np.float64) -> np.ndarray:
    result = np.array(values, dtype=dtype, copy=True)
    result.flags.writeable = False
    return result


@dataclass(frozen=True, eq=False)
class NormalizationStats:
    """
    Normalisierungs-Statistiken pro Feature.

    Attributes:
        location: Median oder Mittelwert je Feature (Laenge F)
        scale: Skalierung je Feature (Laenge F, nie 0)
        retained_indices: Beibehaltene Feature-Indizes (aufsteigend)
        method: Verwendetes Verfahren
        feature_names: Feature-Namen in Vektor-Reihenfolge
        registry_fingerprint: Fingerprint der Registry beim Erzeugen
    """
    location: np.ndarray
    scale: np.ndarray
    retained_indices: Tuple[int, ...]
    method: StatsMethod = StatsMethod.ROBUST
    feature_names: Tuple[str, ...] = ()
    registry_fingerprint: Optional[str] = None

    def __post_init__(self):
        location = _frozen(self.location)
        scale = _frozen(self.scale)
        if location.shape != scale.shape or location.ndim != 1:
            raise DataFormatError("location und scale muessen gleich lange Vektoren sein",
                                  expected_format=f"{location.shape}", actual_format=f"{scale.shape}")
        retained = tuple(int(i) for i in self.retained_indices)
        if any(i < 0 or i >= len(location) for i in retained):
            raise DataFormatError(f"retained_indices ausserhalb [0, {len(location) - 1}]")
        names = tuple(self.feature_names)
        if names and len(names) != len(location):
            raise DataFormatError(f"{len(names)} Feature-Namen fuer {len(location)} Features")

        object.__setattr__(self, 'location', location)
        object.__setattr__(self, 'scale', scale)
        object.__setattr__(self, 'retained_indices', retained)
        object.__setattr__(self, 'method', StatsMethod(self.method))
        object.__setattr__(self, 'feature_names', names)

    @property
    def feature_count(self) -> int:
        return len(self.location)

    @property
    def retained_names(self) -> List[str]:
        if not self.feature_names:
            return []
        return [self.feature_names[i] for i in self.retained_indices]

    def apply(self, sequences: np.ndarray) -> np.ndarray:
        """
        Normalisiert Sequenzen und waehlt die beibehaltenen Features aus.

        Args:
            sequences: Array (..., F)

        Returns:
            Array (..., len(retained_indices))
        """
        data = np.asarray(sequences, dtype=np.float64)
        if data.shape[-1] != self.feature_count:
            raise FeatureCountMismatchError(expected=self.feature_count, actual=data.shape[-1])
        normalized = (data - self.location) / self.scale
        return normalized[..., list(self.retained_indices)]

    def validate_against(self, registry: FeatureRegistry):
        """
        Prueft, ob die Stats zur Registry passen.

        Raises:
            FeatureCountMismatchError: Bei abweichender Feature-Anzahl
            ConfigError: Bei gleicher Anzahl aber anderer Reihenfolge
        """
        registry.validate_feature_count(self.feature_count)
        if self.registry_fingerprint and self.registry_fingerprint != registry.fingerprint():
            raise ConfigError("Feature-Reihenfolge der Stats passt nicht zur Registry",
                              config_key='registry_fingerprint')

    # -------------------------------------------------------------------------
    # Serialisierung
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'method': self.method.value,
            'location': self.location.tolist(),
            'scale': self.scale.tolist(),
            'retained_indices': list(self.retained_indices),
            'feature_names': list(self.feature_names),
            'registry_fingerprint': self.registry_fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NormalizationStats':
        """
        Erstellt Stats aus einem Dictionary.

        Raises:
            DataFormatError: Bei fehlenden Schluesseln oder ungueltigen Werten
        """
        missing = [key for key in ('location', 'scale') if key not in data]
        if missing:
            raise DataFormatError(f"Fehlende Schluessel: {', '.join(missing)}",
                                  expected_format='location, scale, retained_indices')
        try:
            location = np.array(data['location'], dtype=np.float64)
            scale = np.array(data['scale'], dtype=np.float64)
            method = StatsMethod(data.get('method', StatsMethod.ROBUST.value))
        except (TypeError, ValueError) as e:
            raise DataFormatError(f"Ungueltige Stats-Werte: {e}")

        return cls(
            location=location,
            scale=scale,
            retained_indices=tuple(data.get('retained_indices', range(len(location)))),
            method=method,
            feature_names=tuple(data.get('feature_names', ())),
            registry_fingerprint=data.get('registry_fingerprint'),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> 'NormalizationStats':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DataFormatError(f"Ungueltiges JSON: {e}", expected_format='json')
        if not isinstance(data, dict):
            raise DataFormatError("Stats muessen ein JSON-Objekt sein",
                                  expected_format='object', actual_format=type(data).__name__)
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> Path:
        """
        Speichert die Stats als JSON.

        Raises:
            SaveError: Wenn die Datei nicht geschrieben werden kann
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise SaveError(f"Stats speichern fehlgeschlagen: {e}", operation='save_stats')
        get_logger().debug(f"[Stats] Gespeichert: {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'NormalizationStats':
        """
        Laedt Stats aus einer JSON-Datei.

        Raises:
            MissingDataError: Wenn die Datei nicht existiert
            DataFormatError: Bei ungueltigem Inhalt
        """
        path = Path(path)
        if not path.exists():
            raise MissingDataError(f"Stats-Datei nicht gefunden: {path}", missing_items=[str(path)])
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_json(f.read())


class FeatureStatsComputer:
    """
    Berechnet Normalisierungs-Statistiken ueber alle Zeitschritte aller Sequenzen.

    Attributes:
        method: ROBUST (Median/MAD) oder STANDARD (Mittelwert/Std)
        registry: Optionale Registry (Namen, Fingerprint, Wichtigkeit)
        correlation_threshold: Schwelle |r| fuer redundante Feature-Paare
        min_selected_features: Untergrenze fuer die Feature-Auswahl
    """

    def __init__(self, method: Union[StatsMethod, str] = StatsMethod.ROBUST,
                 registry: Optional[FeatureRegistry] = None,
                 correlation_threshold: float = 0.85,
                 min_selected_features: int = 30):
        self.method = StatsMethod(method)
        self.registry = registry
        self.correlation_threshold = correlation_threshold
        self.min_selected_features = min_selected_features
        self.logger = get_logger()

    def _flatten(self, data: Union[Dataset, np.ndarray]) -> np.ndarray:
        sequences = data.sequences if isinstance(data, Dataset) else np.asarray(data, dtype=np.float64)
        if sequences.ndim == 2:
            return sequences
        if sequences.ndim != 3:
            raise DataFormatError("Erwartet (N, T, F) oder (N, F)",
                                  expected_format='(N, T, F)', actual_format=str(sequences.shape))
        return sequences.reshape(-1, sequences.shape[-1])

    def _robust(self, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        location = np.median(values, axis=0)
        mad = np.median(np.abs(values - location), axis=0)
        scale = np.where(mad == 0, 1.0, MAD_TO_STD * mad)
        return location, scale

    def _standard(self, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        location = np.mean(values, axis=0)
        std = np.std(values, axis=0)
        scale = np.minimum(np.where(std == 0, MIN_STD, std), MAX_STD)
        return location, scale

    def compute(self, data: Union[Dataset, np.ndarray],
                select_features: bool = False) -> NormalizationStats:
        """
        Berechnet die Statistiken.

        Args:
            data: Dataset oder Array (N, T, F)
            select_features: Korrelationsbasierte Feature-Auswahl durchfuehren

        Returns:
            NormalizationStats (retained_indices = alle Indizes ohne Auswahl)

        Raises:
            MissingDataError: Wenn keine Daten vorhanden sind
        """
        values = self._flatten(data)
        if values.shape[0] == 0:
            raise MissingDataError("Keine Sequenzen fuer Feature-Statistiken")

        if self.method == StatsMethod.ROBUST:
            location, scale = self._robust(values)
        else:
            location, scale = self._standard(values)

        feature_count = values.shape[1]
        if select_features:
            retained = self.select_features(values, location, scale)
        else:
            retained = list(range(feature_count))

        names: Tuple[str, ...] = ()
        fingerprint = None
        if self.registry is not None and self.registry.feature_count == feature_count:
            names = tuple(self.registry.names)
            fingerprint = self.registry.fingerprint()

        self.logger.debug(f"[Stats] {self.method.value}: {feature_count} Features, "
                          f"{len(retained)} beibehalten")
        return NormalizationStats(location, scale, tuple(retained), self.method, names, fingerprint)

    def _importance(self, feature_count: int) -> np.ndarray:
        if self.registry is not None and self.registry.feature_count == feature_count:
            return np.array(self.registry.importance_weights())
        return np.ones(feature_count, dtype=np.int64)

    def select_features(self, values: np.ndarray, location: np.ndarray,
                        scale: np.ndarray) -> List[int]:
        """
        Entfernt redundante Features.

        Features mit nicht-endlichen Stats fallen zuerst weg. Danach wird von
        jedem Paar mit |r| > correlation_threshold (staerkste Paare zuerst) das
        weniger wichtige Feature entfernt, bei Gleichstand das mit hoeherem
        Index. Es bleiben mindestens min(min_selected_features, F) Features.

        Returns:
            Aufsteigend sortierte beibehaltene Indizes
        """
        feature_count = values.shape[1]
        floor = min(self.min_selected_features, feature_count)
        retained = [i for i in range(feature_count)
                    if np.isfinite(location[i]) and np.isfinite(scale[i])]

        with np.errstate(divide='ignore', invalid='ignore'):
            corr = np.corrcoef(values, rowvar=False)
        corr = np.nan_to_num(np.abs(np.atleast_2d(corr)), nan=0.0)

        importance = self._importance(feature_count)
        pairs = [(corr[i, j], i, j)
                 for a, i in enumerate(retained) for j in retained[a + 1:]
                 if corr[i, j] > self.correlation_threshold]
        pairs.sort(key=lambda p: (-p[0], p[1], p[2]))

        kept = set(retained)
        dropped: List[int] = []
        for _, i, j in pairs:
            if len(kept) <= floor:
                break
            if i not in kept or j not in kept:
                continue
            drop = i if importance[i] < importance[j] else j
            kept.discard(drop)
            dropped.append(drop)

        if dropped:
            self.logger.debug(f"[Stats] {len(dropped)} redundante Features entfernt")
        return sorted(kept)
