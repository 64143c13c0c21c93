"""Gemeinsame Hilfen fuer die Indikator-Module."""

from typing import Sequence, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]


def as_array(values: ArrayLike) -> np.ndarray:
    """Konvertiert eine Eingabereihe in ein float64-Array (ohne Kopie wenn moeglich)."""
    return np.asarray(values, dtype=np.float64)


def total(values) -> float:
    """Summe von links nach rechts (gleiche Rundung wie eine einfache Schleife)."""
    acc = 0.0
    for v in values:
        acc += float(v)
    return acc


def mean(values) -> float:
    """Arithmetisches Mittel, 0 fuer leere Fenster."""
    n = len(values)
    return total(values) / n if n > 0 else 0.0
