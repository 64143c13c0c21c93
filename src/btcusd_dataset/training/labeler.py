"""
Labeler Modul - Binaere Trainings-Labels aus der Preisentwicklung

Regel (einseitig): Label 1 (BUY), wenn der Preis nach `horizon` Tagen um mehr
als `threshold` gestiegen ist, sonst 0. Label 0 umfasst also sowohl fallende
als auch seitwaerts/leicht steigende Kurse.
"""

from enum import IntEnum
from typing import Iterable

import numpy as np

from ..indicators._common import ArrayLike, as_array


class Label(IntEnum):
    """Klassen der Trainings-Labels."""
    SELL = 0
    BUY = 1


class Labeler:
    """
    Erzeugt BUY/SELL-Labels fuer Tagesindizes.

    Attributes:
        threshold: Mindest-Rendite (als Anteil) fuer BUY
        horizon: Anzahl Tage bis zum Vergleichspreis
    """

    def __init__(self, threshold: float = 0.001, horizon: int = 7):
        self.threshold = threshold
        self.horizon = horizon

    def label(self, prices: ArrayLike, day_index: int) -> int:
        """Label fuer einen Tag mit den Parametern dieses Labelers."""
        return label(prices, day_index, self.threshold, self.horizon)

    def label_many(self, prices: ArrayLike, day_indices: Iterable[int]) -> np.ndarray:
        """
        Labels fuer mehrere Tage.

        Args:
            prices: Schlusskurse
            day_indices: Tagesindizes

        Returns:
            int64-Array mit 0/1
        """
        data = as_array(prices)
        return np.array([label(data, i, self.threshold, self.horizon) for i in day_indices],
                        dtype=np.int64)


def label(prices: ArrayLike, day_index: int, threshold: float = 0.001, horizon: int = 7) -> int:
    """
    Binaeres Label fuer einen Tag.

    Args:
        prices: Schlusskurse
        day_index: Index des Tages
        threshold: Mindest-Rendite fuer BUY (0.001 = 0.1 %)
        horizon: Abstand zum Vergleichspreis in Tagen

    Returns:
        1 wenn (p[i+h] - p[i]) / p[i] > threshold, sonst 0;
        0 ohne Daten am Horizont
    """
    data = as_array(prices)
    if day_index + horizon >= len(data):
        return int(Label.SELL)

    current = float(data[day_index])
    pct_change = (float(data[day_index + horizon]) - current) / current
    return int(Label.BUY) if pct_change > threshold else int(Label.SELL)
