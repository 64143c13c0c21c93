"""
Curriculum Modul - Auswahl der leichtesten Samples fuer Curriculum Learning

Der Schwierigkeitsgrad wird explizit als Parameter uebergeben; der Zeitplan,
der ihn ueber die Epochen erhoeht, liegt beim Trainings-Loop.
"""

import numpy as np

from ..core.logger import get_logger
from ..utils.helpers import clamp, format_percentage
from .dataset import Dataset

MIN_LEVEL = 0.1
MAX_LEVEL = 1.0
MIN_SAMPLES = 50
REVERSAL_WEIGHT = 10.0


def difficulty(sequence: np.ndarray, channel: int = 0) -> float:
    """
    Schwierigkeit einer Sequenz anhand des preisaehnlichen Kanals.

    score = (sum |delta| + 10 * Umkehrungen / (T - 2)) / T

    Args:
        sequence: Array (T, F)
        channel: Feature-Index des preisaehnlichen Kanals

    Returns:
        Schwierigkeitswert (groesser = schwieriger)
    """
    values = np.asarray(sequence, dtype=np.float64)[:, channel]
    length = len(values)
    if length == 0:
        return 0.0

    deltas = np.diff(values)
    volatility_score = float(np.sum(np.abs(deltas)))

    trend_score = 0.0
    if length > 2:
        reversals = np.sum(((deltas[:-1] > 0) & (deltas[1:] < 0)) |
                           ((deltas[:-1] < 0) & (deltas[1:] > 0)))
        trend_score = float(reversals) / (length - 2)

    return (volatility_score + trend_score * REVERSAL_WEIGHT) / length


class CurriculumFilter:
    """
    Filtert ein Dataset auf die leichtesten Samples.

    Attributes:
        channel: Feature-Index fuer die Schwierigkeitsberechnung
    """

    def __init__(self, channel: int = 0):
        self.channel = channel
        self.logger = get_logger()

    def scores(self, dataset: Dataset) -> np.ndarray:
        """Schwierigkeit aller Samples in Dataset-Reihenfolge."""
        return np.array([difficulty(seq, self.channel) for seq in dataset.sequences],
                        dtype=np.float64)

    def filter(self, dataset: Dataset, level: float = 1.0) -> Dataset:
        """
        Behaelt die leichtesten max(50, floor(N * level)) Samples.

        Args:
            dataset: Eingabe-Dataset
            level: Schwierigkeitsgrad, begrenzt auf [0.1, 1.0]

        Returns:
            Das Eingabe-Dataset bei level >= 1.0, sonst ein neues Dataset
            aufsteigend nach Schwierigkeit sortiert
        """
        level = clamp(level, MIN_LEVEL, MAX_LEVEL)
        if level >= MAX_LEVEL:
            return dataset

        scores = self.scores(dataset)
        keep = max(MIN_SAMPLES, int(np.floor(len(dataset) * level)))
        order = np.argsort(scores, kind='stable')[:keep]

        filtered = dataset.subset(order).with_difficulty(scores[order])
        self.logger.info(f"[Curriculum] {len(filtered)}/{len(dataset)} Samples ausgewaehlt "
                         f"({format_percentage(level * 100, 1, include_sign=False)} Schwierigkeit)")
        return filtered
