"""
Dataset Modul - Unveraenderliche Sammlung von (Sequenz, Label)-Samples
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence

import numpy as np

from ..core.exceptions import DataValidationError
from ..utils.helpers import format_percentage


class Sample(NamedTuple):
    """Ein Trainings-Sample: Sequenz (T, F) und Label 0/1."""
    sequence: np.ndarray
    label: int


def _frozen(array: np.ndarray, dtype) -> np.ndarray:
    result = np.array(array, dtype=dtype, copy=True)
    result.flags.writeable = False
    return result


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Geordnete Samples mit optionalem Schwierigkeitsgrad pro Sample.

    Attributes:
        sequences: Array (N, T, F)
        labels: Array (N,) mit 0/1
        end_indices: Tagesindex des letzten Zeitschritts je Sample (-1 fuer synthetische)
        difficulty: Optionaler Schwierigkeitsgrad je Sample
    """
    sequences: np.ndarray
    labels: np.ndarray
    end_indices: Optional[np.ndarray] = None
    difficulty: Optional[np.ndarray] = None

    def __post_init__(self):
        sequences = _frozen(self.sequences, np.float64)
        labels = _frozen(self.labels, np.int64)

        if sequences.ndim != 3:
            raise DataValidationError(
                f"Sequenzen muessen 3-dimensional sein (N, T, F), erhalten: {sequences.shape}",
                invalid_fields=['sequences'])
        n = len(sequences)
        if labels.shape != (n,):
            raise DataValidationError(f"Labels {labels.shape} passen nicht zu {n} Sequenzen",
                                      invalid_fields=['labels'])

        object.__setattr__(self, 'sequences', sequences)
        object.__setattr__(self, 'labels', labels)
        for name in ('end_indices', 'difficulty'):
            values = getattr(self, name)
            if values is None:
                continue
            dtype = np.int64 if name == 'end_indices' else np.float64
            values = _frozen(values, dtype)
            if values.shape != (n,):
                raise DataValidationError(f"'{name}' hat Laenge {len(values)}, erwartet {n}",
                                          invalid_fields=[name])
            object.__setattr__(self, name, values)

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self) -> Iterator[Sample]:
        for sequence, label in zip(self.sequences, self.labels):
            yield Sample(sequence, int(label))

    def __getitem__(self, idx: int) -> Sample:
        return Sample(self.sequences[idx], int(self.labels[idx]))

    @property
    def timesteps(self) -> int:
        return self.sequences.shape[1]

    @property
    def feature_count(self) -> int:
        return self.sequences.shape[2]

    def class_counts(self) -> Dict[int, int]:
        """Anzahl Samples je Klasse {0: n_sell, 1: n_buy}."""
        return {0: int(np.sum(self.labels == 0)), 1: int(np.sum(self.labels == 1))}

    def class_distribution(self) -> str:
        """Kurzbeschreibung der Klassenverteilung fuer Log-Meldungen."""
        counts = self.class_counts()
        n = len(self)
        if n == 0:
            return "leer"
        buy = format_percentage(counts[1] / n * 100, 1, include_sign=False)
        sell = format_percentage(counts[0] / n * 100, 1, include_sign=False)
        return f"BUY {counts[1]} ({buy}), SELL {counts[0]} ({sell})"

    def subset(self, indices: Sequence[int]) -> 'Dataset':
        """Neues Dataset mit den Samples an `indices` (in dieser Reihenfolge)."""
        idx = np.asarray(indices, dtype=np.int64)
        return Dataset(
            self.sequences[idx],
            self.labels[idx],
            end_indices=None if self.end_indices is None else self.end_indices[idx],
            difficulty=None if self.difficulty is None else self.difficulty[idx],
        )

    def with_difficulty(self, difficulty: np.ndarray) -> 'Dataset':
        """Kopie mit gesetztem Schwierigkeitsgrad."""
        return Dataset(self.sequences, self.labels, self.end_indices, difficulty)

    def to_records(self) -> List[dict]:
        """Export als Liste von {'sequence': [[...]], 'label': 0|1}."""
        return [{'sequence': s.sequence.tolist(), 'label': s.label} for s in self]
