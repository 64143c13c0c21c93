"""
Sequenz Modul - Erstellt Sequenzen aus Feature-Vektoren fuer LSTM/Transformer Training
"""

from typing import Dict, List, Optional, Tuple

import numpy as np
import torch
from torch.utils.data import Dataset as TorchDataset

from ..core.logger import get_logger
from ..data import FeatureVectorAssembler, MarketSeries
from .dataset import Dataset

VectorCache = Dict[int, Optional[np.ndarray]]


def compute_class_weights(labels: np.ndarray, num_classes: int = 2) -> torch.Tensor:
    """
    Berechnet Class Weights fuer unbalancierte Daten.

    Verwendung: criterion = nn.CrossEntropyLoss(weight=class_weights)

    Args:
        labels: Label-Array
        num_classes: Anzahl Klassen

    Returns:
        Tensor mit Gewichten pro Klasse (Durchschnitt = 1)
    """
    labels = np.asarray(labels)
    if len(labels) == 0:
        return torch.ones(num_classes)

    counts = np.array([np.sum(labels == i) for i in range(num_classes)], dtype=np.float64)

    # Inverse Frequency: seltene Klassen bekommen hoeheres Gewicht
    weights = counts.sum() / (num_classes * counts + 1e-6)
    weights = weights / weights.mean()

    return torch.tensor(weights, dtype=torch.float32)


class SequenceBuilder:
    """
    Baut Sequenzen aus genau T Feature-Vektoren, die an einem Tag enden.

    Enthaelt ein Tag im Fenster einen ungueltigen Vektor, wird die gesamte
    Sequenz verworfen. Am Anfang der Zeitreihe wird mit dem fruehesten
    gueltigen Vektor nach vorne aufgefuellt.

    Attributes:
        assembler: Liefert die Feature-Vektoren
        timesteps: Standard-Sequenzlaenge T
    """

    def __init__(self, assembler: Optional[FeatureVectorAssembler] = None, timesteps: int = 35):
        """
        Initialisiert den Sequenz-Builder.

        Args:
            assembler: Feature-Assembler (default: Standard-Registry)
            timesteps: Sequenzlaenge T
        """
        self.assembler = assembler or FeatureVectorAssembler()
        self.timesteps = timesteps
        self.logger = get_logger()

    @property
    def feature_count(self) -> int:
        return self.assembler.feature_count

    def _vector(self, series: MarketSeries, day_index: int,
                cache: Optional[VectorCache]) -> Optional[np.ndarray]:
        if cache is None:
            return self.assembler.assemble(series, day_index)
        if day_index not in cache:
            cache[day_index] = self.assembler.assemble(series, day_index)
        return cache[day_index]

    def build_sequence(self, series: MarketSeries, end_index: int,
                       timesteps: Optional[int] = None,
                       cache: Optional[VectorCache] = None) -> Optional[np.ndarray]:
        """
        Baut die Sequenz, die bei end_index endet.

        Args:
            series: Markt-Zeitreihe
            end_index: Letzter Tag der Sequenz
            timesteps: Sequenzlaenge (default: self.timesteps)
            cache: Optionaler Vektor-Cache {day_index: vector}

        Returns:
            Array (T, F) oder None wenn ein Vektor im Fenster ungueltig ist

        Raises:
            IndexError: Wenn end_index ausserhalb der Zeitreihe liegt
        """
        timesteps = timesteps or self.timesteps
        if not 0 <= end_index < len(series):
            raise IndexError(f"end_index {end_index} ausserhalb [0, {len(series) - 1}]")

        vectors: List[np.ndarray] = []
        for day_index in range(max(0, end_index - timesteps + 1), end_index + 1):
            vector = self._vector(series, day_index, cache)
            if vector is None:
                return None
            vectors.append(vector)

        # Auffuellen nach vorne mit dem fruehesten Vektor
        if len(vectors) < timesteps:
            vectors = [vectors[0]] * (timesteps - len(vectors)) + vectors

        return np.stack(vectors[-timesteps:])

    def build_batch(self, series: MarketSeries, start: int, end: int, step: int = 1,
                    timesteps: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Baut Sequenzen fuer alle Endtage in range(start, end, step).

        Vektoren ueberlappender Fenster werden nur einmal berechnet.

        Args:
            series: Markt-Zeitreihe
            start: Erster Endtag
            end: Endtag (exklusiv)
            step: Schrittweite
            timesteps: Sequenzlaenge (default: self.timesteps)

        Returns:
            Tuple aus (sequences (N, T, F), end_indices (N,))
        """
        timesteps = timesteps or self.timesteps
        end = min(end, len(series))
        cache: VectorCache = {}

        sequences: List[np.ndarray] = []
        end_indices: List[int] = []
        rejected = 0
        for end_index in range(max(0, start), end, step):
            sequence = self.build_sequence(series, end_index, timesteps, cache)
            if sequence is None or sequence.shape[0] != timesteps:
                rejected += 1
                self.logger.trace(f"[SequenceBuilder] Sequenz bis Tag {end_index} verworfen")
                continue
            sequences.append(sequence)
            end_indices.append(end_index)

        if rejected:
            self.logger.debug(f"[SequenceBuilder] {rejected} Sequenzen verworfen, "
                              f"{len(sequences)} gueltig")

        if not sequences:
            return (np.empty((0, timesteps, self.feature_count)),
                    np.empty(0, dtype=np.int64))
        return np.stack(sequences), np.array(end_indices, dtype=np.int64)


class SequenceDataset(TorchDataset):
    """
    PyTorch Dataset fuer Sequenzdaten.

    Attributes:
        X: Feature-Sequenzen [n_samples, seq_length, n_features]
        y: Labels [n_samples]
    """

    def __init__(self, X: np.ndarray, y: np.ndarray):
        self.X = torch.from_numpy(np.ascontiguousarray(X, dtype=np.float32))
        self.y = torch.from_numpy(np.asarray(y, dtype=np.int64).copy())

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> 'SequenceDataset':
        """Uebernimmt Sequenzen und Labels eines Datasets."""
        return cls(dataset.sequences, dataset.labels)

    def __len__(self) -> int:
        return len(self.X)

    def __getitem__(self, idx: int) -> Tuple[torch.Tensor, torch.Tensor]:
        return self.X[idx], self.y[idx]

    @property
    def input_shape(self) -> Tuple[int, int]:
        """Shape eines einzelnen Inputs (seq_length, n_features)."""
        return tuple(self.X.shape[1:])

    @property
    def n_features(self) -> int:
        return self.X.shape[2]

    @property
    def seq_length(self) -> int:
        return self.X.shape[1]
