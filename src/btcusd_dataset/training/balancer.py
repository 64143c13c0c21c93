"""
Balancer Modul - Klassen-Balancierung durch Undersampling oder SMOTE

Beide Verfahren liefern ein neues Dataset; das Eingabe-Dataset bleibt
unveraendert. Fehlt eine Klasse vollstaendig, wird nicht balanciert.
"""

from typing import Optional, Tuple, Union

import numpy as np
from imblearn.over_sampling import SMOTE

from ..core.config import BalancingStrategy
from ..core.logger import get_logger
from .dataset import Dataset


class DatasetBalancer:
    """
    Balanciert BUY/SELL-Samples.

    Attributes:
        seed: Seed fuer Shuffle und Interpolation
        undersample_ratio: Anteil der Mehrheitsklasse als Obergrenze beim Undersampling
        smote_neighbors: Anzahl Nachbarn fuer SMOTE
    """

    def __init__(self, seed: int = 42, undersample_ratio: float = 0.8, smote_neighbors: int = 5):
        self.seed = seed
        self.undersample_ratio = undersample_ratio
        self.smote_neighbors = smote_neighbors
        self.logger = get_logger()

    def _split_classes(self, dataset: Dataset) -> Tuple[np.ndarray, np.ndarray]:
        labels = dataset.labels
        return np.flatnonzero(labels == 1), np.flatnonzero(labels == 0)

    def balance(self, dataset: Dataset,
                strategy: Union[BalancingStrategy, str] = BalancingStrategy.UNDERSAMPLE) -> Dataset:
        """
        Balanciert nach der gewaehlten Strategie.

        Args:
            dataset: Eingabe-Dataset
            strategy: undersample, smote oder none

        Returns:
            Balanciertes Dataset (oder das Eingabe-Dataset bei 'none')
        """
        strategy = BalancingStrategy(strategy)
        if strategy == BalancingStrategy.UNDERSAMPLE:
            return self.undersample(dataset)
        if strategy == BalancingStrategy.SMOTE:
            return self.oversample_smote(dataset)
        return dataset

    def undersample(self, dataset: Dataset) -> Dataset:
        """
        Reduziert beide Klassen auf dieselbe Anzahl.

        target = min(min(n_buy, n_sell), floor(max(n_buy, n_sell) * ratio));
        genommen werden die ersten `target` Samples jeder Klasse (BUY zuerst),
        danach wird mit dem Seed gemischt.

        Returns:
            Neues Dataset mit 2 * target Samples oder das Eingabe-Dataset,
            wenn eine Klasse leer ist
        """
        buy_idx, sell_idx = self._split_classes(dataset)
        if len(buy_idx) == 0 or len(sell_idx) == 0:
            self.logger.warning(f"[Balancer] Eine Klasse ist leer ({dataset.class_distribution()}), "
                                f"Balancierung uebersprungen")
            return dataset

        smaller = min(len(buy_idx), len(sell_idx))
        larger = max(len(buy_idx), len(sell_idx))
        target = min(smaller, int(np.floor(larger * self.undersample_ratio)))

        selected = np.concatenate([buy_idx[:target], sell_idx[:target]])
        rng = np.random.RandomState(self.seed)
        selected = selected[rng.permutation(len(selected))]

        balanced = dataset.subset(selected)
        self.logger.info(f"[Balancer] Undersampling: {len(dataset)} -> {len(balanced)} Samples "
                         f"({balanced.class_distribution()})")
        return balanced

    def oversample_smote(self, dataset: Dataset) -> Dataset:
        """
        Erzeugt synthetische Minderheits-Sequenzen bis zum Gleichstand.

        Die Sequenzen werden zu (N, T * F) flachgelegt und mit imblearn SMOTE
        aufgefuellt. Jedes synthetische Sample ist damit eine Interpolation
        new = a + lambda * (b - a) zwischen einem Minderheits-Sample und einem
        seiner k naechsten Minderheits-Nachbarn, mit einem lambda pro Sequenz.

        Returns:
            Neues Dataset: Mehrheit + Minderheit + synthetische Samples (gemischt)
        """
        buy_idx, sell_idx = self._split_classes(dataset)
        if len(buy_idx) == 0 or len(sell_idx) == 0:
            self.logger.warning(f"[Balancer] Eine Klasse ist leer ({dataset.class_distribution()}), "
                                f"SMOTE uebersprungen")
            return dataset
        if len(buy_idx) == len(sell_idx):
            return dataset

        if len(buy_idx) < len(sell_idx):
            minority_idx, majority_idx, minority_label = buy_idx, sell_idx, 1
        else:
            minority_idx, majority_idx, minority_label = sell_idx, buy_idx, 0

        kept = np.concatenate([majority_idx, minority_idx])
        n_kept = len(kept)
        n_synthetic = len(majority_idx) - len(minority_idx)
        sample_shape = dataset.sequences.shape[1:]

        if len(minority_idx) == 1:
            # SMOTE braucht mindestens einen Nachbarn
            sequences = np.concatenate([dataset.sequences[kept],
                                        np.repeat(dataset.sequences[minority_idx], n_synthetic, axis=0)])
            labels = np.concatenate([dataset.labels[kept],
                                     np.full(n_synthetic, minority_label, dtype=np.int64)])
        else:
            k = min(self.smote_neighbors, len(minority_idx) - 1)
            sm = SMOTE(k_neighbors=k, random_state=self.seed)
            flat = dataset.sequences[kept].reshape(n_kept, -1)
            X_res, y_res = sm.fit_resample(flat, dataset.labels[kept])
            sequences = X_res.reshape((len(X_res),) + sample_shape)
            labels = np.asarray(y_res, dtype=np.int64)

        end_indices: Optional[np.ndarray] = None
        if dataset.end_indices is not None:
            end_indices = np.concatenate([dataset.end_indices[kept],
                                          np.full(len(labels) - n_kept, -1, dtype=np.int64)])

        rng = np.random.RandomState(self.seed)
        order = rng.permutation(len(labels))
        balanced = Dataset(sequences[order], labels[order],
                           end_indices=None if end_indices is None else end_indices[order])
        self.logger.info(f"[Balancer] SMOTE: {len(labels) - n_kept} synthetische Samples erzeugt "
                         f"({balanced.class_distribution()})")
        return balanced
