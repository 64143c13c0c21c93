"""
Feature Processor Modul - Setzt Feature-Vektoren aus der Registry zusammen
"""

from typing import Optional, Sequence

import numpy as np

from ..core.logger import get_logger
from .registry import FEATURE_REGISTRY, FeatureRegistry
from .series import MarketSeries
from .window import FeatureWindow


class FeatureVectorAssembler:
    """
    Berechnet den Feature-Vektor eines Tages.

    Jeder Descriptor der Registry wird in Registrierungsreihenfolge ueber
    ein FeatureWindow bis einschliesslich day_index ausgewertet. Vektoren
    mit NaN/Inf werden verworfen (None); der Aufrufer ueberspringt den Tag.

    Attributes:
        registry: Registry mit Reihenfolge und Berechnungsfunktionen
    """

    def __init__(self, registry: Optional[FeatureRegistry] = None):
        """
        Initialisiert den Assembler.

        Args:
            registry: Feature-Registry (default: FEATURE_REGISTRY)
        """
        self.registry = registry or FEATURE_REGISTRY
        self.logger = get_logger()

    @property
    def feature_count(self) -> int:
        return self.registry.feature_count

    def assemble(self, series: MarketSeries, day_index: int) -> Optional[np.ndarray]:
        """
        Berechnet den Feature-Vektor fuer einen Tag.

        Args:
            series: Validierte Markt-Zeitreihe
            day_index: Index des Tages (0 .. len(series) - 1)

        Returns:
            float64-Array der Laenge feature_count oder None bei ungueltigen Werten

        Raises:
            IndexError: Wenn day_index ausserhalb der Zeitreihe liegt
        """
        window = FeatureWindow(series, day_index)
        vector = np.empty(self.registry.feature_count, dtype=np.float64)

        for i, descriptor in enumerate(self.registry):
            try:
                vector[i] = descriptor.compute(window)
            except (ZeroDivisionError, OverflowError, ValueError, IndexError) as e:
                self.logger.trace(f"[Assembler] Tag {day_index}: '{descriptor.name}' "
                                  f"fehlgeschlagen ({type(e).__name__})")
                return None

        if not np.all(np.isfinite(vector)):
            invalid = [self.registry[i].name for i in np.flatnonzero(~np.isfinite(vector))]
            self.logger.trace(f"[Assembler] Tag {day_index} verworfen, ungueltig: {', '.join(invalid)}")
            return None

        return vector

    def assemble_matrix(self, series: MarketSeries,
                        day_indices: Optional[Sequence[int]] = None) -> np.ndarray:
        """
        Feature-Matrix mit einer Zeile pro Tag.

        Verworfene Tage erscheinen als NaN-Zeile, damit Zeilenindex und
        Tagesindex uebereinstimmen.

        Args:
            series: Markt-Zeitreihe
            day_indices: Tage (default: alle)

        Returns:
            Array der Form (len(day_indices), feature_count)
        """
        if day_indices is None:
            day_indices = range(len(series))
        day_indices = list(day_indices)

        matrix = np.full((len(day_indices), self.feature_count), np.nan)
        for row, day_index in enumerate(day_indices):
            vector = self.assemble(series, day_index)
            if vector is not None:
                matrix[row] = vector

        rejected = int(np.isnan(matrix).any(axis=1).sum())
        if rejected:
            self.logger.debug(f"[Assembler] {rejected}/{len(day_indices)} Tage verworfen")
        return matrix
