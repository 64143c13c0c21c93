"""
Market Series Modul - Unveraenderliche Preis- und Volumenreihen

Eine MarketSeries wird einmal vom (externen) Daten-Fetch erzeugt und ist
fuer die gesamte Pipeline schreibgeschuetzt. High/Low sind optional;
fehlen sie, verwenden alle Indikatoren den Schlusskurs als Naeherung.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from ..core.exceptions import DataValidationError, MissingDataError
from ..utils.helpers import validate_dataframe


def _readonly(values, name: str) -> np.ndarray:
    try:
        array = np.array(values, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as e:
        raise DataValidationError(f"'{name}' ist nicht numerisch", invalid_fields=[name],
                                  details=str(e)) from e
    if array.ndim != 1:
        raise DataValidationError(f"'{name}' muss eindimensional sein (ndim={array.ndim})",
                                  invalid_fields=[name])
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class MarketSeries:
    """
    Chronologische Preis-/Volumenreihe eines Assets.

    Attributes:
        prices: Schlusskurse (float64, schreibgeschuetzt)
        volumes: Handelsvolumen, gleiche Laenge wie prices
        highs: Optionale Tageshochs
        lows: Optionale Tagestiefs
    """
    prices: np.ndarray
    volumes: np.ndarray
    highs: Optional[np.ndarray] = None
    lows: Optional[np.ndarray] = None

    def __post_init__(self):
        object.__setattr__(self, 'prices', _readonly(self.prices, 'prices'))
        object.__setattr__(self, 'volumes', _readonly(self.volumes, 'volumes'))
        if self.highs is not None:
            object.__setattr__(self, 'highs', _readonly(self.highs, 'highs'))
        if self.lows is not None:
            object.__setattr__(self, 'lows', _readonly(self.lows, 'lows'))
        self._validate()

    def _validate(self):
        """
        Prueft Laengen und Wertebereiche.

        Raises:
            MissingDataError: Bei leerer Preisreihe
            DataValidationError: Bei inkonsistenten oder ungueltigen Werten
        """
        if len(self.prices) == 0:
            raise MissingDataError("Preisreihe ist leer", missing_items=['prices'])

        errors: List[str] = []
        if len(self.volumes) != len(self.prices):
            errors.append(f"volumes ({len(self.volumes)} != {len(self.prices)})")
        if (self.highs is None) != (self.lows is None):
            errors.append("highs/lows nur gemeinsam angeben")
        for name in ('highs', 'lows'):
            values = getattr(self, name)
            if values is not None and len(values) != len(self.prices):
                errors.append(f"{name} ({len(values)} != {len(self.prices)})")
        if errors:
            raise DataValidationError("Reihen haben unterschiedliche Laengen",
                                      invalid_fields=errors)

        if not np.all(np.isfinite(self.prices)):
            raise DataValidationError("Preisreihe enthaelt NaN/Inf", invalid_fields=['prices'])
        if np.any(self.prices <= 0):
            raise DataValidationError("Preise muessen positiv sein", invalid_fields=['prices'])
        if not np.all(np.isfinite(self.volumes)) or np.any(self.volumes < 0):
            raise DataValidationError("Volumen muss endlich und nicht negativ sein",
                                      invalid_fields=['volumes'])

        if self.highs is not None:
            invalid = [name for name in ('highs', 'lows')
                       if not np.all(np.isfinite(getattr(self, name)))
                       or np.any(getattr(self, name) <= 0)]
            if invalid:
                raise DataValidationError("Hochs/Tiefs muessen endlich und positiv sein",
                                          invalid_fields=invalid)
            if np.any(self.highs < self.lows):
                raise DataValidationError("Hoch liegt unter Tief",
                                          invalid_fields=['highs', 'lows'])

    def __len__(self) -> int:
        return len(self.prices)

    @property
    def high_series(self) -> np.ndarray:
        """Hochs oder (ohne High-Daten) die Schlusskurse."""
        return self.highs if self.highs is not None else self.prices

    @property
    def low_series(self) -> np.ndarray:
        """Tiefs oder (ohne Low-Daten) die Schlusskurse."""
        return self.lows if self.lows is not None else self.prices

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, price_column: str = 'Close',
                       volume_column: str = 'Volume', use_high_low: bool = False
                       ) -> 'MarketSeries':
        """
        Erstellt eine MarketSeries aus einem OHLCV-DataFrame.

        Args:
            df: DataFrame mit mindestens Close- und Volume-Spalte
            price_column: Name der Preisspalte
            volume_column: Name der Volumenspalte
            use_high_low: High/Low-Spalten uebernehmen (sonst Close-Naeherung)

        Returns:
            MarketSeries

        Raises:
            MissingDataError: Wenn der DataFrame leer ist oder Spalten fehlen
        """
        if df is None or df.empty:
            raise MissingDataError("DataFrame ist leer")

        required = [price_column, volume_column] + (['High', 'Low'] if use_high_low else [])
        is_valid, missing = validate_dataframe(df, required)
        if not is_valid:
            raise MissingDataError("Fehlende Spalten im DataFrame", missing_items=missing)

        return cls(
            prices=df[price_column].to_numpy(dtype=np.float64),
            volumes=df[volume_column].to_numpy(dtype=np.float64),
            highs=df['High'].to_numpy(dtype=np.float64) if use_high_low else None,
            lows=df['Low'].to_numpy(dtype=np.float64) if use_high_low else None,
        )
