"""
Custom Exceptions - Benutzerdefinierte Fehlerklassen fuer die Dataset-Pipeline

Hierarchie:
    DatasetError (Basis)
    ├── DataError (Datenfehler)
    │   ├── DataValidationError (Validierungsfehler)
    │   ├── DataFormatError (Formatfehler, z.B. defekte Stats-Datei)
    │   └── MissingDataError (Fehlende Daten)
    ├── ConfigError (Konfigurationsfehler)
    │   └── FeatureCountMismatchError (Feature-Anzahl passt nicht zur Registry)
    └── SaveError (Speicherfehler)

Ungueltige Indikatorwerte (NaN/Inf) und leere Klassen sind KEINE Exceptions:
sie werden lokal behandelt (Tag verwerfen bzw. Balancing ueberspringen).
"""

from typing import List, Optional


class DatasetError(Exception):
    """Basisklasse fuer alle Fehler der Dataset-Pipeline."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


# =============================================================================
# Datenfehler
# =============================================================================

class DataError(DatasetError):
    """Basisklasse fuer Datenfehler."""
    pass


class DataValidationError(DataError):
    """
    Wird geworfen wenn Eingabedaten die Validierung nicht bestehen.

    Beispiele:
    - Preis- und Volumenreihe unterschiedlich lang
    - NaN/Inf in der Preisreihe
    - Negative Volumina
    """

    def __init__(self, message: str, invalid_fields: Optional[List[str]] = None,
                 details: Optional[str] = None):
        super().__init__(message, details)
        self.invalid_fields = invalid_fields or []

    def __str__(self) -> str:
        base = super().__str__()
        if self.invalid_fields:
            return f"{base}\nUngueltige Felder: {', '.join(self.invalid_fields)}"
        return base


class DataFormatError(DataError):
    """
    Wird geworfen wenn ein gespeichertes Artefakt nicht gelesen werden kann.

    Beispiele:
    - Defektes JSON
    - Fehlende Schluessel in NormalizationStats
    - location/scale mit unterschiedlicher Laenge
    """

    def __init__(self, message: str, expected_format: Optional[str] = None,
                 actual_format: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.expected_format = expected_format
        self.actual_format = actual_format


class MissingDataError(DataError):
    """
    Wird geworfen wenn benoetigte Daten fehlen.

    Beispiele:
    - Leere Preisreihe
    - Fehlende Spalten im DataFrame
    """

    def __init__(self, message: str, missing_items: Optional[List[str]] = None,
                 details: Optional[str] = None):
        super().__init__(message, details)
        self.missing_items = missing_items or []

    def __str__(self) -> str:
        base = super().__str__()
        if self.missing_items:
            return f"{base}\nFehlend: {', '.join(self.missing_items)}"
        return base


# =============================================================================
# Konfigurationsfehler
# =============================================================================

class ConfigError(DatasetError):
    """
    Wird geworfen bei Konfigurationsfehlern.

    Beispiele:
    - timesteps < 1
    - curriculum_level ausserhalb [0.1, 1.0]
    - Unbekannte Balancing-Strategie
    """

    def __init__(self, message: str, config_key: Optional[str] = None,
                 details: Optional[str] = None):
        super().__init__(message, details)
        self.config_key = config_key


class FeatureCountMismatchError(ConfigError):
    """
    Konfigurierte Feature-Anzahl weicht von der Registry ab.

    Tritt auf wenn Normalisierungs-Stats oder Modellgewichte mit einer
    anderen Feature-Reihenfolge erzeugt wurden. Immer fatal.
    """

    def __init__(self, expected: int, actual: int, details: Optional[str] = None):
        super().__init__(
            f"Feature-Anzahl stimmt nicht: erwartet {expected}, Registry liefert {actual}",
            config_key='feature_count',
            details=details
        )
        self.expected = expected
        self.actual = actual


# =============================================================================
# Speicherfehler
# =============================================================================

class SaveError(DatasetError):
    """
    Wird geworfen bei Fehlern waehrend des Speicherns.

    Beispiele:
    - Zielverzeichnis nicht beschreibbar
    - Serialisierung fehlgeschlagen
    """

    def __init__(self, message: str, operation: Optional[str] = None,
                 details: Optional[str] = None):
        super().__init__(message, details)
        self.operation = operation
