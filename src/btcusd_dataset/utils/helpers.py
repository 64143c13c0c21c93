"""
Helper Funktionen - Allgemeine Hilfsfunktionen
"""

from typing import List, Tuple


def format_percentage(value: float, decimals: int = 2, include_sign: bool = True) -> str:
    """
    Formatiert einen Prozentwert.

    Args:
        value: Prozentwert (z.B. 12.5 fuer 12.5%)
        decimals: Anzahl Dezimalstellen
        include_sign: Vorzeichen bei positiven Werten anzeigen

    Returns:
        Formatierte Zeichenkette (z.B. '+12.50%')
    """
    sign = '+' if value > 0 and include_sign else ''
    return f'{sign}{value:.{decimals}f}%'


def format_duration(seconds: float) -> str:
    """
    Formatiert eine Dauer in lesbares Format.

    Args:
        seconds: Dauer in Sekunden

    Returns:
        Formatierte Zeichenkette (z.B. '1h 23m')
    """
    if seconds < 60:
        return f'{seconds:.1f}s'
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f'{minutes}m {secs}s'
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f'{hours}h {minutes}m'


def clamp(value: float, min_val: float, max_val: float) -> float:
    """
    Begrenzt einen Wert auf einen Bereich.

    Args:
        value: Eingabewert
        min_val: Minimum
        max_val: Maximum

    Returns:
        Begrenzter Wert
    """
    return max(min_val, min(max_val, value))


def validate_dataframe(df, required_columns: List[str]) -> Tuple[bool, List[str]]:
    """
    Validiert einen DataFrame auf erforderliche Spalten.

    Args:
        df: DataFrame
        required_columns: Liste erforderlicher Spalten

    Returns:
        Tuple aus (is_valid, missing_columns)
    """
    if df is None:
        return False, list(required_columns)

    missing = [col for col in required_columns if col not in df.columns]
    return len(missing) == 0, missing
