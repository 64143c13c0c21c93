"""
Perioden-Konstanten fuer alle Indikatoren

Aenderungen an diesen Werten veraendern den Feature-Vektor und machen
gespeicherte Normalisierungs-Stats und Modellgewichte ungueltig.
"""

from types import MappingProxyType

PERIODS = MappingProxyType({
    'RSI': 14,
    'SMA_SHORT': 7,
    'SMA_MEDIUM': 20,
    'SMA_LONG': 21,
    'SMA_50': 50,
    'SMA_200': 200,
    'EMA_SHORT': 12,
    'EMA_LONG': 26,
    'MACD_SIGNAL': 9,
    'ATR': 14,
    'ADX': 14,
    'VWAP': 7,
    'STOCH_RSI': 14,
    'STOCH_SMOOTH': 3,
    'FIBONACCI': 30,
    'VOL_SMA_SHORT': 5,
    'VOL_SMA_LONG': 14,
    'MOMENTUM': 10,
})

# Fenster fuer Chartmuster-Erkennung (Tage)
PATTERN_WINDOW = 60
