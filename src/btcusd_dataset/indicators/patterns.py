"""
Chartmuster-Erkennung - Double/Triple Top/Bottom, Head and Shoulders

Alle Detektoren durchsuchen das uebergebene Fenster von links nach rechts
nach lokalen Extrema, pruefen Aehnlichkeit und Mindestabstand und
bestaetigen das Muster ueber Preisbruch und Volumen.
"""

from typing import List, Optional

import numpy as np

from ._common import ArrayLike, as_array, mean

# Maximale relative Abweichung zweier Spitzen / Schultern
TOP_SIMILARITY = 0.05
SHOULDER_SIMILARITY = 0.10
# Mindestabstand zwischen zwei Extrema (Tage)
MIN_SPACING = 2


def _local_maxima(data: np.ndarray) -> List[int]:
    return [i for i in range(1, len(data) - 1) if data[i] > data[i - 1] and data[i] > data[i + 1]]


def _local_minima(data: np.ndarray) -> List[int]:
    return [i for i in range(1, len(data) - 1) if data[i] < data[i - 1] and data[i] < data[i + 1]]


def _volume_confirms(volume: np.ndarray, index: int, spike_factor: float) -> bool:
    """Volumenspitze am Extremum oder nachlassendes Volumen danach."""
    average = mean(volume)
    at_extreme = float(volume[index])
    after = float(volume[index + 1]) if index + 1 < len(volume) else float(volume[-1])
    return at_extreme > average * spike_factor or after < at_extreme * 0.8


def _current(data: np.ndarray, current_price: Optional[float]) -> float:
    return float(data[-1]) if current_price is None else float(current_price)


def _similar(a: float, b: float, tolerance: float) -> bool:
    return b != 0 and abs(a - b) / abs(b) < tolerance


def detect_double_top(prices: ArrayLike, volumes: ArrayLike,
                      current_price: Optional[float] = None) -> bool:
    """
    Double Top: zwei aehnliche Hochs (+-5 %), dazwischen ein Tal; bestaetigt
    wenn der Preis unter das Tal faellt und das Volumen das Muster stuetzt.
    """
    data = as_array(prices)
    volume = as_array(volumes)
    if len(data) < 3 or len(volume) != len(data):
        return False

    first = second = None
    for i in _local_maxima(data):
        if first is None:
            first = i
        elif _similar(data[i], data[first], TOP_SIMILARITY) and i > first + MIN_SPACING:
            second = i
            break
    if second is None:
        return False

    trough = float(data[first + 1:second].min())
    return _current(data, current_price) < trough and _volume_confirms(volume, second, 2.0)


def detect_double_bottom(prices: ArrayLike, volumes: ArrayLike,
                         current_price: Optional[float] = None) -> bool:
    """Double Bottom: Spiegelbild des Double Top (Ausbruch ueber das Zwischenhoch)."""
    data = as_array(prices)
    volume = as_array(volumes)
    if len(data) < 3 or len(volume) != len(data):
        return False

    first = second = None
    for i in _local_minima(data):
        if first is None:
            first = i
        elif _similar(data[i], data[first], TOP_SIMILARITY) and i > first + MIN_SPACING:
            second = i
            break
    if second is None:
        return False

    peak = float(data[first + 1:second].max())
    return _current(data, current_price) > peak and _volume_confirms(volume, second, 2.0)


def detect_triple_top(prices: ArrayLike, volumes: ArrayLike,
                      current_price: Optional[float] = None) -> bool:
    """
    Triple Top: drei aehnliche Hochs mit je mindestens drei Tagen Abstand;
    bestaetigt beim Bruch der tieferen der beiden Zwischen-Taeler.
    """
    data = as_array(prices)
    volume = as_array(volumes)
    if len(data) < 3 or len(volume) != len(data):
        return False

    first = second = third = None
    for i in _local_maxima(data):
        if first is None:
            first = i
        elif (second is None and _similar(data[i], data[first], TOP_SIMILARITY)
              and i > first + MIN_SPACING):
            second = i
        elif (second is not None and _similar(data[i], data[second], TOP_SIMILARITY)
              and i > second + MIN_SPACING):
            third = i
            break
    if third is None:
        return False

    support = min(float(data[first + 1:second].min()), float(data[second + 1:third].min()))
    return _current(data, current_price) < support and _volume_confirms(volume, third, 2.0)


def detect_triple_bottom(prices: ArrayLike, volumes: ArrayLike,
                         current_price: Optional[float] = None, window: int = 20) -> bool:
    """
    Triple Bottom in den letzten `window` Tagen.

    Bedingungen: die letzten drei Taeler liegen innerhalb von 5 % der
    Fensterspanne, ihr Volumen nimmt ab, das aktuelle Volumen ist eine
    Spitze (> 1.5 * Talvolumen) und der Preis bricht ueber das Hoch der
    fuenf Tage vor dem aktuellen Tag aus.
    """
    data = as_array(prices)
    volume = as_array(volumes)
    if len(data) < window or len(volume) < window:
        return False

    recent = data[-window:]
    recent_volume = volume[-window:]
    valleys = _local_minima(recent)
    if len(valleys) < 3:
        return False

    last_three = valleys[-3:]
    span = float(recent.max()) - float(recent.min())
    reference = float(recent[last_three[0]])
    similar = all(abs(float(recent[v]) - reference) < span * 0.05 for v in last_three)

    valley_volumes = [float(recent_volume[v]) for v in last_three]
    decreasing = valley_volumes[1] < valley_volumes[0] and valley_volumes[2] < valley_volumes[1]
    spike = float(recent_volume[-1]) > mean(valley_volumes) * 1.5
    breakout = _current(data, current_price) > float(recent[-6:-1].max())
    return similar and decreasing and spike and breakout


def detect_head_and_shoulders(prices: ArrayLike, volumes: ArrayLike,
                              current_price: Optional[float] = None) -> bool:
    """
    Head and Shoulders: linke Schulter, hoeherer Kopf, rechte Schulter
    unter dem Kopf und innerhalb 10 % der linken Schulter. Bestaetigt beim
    Bruch der Nackenlinie (tieferes der beiden Taeler).
    """
    data = as_array(prices)
    volume = as_array(volumes)
    if len(data) < 3 or len(volume) != len(data):
        return False

    left = head = right = None
    for i in _local_maxima(data):
        if left is None:
            left = i
        elif head is None and data[i] > data[left] and i > left + MIN_SPACING:
            head = i
        elif (head is not None and data[i] < data[head]
              and _similar(data[i], data[left], SHOULDER_SIMILARITY) and i > head + MIN_SPACING):
            right = i
            break
    if right is None:
        return False

    neckline = min(float(data[left + 1:head].min()), float(data[head + 1:right].min()))
    head_volume = float(volume[head])
    right_volume = float(volume[right])
    volume_ok = head_volume > mean(volume) * 1.5 or right_volume < head_volume * 0.8
    return _current(data, current_price) < neckline and volume_ok
