"""
Logger Modul - Einheitliches Logging-System
Farbige Konsolenausgabe (colorlog) und optionales Datei-Logging pro Session

Thread-Safe: Alle Log-Aufrufe gehen in eine Queue, ein QueueListener-Thread
schreibt auf Konsole und Datei. Damit koennen Assembler-Aufrufe parallel aus
Worker-Threads geloggt werden.
"""

import logging
import logging.handlers
import queue
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

import colorlog


class Logger:
    """
    Einheitliches Logging-System mit Konsolen- und optionaler Datei-Ausgabe.

    Unterstuetzte Log-Level:
    - TRACE: Sehr detaillierte Debug-Informationen (z.B. verworfene Tage)
    - DEBUG: Debug-Informationen
    - INFO: Allgemeine Informationen
    - SUCCESS: Erfolgreich abgeschlossene Pipeline-Stufen
    - WARNING: Warnungen (z.B. uebersprungenes Balancing)
    - ERROR: Fehler

    Attributes:
        name: Name des Loggers
        log_dir: Verzeichnis fuer Log-Dateien (None = nur Konsole)
        log_file: Pfad zur aktuellen Log-Datei
    """

    # Custom Log-Level
    TRACE = 5
    SUCCESS = 25

    # Farben fuer Konsolen-Ausgabe (colorlog)
    COLORS = {
        'TRACE': 'cyan',
        'DEBUG': 'light_black',
        'INFO': 'blue',
        'SUCCESS': 'green',
        'WARNING': 'yellow',
        'ERROR': 'red',
        'CRITICAL': 'red,bg_white',
    }

    FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
    DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

    _instances: dict = {}
    _lock = threading.Lock()

    def __new__(cls, name: str = 'btcusd_dataset', log_dir: Optional[str] = None):
        """Singleton-Pattern pro Logger-Name (thread-safe)"""
        with cls._lock:
            if name not in cls._instances:
                instance = super().__new__(cls)
                cls._instances[name] = instance
            return cls._instances[name]

    def __init__(self, name: str = 'btcusd_dataset', log_dir: Optional[str] = None):
        """
        Initialisiert den Logger.

        Args:
            name: Name des Loggers (z.B. 'btcusd_dataset')
            log_dir: Verzeichnis fuer Log-Dateien (default: keine Datei)
        """
        if hasattr(self, '_initialized'):
            return

        self.name = name
        self.log_dir: Optional[Path] = Path(log_dir) if log_dir else None
        self.log_file: Optional[Path] = None

        # Custom Log-Level registrieren
        logging.addLevelName(self.TRACE, 'TRACE')
        logging.addLevelName(self.SUCCESS, 'SUCCESS')

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self.TRACE)
        self._logger.handlers = []
        self._logger.propagate = False

        self._log_queue: queue.Queue = queue.Queue(-1)
        self._listener: Optional[logging.handlers.QueueListener] = None

        self._setup_handlers()

        self._initialized = True

    def _setup_handlers(self):
        """
        Richtet alle Handler ein.

        Architektur:
        - Am Logger haengt nur ein QueueHandler (aufrufender Thread blockiert nicht)
        - Ein QueueListener liest die Queue und bedient Konsole und Datei
        """
        queue_handler = logging.handlers.QueueHandler(self._log_queue)
        self._logger.addHandler(queue_handler)

        # Konsolen-Handler mit Farben
        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.TRACE)
        console_handler.setFormatter(colorlog.ColoredFormatter(
            '%(log_color)s' + self.FORMAT,
            datefmt=self.DATE_FORMAT,
            log_colors=self.COLORS
        ))
        handlers = [console_handler]

        # Datei-Handler nur wenn ein Log-Verzeichnis konfiguriert ist
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime('%Y-%m-%d_%Hh%Mm%Ss')
            self.log_file = self.log_dir / f'session-{timestamp}.txt'

            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(self.TRACE)
            file_handler.setFormatter(logging.Formatter(self.FORMAT, datefmt=self.DATE_FORMAT))
            handlers.append(file_handler)

        self._listener = logging.handlers.QueueListener(
            self._log_queue, *handlers, respect_handler_level=True
        )
        self._listener.start()

    def flush(self):
        """Wartet bis alle Eintraege der Queue geschrieben wurden."""
        if self._listener is not None:
            self._listener.stop()
            self._listener.start()

    def trace(self, message: str):
        """Sehr detaillierte Debug-Informationen."""
        self._logger.log(self.TRACE, message)

    def debug(self, message: str):
        """Debug-Informationen."""
        self._logger.debug(message)

    def info(self, message: str):
        """Allgemeine Informationen."""
        self._logger.info(message)

    def success(self, message: str):
        """Erfolgreiche Operationen."""
        self._logger.log(self.SUCCESS, message)

    def warning(self, message: str):
        """Warnungen."""
        self._logger.warning(message)

    def error(self, message: str):
        """Fehler."""
        self._logger.error(message)

    def critical(self, message: str):
        """Kritische Fehler."""
        self._logger.critical(message)

    def timing(self, operation: str, duration_ms: float):
        """Logging von Timing-Informationen."""
        self.trace(f'[TIMING] {operation}: {duration_ms:.1f} ms')

    def set_level(self, level: str):
        """
        Setzt das Log-Level.

        Args:
            level: 'TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR'
        """
        level_map = {
            'TRACE': self.TRACE,
            'DEBUG': logging.DEBUG,
            'INFO': logging.INFO,
            'SUCCESS': self.SUCCESS,
            'WARNING': logging.WARNING,
            'ERROR': logging.ERROR,
        }
        if level.upper() in level_map:
            self._logger.setLevel(level_map[level.upper()])

    def get_log_file_path(self) -> Optional[str]:
        """Gibt den Pfad zur aktuellen Log-Datei zurueck."""
        return str(self.log_file) if self.log_file else None


# Globale Logger-Instanz
_default_logger: Optional[Logger] = None


def get_logger(name: str = 'btcusd_dataset', log_dir: Optional[str] = None) -> Logger:
    """
    Gibt eine Logger-Instanz zurueck.

    Args:
        name: Name des Loggers
        log_dir: Verzeichnis fuer Log-Dateien

    Returns:
        Logger-Instanz
    """
    global _default_logger

    if _default_logger is None or _default_logger.name != name:
        _default_logger = Logger(name, log_dir)

    return _default_logger


# Convenience-Funktionen fuer direkten Zugriff
def trace(message: str):
    """Globale trace() Funktion."""
    get_logger().trace(message)


def debug(message: str):
    """Globale debug() Funktion."""
    get_logger().debug(message)


def info(message: str):
    """Globale info() Funktion."""
    get_logger().info(message)


def success(message: str):
    """Globale success() Funktion."""
    get_logger().success(message)


def warning(message: str):
    """Globale warning() Funktion."""
    get_logger().warning(message)


def error(message: str):
    """Globale error() Funktion."""
    get_logger().error(message)
