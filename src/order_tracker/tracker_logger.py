"""
Structured Logging for the Order Tracker
Rotating file logs plus console output, with an optional component prefix.
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import tracker_config as cfg


class TrackerLogger:
    """Component-tagged logger with rotating main and error-only files"""

    def __init__(self, name="order-tracker", log_dir=None, log_level=None, console=True):
        """
        Initialize logger with rotating file handlers

        Args:
            name: Logger name
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            console: Also log INFO and above to stderr
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, (log_level or cfg.LOG_LEVEL).upper(), logging.INFO))
        self.logger.propagate = False

        # Clear any existing handlers
        self.logger.handlers.clear()

        log_path = Path(log_dir or cfg.LOG_DIR)
        log_path.mkdir(parents=True, exist_ok=True)
        self.log_dir = str(log_path)

        log_format = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # 1. Main rotating file handler (10MB per file, keep 5 files)
        main_handler = RotatingFileHandler(
            log_path / 'order_tracker.log',
            maxBytes=10*1024*1024,
            backupCount=5,
            encoding='utf-8'
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(log_format)
        self.logger.addHandler(main_handler)

        # 2. Error-only log file (5MB per file, keep 3 files)
        error_handler = RotatingFileHandler(
            log_path / 'errors.log',
            maxBytes=5*1024*1024,
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(log_format)
        self.logger.addHandler(error_handler)

        # 3. Console handler
        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(log_format)
            self.logger.addHandler(console_handler)

    def debug(self, message, component=""):
        self._log(logging.DEBUG, message, component)

    def info(self, message, component=""):
        self._log(logging.INFO, message, component)

    def warning(self, message, component=""):
        self._log(logging.WARNING, message, component)

    def error(self, message, component="", exc_info=False):
        self._log(logging.ERROR, message, component, exc_info=exc_info)

    def _log(self, level, message, component="", exc_info=False):
        """Internal logging method with component prefix"""
        if component:
            message = f"[{component}] {message}"
        self.logger.log(level, message, exc_info=exc_info)

    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def log_lookup_start(self, sequence, code, force_refresh):
        self.info(
            f"Lookup #{sequence} - code '{mask_order_code(code)}' (force_refresh={force_refresh})",
            component="Lookup"
        )

    def log_lookup_complete(self, sequence, status, elapsed):
        self.info(
            f"Lookup #{sequence} - finished as '{status}' in {elapsed:.2f}s",
            component="Lookup"
        )

    def log_sheet_loaded(self, row_count, force_refresh):
        self.info(
            f"Loaded {row_count} sheet rows (force_refresh={force_refresh})",
            component="Sheet"
        )


def mask_order_code(code, keep=12):
    """Shorten long KYS payloads for log lines.

    Example: KYS-eyJwaWQiOjIsImR1ciI6OH0 -> KYS-eyJwaWQi...
    """
    text = str(code or "")
    if len(text) <= keep:
        return text
    return text[:keep] + "..."


def get_logger(settings=None, console=True):
    """Build a logger for the given settings"""
    settings = settings or cfg.TrackerSettings()
    return TrackerLogger(log_dir=settings.log_dir, log_level=settings.log_level, console=console)
