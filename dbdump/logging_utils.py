# dbdump/logging_utils.py
"""
Logging setup for dump runs.

The logging initializer takes the run's ExportConfig explicitly instead of
reading environment variables, and configures the root logger once at startup.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import ExportConfig
from .defaults import settings

logger = logging.getLogger(__name__)

# Module-level state for error tracking
_error_handler: Optional['ErrorCountHandler'] = None
_log_path: Optional[str] = None


class ErrorCountHandler(logging.Handler):
    """Custom handler that counts ERROR and CRITICAL level messages."""

    def __init__(self):
        super().__init__(level=logging.ERROR)
        self.error_count = 0

    def emit(self, record):
        if record.levelno >= logging.ERROR:
            self.error_count += 1


def setup_logging(config: ExportConfig, script_name: str = 'dbdump') -> Optional[str]:
    """
    Configure the root logger for a dump run.

    Args:
        config: Run configuration. ``config.level`` selects the level (None disables
                logging) and ``config.log_dir`` adds a log file.
        script_name: Base name for the log file

    Returns:
        Path of the log file, or None when logging only to the console

    Example
    -------
    ::

        config = load_config(log_level='debug', log_dir='./logs')
        setup_logging(config)   # ./logs/dbdump_20240102_030405.log + stdout
    """
    global _error_handler, _log_path

    logging_config = settings.get('logging', {})
    log_format = logging_config.get('format', '%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    timestamp_format = logging_config.get('timestamp_format', '%Y-%m-%d %H:%M:%S')
    filename_format = logging_config.get('filename_format', '%Y%m%d_%H%M%S')
    console = logging_config.get('console', True)

    root_logger = logging.getLogger()
    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    _error_handler = ErrorCountHandler()
    root_logger.addHandler(_error_handler)
    _log_path = None

    if config.level is None:
        # 'none': nothing above CRITICAL is ever emitted
        root_logger.setLevel(logging.CRITICAL + 1)
        return None

    root_logger.setLevel(config.level)
    formatter = logging.Formatter(log_format, datefmt=timestamp_format)

    if config.log_dir is not None:
        log_dir_path = Path(config.log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        if filename_format:
            timestamp = datetime.now().strftime(filename_format)
            log_file = log_dir_path / f"{script_name}_{timestamp}.log"
        else:
            log_file = log_dir_path / f"{script_name}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        _log_path = str(log_file)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if _log_path:
        logger.debug(f"Logging initialized: {_log_path}")
    return _log_path


def errors_logged() -> Optional[str]:
    """
    Check if any ERROR or CRITICAL messages were logged during this run.

    Returns:
        The log file path (or ``'<console>'`` without a log file) when errors
        were logged, None otherwise or if setup_logging() was not called.
    """
    if _error_handler is None:
        logger.warning("errors_logged() called but setup_logging() was not called")
        return None

    if _error_handler.error_count == 0:
        return None
    return _log_path or '<console>'
