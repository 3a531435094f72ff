# dbdump/config.py
"""
Configuration for dump runs.
Supports an optional YAML configuration file whose values can be overridden
from the command line.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .defaults import settings
from .exceptions import ConfigError

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML is required. Install with: pip install PyYAML")

logger = logging.getLogger(__name__)

# Accepted log level names and the logging level they map to. None disables logging.
LOG_LEVELS = {
    'trace': logging.DEBUG,
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'none': None,
}

CONFIG_CANDIDATES = ['dbdump.yml', 'dbdump.yaml']


def parse_log_level(level: Union[str, int, None]) -> Optional[int]:
    """
    Convert a log level name to a logging level.

    Args:
        level: One of trace, debug, info, warn, warning, error, none (any case)
               or a numeric logging level

    Returns:
        Logging level int, or None when logging is disabled

    Raises:
        ConfigError: If the level name is not recognized
    """
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if not isinstance(level, str) or level.strip().lower() not in LOG_LEVELS:
        raise ConfigError(f"Invalid log level '{level}'. "
                          f"Must be one of: {', '.join(LOG_LEVELS)}")
    return LOG_LEVELS[level.strip().lower()]


class ExportConfig:
    """
    Settings for one dump run.

    The object is built once at startup and handed to ``setup_logging()`` and to
    the export coordinator. Values are validated on construction so a bad setting
    fails before any table is touched.

    Parameters
    ----------
    database : str or Path
        SQLite database file to dump. Opened read-only.
    output_dir : str or Path
        Directory receiving one file per table. Created if missing.
    log_level : str, default 'INFO'
        trace, debug, info, warn, warning, error or none.
    max_workers : int, optional
        Upper bound on concurrent table exports. None runs one worker per table.
    file_extension : str, default 'csv'
        Extension of the dump files, without the dot.
    line_terminator : str, default '\\n'
        Record terminator passed to the csv writer.
    null_string : str, default 'null'
        Text written for NULL cells.
    timestamp_columns : List[str], optional
        Column names treated as epoch-seconds timestamps. The first matching
        column gets a derived ``timestamp_parsed`` column after it.
    log_dir : str or Path, optional
        If set, log messages are also written to a timestamped file there.

    Example
    -------
    ::

        config = ExportConfig('appliance_stats.sqlite', 'sqlite_dump', log_level='debug')
        setup_logging(config)
        summary = export_database(config)
    """

    def __init__(self,
                 database: Union[str, Path] = None,
                 output_dir: Union[str, Path] = None,
                 log_level: str = None,
                 max_workers: Optional[int] = None,
                 file_extension: str = None,
                 line_terminator: str = None,
                 null_string: str = None,
                 timestamp_columns: Optional[List[str]] = None,
                 log_dir: Optional[Union[str, Path]] = None):
        self.database = Path(database or settings['database'])
        self.output_dir = Path(output_dir or settings['output_dir'])
        self.log_level = log_level or settings['log_level']
        self.level = parse_log_level(self.log_level)
        self.max_workers = max_workers if max_workers is not None else settings['max_workers']
        self.file_extension = (file_extension or settings['file_extension']).lstrip('.')
        self.line_terminator = line_terminator or settings['line_terminator']
        self.null_string = null_string if null_string is not None else settings['null_string']
        self.timestamp_columns = list(timestamp_columns or settings['timestamp_columns'])
        log_dir = log_dir or settings['logging'].get('directory')
        self.log_dir = Path(log_dir) if log_dir else None
        self._validate()

    def _validate(self) -> None:
        if self.max_workers is not None:
            if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) \
                    or self.max_workers < 1:
                raise ConfigError(f"max_workers must be a positive integer, got {self.max_workers!r}")
        if not self.file_extension:
            raise ConfigError("file_extension must not be empty")
        if not self.timestamp_columns or not all(isinstance(c, str) and c for c in self.timestamp_columns):
            raise ConfigError(f"timestamp_columns must be a list of column names, got {self.timestamp_columns!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'database': str(self.database),
            'output_dir': str(self.output_dir),
            'log_level': self.log_level,
            'max_workers': self.max_workers,
            'file_extension': self.file_extension,
            'line_terminator': self.line_terminator,
            'null_string': self.null_string,
            'timestamp_columns': list(self.timestamp_columns),
            'log_dir': str(self.log_dir) if self.log_dir else None,
        }

    def __repr__(self) -> str:
        return f"ExportConfig({self.to_dict()!r})"


def _find_config_file(config_file: Optional[Union[str, Path]]) -> Optional[Path]:
    """Find the configuration file. An explicit file must exist, defaults are optional."""
    if config_file:
        path = Path(config_file)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_file}")
        return path

    for candidate in CONFIG_CANDIDATES:
        path = Path(candidate)
        if path.exists():
            return path
    return None


def read_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
    """
    Load the ``settings`` section of a YAML config file.

    Example file::

        settings:
          database: appliance_stats.sqlite
          output_dir: sqlite_dump
          log_level: info
          max_workers: 8
          timestamp_columns: [sm_timestamp, timestamp]

    Raises:
        ConfigError: If the file cannot be read or is not a mapping
    """
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config file {config_file}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Invalid config file {config_file}.")
    file_settings = config.get('settings', {}) or {}
    if not isinstance(file_settings, dict):
        raise ConfigError(f"Invalid config file {config_file}: 'settings' must be a dictionary")

    logger.info(f"Loaded config from {config_file}")
    return file_settings


def load_config(config_file: Optional[Union[str, Path]] = None, **overrides) -> ExportConfig:
    """
    Build an ExportConfig from defaults, an optional YAML file and overrides.

    Precedence, lowest to highest: ``defaults.settings``, the config file's
    ``settings`` section, keyword overrides that are not None.

    Args:
        config_file: YAML file path. If None, ./dbdump.yml or ./dbdump.yaml are used when present.
        **overrides: ExportConfig arguments, typically from the command line

    Returns:
        Validated ExportConfig

    Raises:
        ConfigError: On unreadable files, unknown keys or invalid values
    """
    values = {}
    path = _find_config_file(config_file)
    if path is not None:
        values.update(copy.deepcopy(read_config_file(path)))

    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ExportConfig(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
