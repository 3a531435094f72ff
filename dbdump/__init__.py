# dbdump/__init__.py
"""
dbdump - concurrent SQLite to CSV dumper

Exports every user table of a SQLite database into its own CSV file:

- One worker thread per table, each with its own read-only connection
- A failing table is reported without stopping the others
- Epoch-seconds ``sm_timestamp``/``timestamp`` columns get a derived
  ``timestamp_parsed`` column in RFC 3339 UTC
- Existing dump files are never overwritten

Basic usage::

    import dbdump

    config = dbdump.load_config(database='appliance_stats.sqlite', output_dir='sqlite_dump')
    dbdump.setup_logging(config)
    summary = dbdump.export_database(config)
    print(summary.failed)

Command line::

    dbdump --file appliance_stats.sqlite --dir sqlite_dump --log debug
"""

__version__ = '0.1.0'

from .config import ExportConfig, load_config
from .coordinator import ExportCoordinator, ExportSummary, export_database
from .database import list_tables
from .exporter import ExportOutcome, TableExporter, export_table
from .logging_utils import setup_logging, errors_logged
from . import exceptions
from . import writers

__all__ = [
    'ExportConfig',
    'load_config',
    'ExportCoordinator',
    'ExportSummary',
    'export_database',
    'list_tables',
    'ExportOutcome',
    'TableExporter',
    'export_table',
    'setup_logging',
    'errors_logged',
    'exceptions',
    'writers',
]
