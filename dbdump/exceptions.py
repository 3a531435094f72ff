# dbdump/exceptions.py
"""
Exception hierarchy for dbdump.

Fatal errors (ConfigError, DiscoveryError, DirectoryError) abort a run before any
table is exported. ExportError and its subclasses are scoped to a single table:
the exporter turns them into a failed ExportOutcome and the run carries on.
"""

from typing import Optional


class DumpError(Exception):
    """Base class for all dbdump errors."""


class ConfigError(DumpError):
    """Invalid configuration or log level."""


class DiscoveryError(DumpError):
    """The table list could not be read from the database catalog."""


class DirectoryError(DumpError):
    """The output directory could not be created."""


class ExportError(DumpError):
    """
    Failure while exporting one table.

    Args:
        message: Description of the failure
        table_name: Table being exported when the failure happened
    """

    def __init__(self, message: str, table_name: Optional[str] = None):
        super().__init__(message)
        self.table_name = table_name


class FileCreateError(ExportError):
    """Output file already exists or cannot be created."""


class DatabaseConnectionError(ExportError):
    """Read-only connection to the source database could not be opened."""


class QueryError(ExportError):
    """Table query could not be prepared or its rows could not be read."""


class ParseError(ExportError):
    """Timestamp cell is not an integer or is outside the calendar range."""


class EncodingError(ExportError):
    """Cell or record could not be converted to delimited text."""


class FileWriteError(ExportError):
    """Output file could not be written or flushed."""
