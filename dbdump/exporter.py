# dbdump/exporter.py
"""
Per-table export: stream one table from SQLite into its own CSV file.
"""

import logging
import os
import sqlite3
import time
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from .config import ExportConfig
from .database import Database, connect_readonly, quote_identifier
from .defaults import settings
from .encoder import ColumnSchema, RowEncoder
from .exceptions import ExportError, FileCreateError, QueryError
from .writers import CSVWriter

logger = logging.getLogger(__name__)


class ExportOutcome:
    """
    Result of exporting one table.

    Attributes
    ----------
    table_name : str
        Exported table
    success : bool
        True if every row was written
    cause : Exception or None
        Why the export failed
    row_count : int
        Data rows written (also counts rows written before a failure)
    path : Path or None
        Output file
    elapsed : float
        Seconds spent on the table
    crashed : bool
        True when the worker died with an unexpected exception instead of an ExportError
    """

    def __init__(self, table_name: str, success: bool, cause: Optional[BaseException] = None,
                 row_count: int = 0, path: Optional[Path] = None, elapsed: float = 0.0,
                 crashed: bool = False):
        self.table_name = table_name
        self.success = success
        self.cause = cause
        self.row_count = row_count
        self.path = path
        self.elapsed = elapsed
        self.crashed = crashed

    @classmethod
    def succeeded(cls, table_name: str, row_count: int, path: Path, elapsed: float) -> 'ExportOutcome':
        return cls(table_name, True, row_count=row_count, path=path, elapsed=elapsed)

    @classmethod
    def failed(cls, table_name: str, cause: BaseException, row_count: int = 0,
               path: Optional[Path] = None, elapsed: float = 0.0, crashed: bool = False) -> 'ExportOutcome':
        return cls(table_name, False, cause=cause, row_count=row_count, path=path,
                   elapsed=elapsed, crashed=crashed)

    @property
    def error_type(self) -> Optional[str]:
        return type(self.cause).__name__ if self.cause is not None else None

    def __repr__(self) -> str:
        if self.success:
            return f"ExportOutcome({self.table_name!r}, success, rows={self.row_count})"
        return f"ExportOutcome({self.table_name!r}, {self.error_type}: {self.cause})"


class TableExporter:
    """
    Dumps single tables of a SQLite database to CSV files.

    Each call to ``export()`` creates its own output file and opens its own
    read-only connection, so one exporter can be used from several threads at
    once. Table names are interpolated into the query; they must come from
    ``list_tables()``, never from user input.

    Parameters
    ----------
    database : str or Path
        SQLite database file
    null_string : str, optional
        Text for NULL cells
    line_terminator : str, optional
        CSV record terminator
    file_extension : str, optional
        Dump file extension
    timestamp_columns : List[str], optional
        Names of epoch-seconds timestamp columns

    Example
    -------
    ::

        exporter = TableExporter('appliance_stats.sqlite')
        outcome = exporter.export('readings', 'sqlite_dump')
        if not outcome.success:
            print(outcome.cause)
    """

    def __init__(self,
                 database: Union[str, Path],
                 null_string: Optional[str] = None,
                 line_terminator: Optional[str] = None,
                 file_extension: Optional[str] = None,
                 timestamp_columns: Optional[Sequence[str]] = None):
        self.database = Path(database)
        self.null_string = settings['null_string'] if null_string is None else null_string
        self.line_terminator = line_terminator or settings['line_terminator']
        self.file_extension = (file_extension or settings['file_extension']).lstrip('.')
        self.timestamp_columns: List[str] = list(timestamp_columns or settings['timestamp_columns'])

    @classmethod
    def from_config(cls, config: ExportConfig) -> 'TableExporter':
        return cls(config.database,
                   null_string=config.null_string,
                   line_terminator=config.line_terminator,
                   file_extension=config.file_extension,
                   timestamp_columns=config.timestamp_columns)

    def output_path(self, table_name: str, output_directory: Union[str, Path]) -> Path:
        """
        Return the dump file for a table inside ``output_directory``.

        Raises:
            FileCreateError: If the table name cannot be used as a file name
        """
        separators = [sep for sep in (os.sep, os.altsep, '\x00') if sep]
        if any(sep in table_name for sep in separators):
            raise FileCreateError(f"Table name {table_name!r} is not a valid file name", table_name)
        return Path(output_directory) / f"{table_name}.{self.file_extension}"

    def export(self, table_name: str, output_directory: Union[str, Path]) -> ExportOutcome:
        """
        Export one table to ``output_directory/<table_name>.<ext>``.

        Failures are returned as a failed ExportOutcome rather than raised. A
        partially written file is left in place.

        Args:
            table_name: Table to dump, as returned by list_tables()
            output_directory: Existing directory for the dump file

        Returns:
            ExportOutcome for the table
        """
        logger.info(f"Dumping table {table_name}")
        start_time = time.perf_counter()
        path = None
        writer = None

        try:
            path = self.output_path(table_name, output_directory)
            writer = CSVWriter(path, table_name=table_name, line_terminator=self.line_terminator)
            with writer:
                self._dump(table_name, writer)
        except ExportError as e:
            if e.table_name is None:
                e.table_name = table_name
            logger.error(f"Error while handling table {table_name}. {type(e).__name__}: {e}")
            row_count = writer.row_count if writer is not None else 0
            return ExportOutcome.failed(table_name, e, row_count=row_count, path=path,
                                        elapsed=time.perf_counter() - start_time)

        elapsed = time.perf_counter() - start_time
        logger.info(f"Table {table_name} dump completed. {writer.row_count} rows. "
                    f"Elapsed {elapsed * 1000:.0f} ms")
        return ExportOutcome.succeeded(table_name, writer.row_count, path, elapsed)

    def _dump(self, table_name: str, writer: CSVWriter) -> None:
        """Query the table and stream its rows into an open writer."""
        db = connect_readonly(self.database)
        try:
            cursor = self._query(db, table_name)
            columns = [col[0] for col in cursor.description]
            schema = ColumnSchema.from_columns(columns, self.timestamp_columns)
            logger.info(f"Column name: {schema.header}")

            writer.write_header(schema.header)
            encoder = RowEncoder(schema, self.null_string)
            for row in self._iter_rows(cursor, table_name):
                writer.write_record(encoder.encode(row))
        finally:
            db.close()

    @staticmethod
    def _query(db: Database, table_name: str) -> sqlite3.Cursor:
        query = f"SELECT * FROM {quote_identifier(table_name)}"
        try:
            cursor = db.cursor()
            cursor.execute(query)
        except sqlite3.Error as e:
            raise QueryError(f"Cannot query table: {e}", table_name) from e
        if cursor.description is None:
            raise QueryError("Query returned no columns", table_name)
        return cursor

    @staticmethod
    def _iter_rows(cursor: sqlite3.Cursor, table_name: str) -> Iterator[tuple]:
        """Yield rows one at a time in the order SQLite returns them."""
        while True:
            try:
                row = cursor.fetchone()
            except sqlite3.Error as e:
                raise QueryError(f"Error while reading rows: {e}", table_name) from e
            if row is None:
                return
            yield row


def export_table(table_name: str,
                 output_directory: Union[str, Path],
                 database: Union[str, Path],
                 **kwargs) -> ExportOutcome:
    """
    Export one table to CSV.

    Args:
        table_name: Table to dump
        output_directory: Directory for the dump file
        database: SQLite database file
        **kwargs: Additional TableExporter arguments

    Example:
        outcome = export_table('readings', 'sqlite_dump', 'appliance_stats.sqlite')
    """
    return TableExporter(database, **kwargs).export(table_name, output_directory)
