# dbdump/database.py
"""
Read-only SQLite connections and table discovery.
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, List, Union

from .exceptions import DatabaseConnectionError, DiscoveryError

logger = logging.getLogger(__name__)

# Catalog query for user tables. SQLite reserves the sqlite_ prefix for internal tables.
# Names are read as blobs and decoded per row so one undecodable name cannot stall the cursor.
TABLES_QUERY = "SELECT CAST(name AS BLOB) FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier, doubling any embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


class Database:
    """
    Connection wrapper for one read-only SQLite connection.

    Each exporter thread opens its own Database; instances are never shared
    between threads. Attribute access not defined here is delegated to the
    underlying sqlite3 connection.
    """

    # Attributes stored locally, others delegated to _connection
    _local_attrs = ['_connection', 'path', 'database_name']

    def __init__(self, connection: sqlite3.Connection, path: Union[str, Path]):
        """
        Initialize Database wrapper.

        Args:
            connection: Open sqlite3 connection
            path: Database file the connection was opened on
        """
        self._connection = connection
        self.path = Path(path)
        self.database_name = os.path.basename(str(path))

    def __getattr__(self, key: str) -> Any:
        """Delegate attribute access to underlying connection."""
        return getattr(self._connection, key)

    def __setattr__(self, key: str, value: Any) -> None:
        if key in self._local_attrs:
            self.__dict__[key] = value
        else:
            setattr(self._connection, key, value)

    def __str__(self) -> str:
        return f'Database({self.database_name}:sqlite)'

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def cursor(self) -> sqlite3.Cursor:
        return self._connection.cursor()

    def close(self) -> bool:
        """
        Close the connection.

        A failure to close is logged rather than raised: by the time a connection
        is closed its data has already been read and written.

        Returns:
            True if the connection closed cleanly
        """
        try:
            self._connection.close()
            return True
        except sqlite3.Error as e:
            logger.error(f"Error while closing db connection. {e}")
            return False


def connect_readonly(database: Union[str, Path]) -> Database:
    """
    Open a read-only connection to a SQLite database file.

    The file is opened through a ``mode=ro`` URI, so a missing file is an error
    instead of silently creating an empty database.

    Raises:
        DatabaseConnectionError: If the file cannot be opened
    """
    path = Path(database)
    uri = f"{path.resolve().as_uri()}?mode=ro"
    try:
        connection = sqlite3.connect(uri, uri=True)
    except sqlite3.Error as e:
        raise DatabaseConnectionError(f"Cannot open database {path} read-only: {e}") from e
    logger.debug(f"Opened read-only connection to {path}")
    return Database(connection, path)


def list_tables(database: Union[str, Path]) -> List[str]:
    """
    List user tables of a SQLite database in catalog order.

    Internal ``sqlite_*`` tables are excluded. A catalog entry that cannot be
    read as a table name is logged and skipped.

    Args:
        database: SQLite database file

    Returns:
        Table names

    Raises:
        DiscoveryError: If the database cannot be opened or the catalog cannot be queried
    """
    try:
        db = connect_readonly(database)
    except DatabaseConnectionError as e:
        raise DiscoveryError(str(e)) from e

    table_names = []
    with db:
        try:
            cursor = db.cursor()
            cursor.execute(TABLES_QUERY)
        except (sqlite3.Error, UnicodeError) as e:
            raise DiscoveryError(f"Cannot read table list from {database}: {e}") from e

        while True:
            try:
                row = cursor.fetchone()
            except sqlite3.Error as e:
                logger.error(f"Error while getting table name {e}")
                break
            if row is None:
                break
            raw_name = row[0]
            if not isinstance(raw_name, bytes) or not raw_name:
                logger.error(f"Error while getting table name: unexpected catalog value {raw_name!r}")
                continue
            try:
                table_name = raw_name.decode('utf-8')
            except UnicodeDecodeError as e:
                logger.error(f"Error while getting table name {raw_name!r}: {e}")
                continue
            logger.info(f"Found table name {table_name}")
            table_names.append(table_name)

    return table_names
