# dbdump/encoder.py
"""
Row encoding: typed SQLite cells to text fields.

Every cell is classified into one of the SQLite storage classes and converted
to its text form. A designated epoch-seconds timestamp column is followed by a
derived RFC 3339 UTC field.
"""

import datetime as dt
import re
from typing import Any, List, Optional, Sequence

from .defaults import settings
from .exceptions import EncodingError, ParseError

# Optionally signed base-10 integer, nothing else
_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')


class CellType:
    """
    Storage classes a SQLite cell can hold.

    Example:
        >>> CellType.of(b'\\x00')
        'binary'
        >>> CellType.of(None)
        'null'
    """
    TEXT = 'text'
    INTEGER = 'integer'
    REAL = 'real'
    BINARY = 'binary'
    NULL = 'null'

    @classmethod
    def of(cls, value: Any) -> str:
        """
        Return the type tag of a value as returned by sqlite3.

        Raises:
            EncodingError: If the value is not one of the SQLite storage types
        """
        if value is None:
            return cls.NULL
        elif isinstance(value, str):
            return cls.TEXT
        elif isinstance(value, int):
            return cls.INTEGER
        elif isinstance(value, float):
            return cls.REAL
        elif isinstance(value, (bytes, bytearray, memoryview)):
            return cls.BINARY
        raise EncodingError(f"Unsupported cell type {type(value).__name__}")


def encode_value(value: Any, null_string: Optional[str] = None) -> str:
    """
    Convert one cell to its text representation.

    - text: unchanged
    - integer: decimal string
    - real: Python's default float formatting (``1.5``, ``1e+100``)
    - binary: list of byte values, ``b'\\x01\\xff'`` -> ``[1, 255]``
    - null: ``null_string`` (``'null'`` by default)

    Args:
        value: Cell value
        null_string: Text for NULL. Defaults to settings['null_string'].

    Returns:
        Text representation
    """
    cell_type = CellType.of(value)
    if cell_type == CellType.TEXT:
        return value
    elif cell_type == CellType.INTEGER:
        return str(int(value))
    elif cell_type == CellType.REAL:
        return str(value)
    elif cell_type == CellType.BINARY:
        return str(list(bytes(value)))
    else:
        return settings['null_string'] if null_string is None else null_string


def parse_timestamp(text: str) -> str:
    """
    Interpret text as Unix epoch seconds and format it as an RFC 3339 UTC timestamp.

    Example:
        >>> parse_timestamp('0')
        '1970-01-01T00:00:00Z'

    Raises:
        ParseError: If text is not an integer or the instant is outside years 1-9999
    """
    if not isinstance(text, str) or not _INTEGER_PATTERN.fullmatch(text):
        raise ParseError(f"Invalid epoch timestamp {text!r}: not an integer")
    try:
        instant = dt.datetime(1970, 1, 1) + dt.timedelta(seconds=int(text))
    except (OverflowError, ValueError) as e:
        raise ParseError(f"Epoch timestamp {text} is out of range: {e}") from e
    return instant.isoformat(timespec='seconds') + 'Z'


class ColumnSchema:
    """
    Column layout of one dumped table.

    Holds the source column names and the position of the timestamp column: the
    first column whose name is one of the timestamp aliases. When there is one,
    the derived column is inserted right after it in the header and in every row.

    Attributes
    ----------
    columns : List[str]
        Source column names, in query order
    timestamp_position : int or None
        Index of the timestamp column in ``columns``
    """

    def __init__(self, columns: Sequence[str], timestamp_position: Optional[int] = None,
                 parsed_column: Optional[str] = None):
        self.columns = tuple(columns)
        if timestamp_position is not None and not 0 <= timestamp_position < len(self.columns):
            raise ValueError(f"Timestamp position {timestamp_position} outside {len(self.columns)} columns")
        self.timestamp_position = timestamp_position
        self.parsed_column = parsed_column or settings['timestamp_parsed_column']

    @classmethod
    def from_columns(cls, columns: Sequence[str], timestamp_columns: Optional[Sequence[str]] = None,
                     parsed_column: Optional[str] = None) -> 'ColumnSchema':
        """Build a schema, locating the timestamp column by name."""
        aliases = set(timestamp_columns or settings['timestamp_columns'])
        position = next((i for i, name in enumerate(columns) if name in aliases), None)
        return cls(columns, position, parsed_column)

    @property
    def header(self) -> List[str]:
        header = list(self.columns)
        if self.timestamp_position is not None:
            header.insert(self.timestamp_position + 1, self.parsed_column)
        return header

    @property
    def width(self) -> int:
        """Number of fields in each output record."""
        return len(self.columns) + (0 if self.timestamp_position is None else 1)

    def __repr__(self) -> str:
        return f"ColumnSchema({list(self.columns)!r}, timestamp_position={self.timestamp_position})"


class RowEncoder:
    """
    Encodes source rows for one table into output records.

    Args:
        schema: Column layout of the table
        null_string: Text for NULL cells
    """

    def __init__(self, schema: ColumnSchema, null_string: Optional[str] = None):
        self.schema = schema
        self.null_string = settings['null_string'] if null_string is None else null_string

    def encode(self, row: Sequence[Any]) -> List[str]:
        """
        Encode one row.

        Raises:
            ParseError: If the timestamp cell is not a valid epoch value
            EncodingError: If the row width does not match the schema or a cell has an unknown type
        """
        if len(row) != len(self.schema.columns):
            raise EncodingError(f"Row has {len(row)} cells, expected {len(self.schema.columns)}")

        fields = []
        for i, value in enumerate(row):
            text = encode_value(value, self.null_string)
            fields.append(text)
            if i == self.schema.timestamp_position:
                fields.append(parse_timestamp(text))
        return fields
