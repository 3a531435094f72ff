# dbdump/writers/base.py
"""
Base class for dump file writers with exclusive-create file handling.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..exceptions import FileCreateError, FileWriteError

logger = logging.getLogger(__name__)


class BaseWriter(ABC):
    """
    Abstract base class for streaming dump writers.

    A writer owns one output file. The file is created in exclusive mode: an
    existing file is never overwritten, and opening fails instead. Records are
    written one at a time as they arrive, so a failure part way through leaves
    the records already written in place.

    Parameters
    ----------
    filename : str or Path
        Output file. Must not exist yet.
    encoding : str, default 'utf-8'
        File encoding
    table_name : str, optional
        Table being written, used to tag errors

    Attributes
    ----------
    columns : List[str]
        Header written by ``write_header()``, None until then

    Example
    -------
    ::

        with CSVWriter('sqlite_dump/readings.csv') as writer:
            writer.write_header(['id', 'value'])
            writer.write_record(['1', '42'])

    Notes
    -----
    Subclasses must implement:

    * ``_open_writer()`` - Prepare the format-specific writer on the open file
    * ``_write_record()`` - Write one record of text fields
    """

    def __init__(self,
                 filename: Union[str, Path],
                 encoding: str = 'utf-8',
                 table_name: Optional[str] = None):
        self.filename = Path(filename)
        self.encoding = encoding
        self.table_name = table_name
        self.columns: Optional[List[str]] = None
        self._file = None
        self._row_num = 0

    @property
    def row_count(self) -> int:
        """ Returns the number of data rows written."""
        return self._row_num

    @property
    def closed(self) -> bool:
        return self._file is None

    def open(self) -> 'BaseWriter':
        """
        Create the output file.

        Raises:
            FileCreateError: If the file already exists or cannot be created
        """
        try:
            self._file = open(self.filename, 'x', encoding=self.encoding, newline='')
        except FileExistsError as e:
            raise FileCreateError(f"Output file already exists: {self.filename}", self.table_name) from e
        except OSError as e:
            raise FileCreateError(f"Cannot create output file {self.filename}: {e}", self.table_name) from e
        logger.debug(f"Created {self.filename}")
        self._open_writer(self._file)
        return self

    def close(self) -> None:
        """
        Flush and close the output file.

        Raises:
            FileWriteError: If buffered records cannot be flushed to disk
        """
        if self._file is not None:
            try:
                self._file.close()
            except OSError as e:
                raise FileWriteError(f"Cannot close output file {self.filename}: {e}", self.table_name) from e
            finally:
                self._file = None

    def __enter__(self):
        if self._file is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
            return
        # keep the original error, the close failure is secondary
        try:
            self.close()
        except FileWriteError as e:
            logger.error(f"Error while closing {self.filename}. {e}")

    def write_header(self, columns: Sequence[str]) -> None:
        """Write the header record. Must precede all data records."""
        if self._row_num:
            raise ValueError("Header must be written before any data rows")
        self.columns = list(columns)
        self._write_record(self.columns)

    def write_record(self, fields: Sequence[str]) -> None:
        """Write one data record."""
        self._write_record(fields)
        self._row_num += 1

    @abstractmethod
    def _open_writer(self, file_obj) -> None:
        """
        Prepare format-specific state on the newly created file.

        Args:
            file_obj: Open text file
        """
        pass

    @abstractmethod
    def _write_record(self, fields: Sequence[str]) -> None:
        pass
