# dbdump/writers/csv.py

import csv
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from .base import BaseWriter
from ..defaults import settings
from ..exceptions import EncodingError, FileWriteError

logger = logging.getLogger(__name__)


class CSVWriter(BaseWriter):
    """CSV writer class that extends BaseWriter."""

    def __init__(self,
                 filename: Union[str, Path],
                 encoding: str = 'utf-8',
                 table_name: Optional[str] = None,
                 line_terminator: Optional[str] = None,
                 **csv_kwargs):
        """
        Initialize CSV writer.

        Args:
            filename: Output filename. Created exclusively, never overwritten.
            encoding: File encoding
            table_name: Table being dumped, used to tag errors
            line_terminator: Record terminator. Defaults to settings['line_terminator'].
            **csv_kwargs: Additional arguments passed to csv.writer
        """
        super().__init__(filename, encoding=encoding, table_name=table_name)
        csv_kwargs.setdefault('lineterminator', line_terminator or settings['line_terminator'])
        self._format_kwargs = csv_kwargs
        self._writer = None

    def _open_writer(self, file_obj) -> None:
        self._writer = csv.writer(file_obj, **self._format_kwargs)

    def _write_record(self, fields: Sequence[str]) -> None:
        if self._writer is None:
            raise ValueError(f"{self.filename} is not open")
        try:
            self._writer.writerow(fields)
        except (csv.Error, UnicodeError) as e:
            raise EncodingError(f"Cannot write record to {self.filename}: {e}", self.table_name) from e
        except OSError as e:
            raise FileWriteError(f"Cannot write record to {self.filename}: {e}", self.table_name) from e
