"""
Dump file writers.

Writers create their output file exclusively and stream records into it one at
a time. CSV is the only dump format.

Example
-------
::
    from dbdump.writers import CSVWriter

    with CSVWriter('sqlite_dump/readings.csv', table_name='readings') as writer:
        writer.write_header(['id', 'sm_timestamp', 'timestamp_parsed'])
        writer.write_record(['1', '0', '1970-01-01T00:00:00Z'])
"""

from .base import BaseWriter
from .csv import CSVWriter

__all__ = ['BaseWriter', 'CSVWriter']
