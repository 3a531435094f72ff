# tests/conftest.py
"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sqlite3

import pytest

from dbdump.config import ExportConfig
from dbdump.database import quote_identifier


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging() rewires the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def make_db(tmp_path):
    """
    Factory building a SQLite file from ``{table_name: (column_defs, rows)}``.

    Tables are created in dict order, which is also their catalog order.
    """
    def _make_db(tables, name='source.sqlite'):
        path = tmp_path / name
        connection = sqlite3.connect(path)
        try:
            # forces the file header to be written even with no tables
            connection.execute('PRAGMA user_version = 1')
            for table_name, (column_defs, rows) in tables.items():
                connection.execute(f"CREATE TABLE {quote_identifier(table_name)} ({column_defs})")
                if rows:
                    params = ', '.join('?' for _ in rows[0])
                    connection.executemany(
                        f"INSERT INTO {quote_identifier(table_name)} VALUES ({params})", rows)
            connection.commit()
        finally:
            connection.close()
        return path

    return _make_db


@pytest.fixture
def sample_tables():
    """Appliance statistics tables covering every storage class."""
    return {
        'readings': ('id INTEGER, sm_timestamp INTEGER, value REAL, note TEXT', [
            (1, 0, 1.5, 'first'),
            (2, 1704164645, -0.25, 'a,b'),
            (3, 60, None, None),
        ]),
        'devices': ('id INTEGER PRIMARY KEY, name TEXT, firmware BLOB', [
            (1, 'fridge', b'\x01\x02\xff'),
            (2, 'oven', None),
        ]),
        'events': ('timestamp TEXT, kind TEXT', [
            ('0', 'boot'),
            ('86400', 'tick'),
        ]),
    }


@pytest.fixture
def sample_db(make_db, sample_tables):
    return make_db(sample_tables)


@pytest.fixture
def broken_tables(sample_tables):
    """Sample tables plus one whose second row has an unparseable timestamp."""
    tables = dict(sample_tables)
    tables['broken'] = ('sm_timestamp TEXT, v INTEGER', [
        ('10', 1),
        ('not-a-time', 2),
        ('20', 3),
    ])
    return tables


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / 'dump'


@pytest.fixture
def export_config(sample_db, output_dir):
    return ExportConfig(database=sample_db, output_dir=output_dir, log_level='debug')


@pytest.fixture
def expected_files():
    """Expected dump file contents for sample_tables."""
    return {
        'readings': (
            'id,sm_timestamp,timestamp_parsed,value,note\n'
            '1,0,1970-01-01T00:00:00Z,1.5,first\n'
            '2,1704164645,2024-01-02T03:04:05Z,-0.25,"a,b"\n'
            '3,60,1970-01-01T00:01:00Z,null,null\n'
        ),
        'devices': (
            'id,name,firmware\n'
            '1,fridge,"[1, 2, 255]"\n'
            '2,oven,null\n'
        ),
        'events': (
            'timestamp,timestamp_parsed,kind\n'
            '0,1970-01-01T00:00:00Z,boot\n'
            '86400,1970-01-02T00:00:00Z,tick\n'
        ),
    }
