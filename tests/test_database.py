# tests/test_database.py
"""
Tests for read-only connections and table discovery.
"""

import logging
import sqlite3

import pytest

from dbdump.database import Database, connect_readonly, list_tables, quote_identifier
from dbdump.exceptions import DatabaseConnectionError, DiscoveryError


class TestQuoteIdentifier:

    def test_plain(self):
        assert quote_identifier('readings') == '"readings"'

    def test_embedded_quote(self):
        assert quote_identifier('odd"name') == '"odd""name"'


class TestConnectReadonly:
    """Test read-only connections."""

    def test_reads(self, sample_db):
        with connect_readonly(sample_db) as db:
            cursor = db.cursor()
            cursor.execute('SELECT COUNT(*) FROM readings')
            assert cursor.fetchone()[0] == 3
            assert db.database_name == sample_db.name
            assert str(db) == f'Database({sample_db.name}:sqlite)'

    def test_writes_rejected(self, sample_db):
        with connect_readonly(sample_db) as db:
            with pytest.raises(sqlite3.OperationalError, match='readonly'):
                db.execute('DELETE FROM readings')

    def test_missing_file(self, tmp_path):
        """A missing file is an error, not a new empty database."""
        path = tmp_path / 'missing.sqlite'
        with pytest.raises(DatabaseConnectionError):
            connect_readonly(path)
        assert not path.exists()

    def test_close_error_logged(self, caplog):
        class FailingConnection:
            def close(self):
                raise sqlite3.OperationalError('unable to close due to unfinalized statements')

        db = Database(FailingConnection(), 'stats.sqlite')
        with caplog.at_level(logging.ERROR):
            assert db.close() is False
        assert 'Error while closing db connection' in caplog.text


class TestListTables:
    """Test table discovery from sqlite_master."""

    def test_catalog_order(self, sample_db):
        assert list_tables(sample_db) == ['readings', 'devices', 'events']

    def test_logs_found_tables(self, sample_db, caplog):
        with caplog.at_level(logging.INFO):
            list_tables(sample_db)
        assert 'Found table name readings' in caplog.text

    def test_no_tables(self, make_db):
        assert list_tables(make_db({})) == []

    def test_internal_tables_excluded(self, make_db):
        """AUTOINCREMENT creates sqlite_sequence, which is not exported."""
        path = make_db({'counters': ('id INTEGER PRIMARY KEY AUTOINCREMENT, n INTEGER', [(None, 1)])})
        with connect_readonly(path) as db:
            names = [row[0] for row in db.execute("SELECT name FROM sqlite_master WHERE type='table'")]
        assert 'sqlite_sequence' in names
        assert list_tables(path) == ['counters']

    def test_views_excluded(self, make_db):
        path = make_db({'devices': ('id INTEGER', [(1,)])})
        connection = sqlite3.connect(path)
        connection.execute('CREATE VIEW device_ids AS SELECT id FROM devices')
        connection.commit()
        connection.close()

        assert list_tables(path) == ['devices']

    def test_missing_database(self, tmp_path):
        with pytest.raises(DiscoveryError, match='Cannot open database'):
            list_tables(tmp_path / 'missing.sqlite')

    def test_not_a_database(self, tmp_path):
        path = tmp_path / 'notes.sqlite'
        path.write_bytes(b'this is not a sqlite file, just some text long enough for a header' * 4)
        with pytest.raises(DiscoveryError):
            list_tables(path)

    def test_undecodable_name_skipped(self, make_db, caplog):
        """A catalog name that is not valid UTF-8 is skipped, later tables are still found."""
        path = make_db({name: ('v INTEGER', []) for name in ('t1', 't2', 't3')})
        connection = sqlite3.connect(path)
        connection.execute('PRAGMA writable_schema = ON')
        connection.execute(
            "UPDATE sqlite_master SET name = CAST(? AS TEXT), tbl_name = CAST(? AS TEXT), "
            "sql = CAST(? AS TEXT) WHERE name = 't2'",
            (b't\xff2', b't\xff2', b'CREATE TABLE "t\xff2" (v INTEGER)'))
        connection.commit()
        connection.close()

        with caplog.at_level(logging.ERROR):
            assert list_tables(path) == ['t1', 't3']
        assert 'Error while getting table name' in caplog.text

    def test_undecodable_query_error(self, sample_db, monkeypatch):
        class UndecodableCursor:
            def execute(self, query):
                raise UnicodeDecodeError('utf-8', b'\xff', 0, 1, 'invalid start byte')

        monkeypatch.setattr(Database, 'cursor', lambda self: UndecodableCursor())

        with pytest.raises(DiscoveryError, match='Cannot read table list'):
            list_tables(sample_db)
