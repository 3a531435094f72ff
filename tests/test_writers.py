# tests/test_writers.py
"""
Tests for dbdump writers.
"""

import errno
import io
import logging

import pytest

from dbdump.exceptions import EncodingError, FileCreateError, FileWriteError
from dbdump.writers import CSVWriter


class FullDisk(io.StringIO):
    def write(self, text):
        raise OSError(errno.ENOSPC, 'No space left on device')


class FailingFlush(io.StringIO):
    def close(self):
        super().close()
        raise OSError(errno.EIO, 'Input/output error')


@pytest.fixture
def fake_file(monkeypatch):
    """Replace the file opened by BaseWriter with an instance of the given class."""
    def _fake_file(file_class):
        monkeypatch.setattr('dbdump.writers.base.open', lambda *args, **kwargs: file_class(), raising=False)
    return _fake_file


class TestCSVWriter:
    """Test exclusive-create CSV output."""

    def test_header_and_records(self, tmp_path):
        output_file = tmp_path / 'readings.csv'

        with CSVWriter(output_file, table_name='readings') as writer:
            writer.write_header(['id', 'note'])
            writer.write_record(['1', 'plain'])
            writer.write_record(['2', 'with, comma'])
            writer.write_record(['3', 'with "quotes"'])

        assert writer.row_count == 3
        assert writer.columns == ['id', 'note']
        assert writer.closed
        assert output_file.read_bytes() == (
            b'id,note\n'
            b'1,plain\n'
            b'2,"with, comma"\n'
            b'3,"with ""quotes"""\n'
        )

    def test_custom_line_terminator(self, tmp_path):
        output_file = tmp_path / 'out.csv'

        with CSVWriter(output_file, line_terminator='\r\n') as writer:
            writer.write_header(['a'])
            writer.write_record(['1'])

        assert output_file.read_bytes() == b'a\r\n1\r\n'

    def test_csv_kwargs(self, tmp_path):
        output_file = tmp_path / 'out.tsv'

        with CSVWriter(output_file, delimiter='\t') as writer:
            writer.write_header(['a', 'b'])

        assert output_file.read_text(encoding='utf-8') == 'a\tb\n'

    def test_utf8_output(self, tmp_path):
        output_file = tmp_path / 'out.csv'

        with CSVWriter(output_file) as writer:
            writer.write_record(['Grüße', '日本'])

        assert output_file.read_text(encoding='utf-8') == 'Grüße,日本\n'

    def test_existing_file_not_overwritten(self, tmp_path):
        output_file = tmp_path / 'readings.csv'
        output_file.write_text('keep me\n')

        with pytest.raises(FileCreateError, match='already exists') as exc_info:
            CSVWriter(output_file, table_name='readings').open()

        assert exc_info.value.table_name == 'readings'
        assert output_file.read_text() == 'keep me\n'

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileCreateError, match='Cannot create output file'):
            CSVWriter(tmp_path / 'missing' / 'out.csv').open()

    def test_header_after_rows(self, tmp_path):
        with CSVWriter(tmp_path / 'out.csv') as writer:
            writer.write_record(['1'])
            with pytest.raises(ValueError):
                writer.write_header(['a'])

    def test_write_before_open(self, tmp_path):
        writer = CSVWriter(tmp_path / 'out.csv')
        with pytest.raises(ValueError, match='is not open'):
            writer.write_record(['1'])

    def test_unencodable_text(self, tmp_path):
        """Lone surrogates cannot be written as UTF-8."""
        output_file = tmp_path / 'out.csv'

        with CSVWriter(output_file, table_name='bad') as writer:
            writer.write_header(['a'])
            with pytest.raises(EncodingError) as exc_info:
                writer.write_record(['\udc80'])

        assert exc_info.value.table_name == 'bad'
        assert writer.row_count == 0

    def test_write_failure(self, tmp_path, fake_file):
        fake_file(FullDisk)

        with CSVWriter(tmp_path / 'out.csv', table_name='readings') as writer:
            with pytest.raises(FileWriteError, match='No space left') as exc_info:
                writer.write_header(['a'])

        assert exc_info.value.table_name == 'readings'
        assert writer.closed

    def test_close_failure(self, tmp_path, fake_file):
        fake_file(FailingFlush)

        with pytest.raises(FileWriteError, match='Cannot close output file') as exc_info:
            with CSVWriter(tmp_path / 'out.csv', table_name='readings') as writer:
                writer.write_header(['a'])

        assert exc_info.value.table_name == 'readings'
        assert writer.closed

    def test_close_failure_keeps_first_error(self, tmp_path, fake_file, caplog):
        class FullAndFailing(FullDisk, FailingFlush):
            pass

        fake_file(FullAndFailing)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(FileWriteError, match='Cannot write record'):
                with CSVWriter(tmp_path / 'out.csv') as writer:
                    writer.write_record(['1'])

        assert 'Cannot close output file' in caplog.text
