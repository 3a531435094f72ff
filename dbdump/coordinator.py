# dbdump/coordinator.py
"""
Concurrent export of every table in a database.

One worker thread is started per table (optionally capped by max_workers). A
table that fails is reported and the others carry on; the run only fails when
the output directory cannot be created or the table list cannot be read.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional

from .config import ExportConfig
from .database import list_tables
from .exceptions import DirectoryError
from .exporter import ExportOutcome, TableExporter

logger = logging.getLogger(__name__)


class ExportSummary:
    """Outcomes of one run, in completion order, and its total duration."""

    def __init__(self, outcomes: Optional[List[ExportOutcome]] = None, elapsed: float = 0.0):
        self.outcomes = list(outcomes or [])
        self.elapsed = elapsed

    @property
    def succeeded(self) -> List[ExportOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[ExportOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def crashed(self) -> List[ExportOutcome]:
        return [o for o in self.outcomes if o.crashed]

    @property
    def row_count(self) -> int:
        return sum(o.row_count for o in self.succeeded)

    def get(self, table_name: str) -> Optional[ExportOutcome]:
        return next((o for o in self.outcomes if o.table_name == table_name), None)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __repr__(self) -> str:
        return (f"ExportSummary(tables={len(self.outcomes)}, succeeded={len(self.succeeded)}, "
                f"failed={len(self.failed)}, elapsed={self.elapsed:.3f}s)")


class ExportCoordinator:
    """
    Runs a full database dump.

    Steps: create the output directory, discover tables, export every table
    concurrently, wait for all of them and log a summary.

    Parameters
    ----------
    config : ExportConfig
        Run configuration
    exporter : TableExporter, optional
        Exporter used for every table. Built from config if omitted.

    Example
    -------
    ::

        config = load_config(database='appliance_stats.sqlite', output_dir='sqlite_dump')
        summary = ExportCoordinator(config).run()
        for outcome in summary.failed:
            print(outcome.table_name, outcome.cause)
    """

    def __init__(self, config: ExportConfig, exporter: Optional[TableExporter] = None):
        self.config = config
        self.exporter = exporter or TableExporter.from_config(config)

    def prepare_output_dir(self) -> Path:
        """
        Create the output directory and any missing parents.

        Raises:
            DirectoryError: If the directory cannot be created
        """
        output_dir = Path(self.config.output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(f"Cannot create output directory {output_dir}: {e}") from e
        return output_dir

    def run(self) -> ExportSummary:
        """
        Export every table.

        Returns:
            ExportSummary with one outcome per discovered table

        Raises:
            DirectoryError: If the output directory cannot be created
            DiscoveryError: If the table list cannot be read
        """
        start_time = time.perf_counter()
        output_dir = self.prepare_output_dir()
        table_names = list_tables(self.config.database)

        outcomes = []
        if table_names:
            workers = self.config.max_workers or len(table_names)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='dbdump') as executor:
                futures = {}
                for table_name in table_names:
                    future = executor.submit(self.exporter.export, str(table_name), output_dir)
                    futures[future] = table_name
                    logger.debug(f"Thread {table_name} spawned.")

                for future in as_completed(futures):
                    outcome = self._collect(future, futures[future])
                    outcomes.append(outcome)

        summary = ExportSummary(outcomes, time.perf_counter() - start_time)
        self._log_summary(summary)
        return summary

    def _collect(self, future, table_name: str) -> ExportOutcome:
        """Turn a finished future into an outcome, containing worker crashes."""
        try:
            outcome = future.result()
        except Exception as e:
            logger.exception(f"Worker for table {table_name} crashed: {e}")
            return ExportOutcome.failed(table_name, e, crashed=True)

        if outcome.success:
            logger.debug(f"Table {table_name} finished: {outcome.row_count} rows written to {outcome.path}")
        else:
            logger.debug(f"Table {table_name} failed: {outcome.error_type}")
        return outcome

    def _log_summary(self, summary: ExportSummary) -> None:
        logger.info(f"{len(summary)} tables processed: {len(summary.succeeded)} succeeded, "
                    f"{len(summary.failed)} failed")
        for outcome in summary.failed:
            logger.error(f"Table {outcome.table_name} was not exported. {outcome.error_type}: {outcome.cause}")
        logger.info(f"Dump {self.config.database} completed. Elapsed {summary.elapsed * 1000:.0f} ms")


def export_database(config: ExportConfig) -> ExportSummary:
    """
    Dump every table of ``config.database`` into ``config.output_dir``.

    Example:
        summary = export_database(load_config(database='appliance_stats.sqlite'))
    """
    return ExportCoordinator(config).run()
