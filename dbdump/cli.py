# dbdump/cli.py

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .coordinator import ExportCoordinator
from .defaults import settings
from .exceptions import ConfigError, DirectoryError, DiscoveryError
from .logging_utils import setup_logging

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid worker count: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"worker count must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='dbdump',
                                     description='Dump every table of a SQLite database to CSV files')
    parser.add_argument('-f', '--file', default=None,
                        help=f"SQLite database file (default: {settings['database']})")
    parser.add_argument('-l', '--log', default=None,
                        help='Log level. One of trace, debug, info, warn, error, none (default: info)')
    parser.add_argument('-d', '--dir', default=None,
                        help=f"Output directory (default: {settings['output_dir']})")
    parser.add_argument('-c', '--config', default=None,
                        help='YAML config file (default: ./dbdump.yml if present)')
    parser.add_argument('-w', '--workers', type=_positive_int, default=None,
                        help='Maximum tables exported at once (default: one per table)')
    parser.add_argument('--log-dir', default=None,
                        help='Also write a timestamped log file to this directory')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a dump from the command line.

    Returns:
        0 when the run completed, even if some tables failed; 1 when configuration,
        output directory creation or table discovery failed
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config,
                             database=args.file,
                             output_dir=args.dir,
                             log_level=args.log,
                             max_workers=args.workers,
                             log_dir=args.log_dir)
    except ConfigError as e:
        print(f"dbdump: {e}", file=sys.stderr)
        return 1

    setup_logging(config)
    logger.debug(f"{config!r}")

    try:
        ExportCoordinator(config).run()
    except (DirectoryError, DiscoveryError) as e:
        logger.error(f"Dump of {config.database} failed. {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
