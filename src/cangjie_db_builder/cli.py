"""
Command-line interface for the Cangjie database builder.

Usage:
    cangjie-db-builder RESULTDB SOURCEFILE [SOURCEFILE ...]
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import Config
from .exceptions import BuilderError
from .orchestrator import CharacterDatabaseOrchestrator, ProcessingStats

DEFAULT_LOG_FILE = 'cangjie_db_builder.log'


def setup_logging(verbose: bool = False, log_file: Optional[str] = DEFAULT_LOG_FILE) -> None:
    """
    Setup logging configuration.

    Args:
        verbose: Enable verbose (DEBUG) logging
        log_file: Also log to this file (None or empty to disable)
    """
    level = logging.DEBUG if verbose else logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cangjie-db-builder',
        description='Build a Cangjie character database from table files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build a database from the version 3 and 5 tables
  cangjie-db-builder cangjie.db data/table-3.txt data/table-5.txt

  # Smaller batches, skipping unparseable lines
  cangjie-db-builder --batch-size 50 --skip-malformed cangjie.db data/table-2010.txt

Environment variables:
  CANGJIE_DB_CONFIG  Configuration file (default: config.yaml)
  BATCH_SIZE         Records per write transaction (default: 100)
  WRITE_WORKERS      Number of writer threads (default: 1)
  SKIP_MALFORMED     Skip unparseable lines instead of aborting (default: false)
  DB_ECHO            Log every SQL statement (default: false)
        """
    )

    parser.add_argument('destination', metavar='RESULTDB',
                        help='Database file to create (must not exist)')
    parser.add_argument('inputs', metavar='SOURCEFILE', nargs='+',
                        help='Table files named table-<version>.txt')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to configuration file (default: config.yaml)')
    parser.add_argument('--batch-size', type=int,
                        help='Records per write transaction (overrides config)')
    parser.add_argument('--workers', type=int,
                        help='Number of writer threads (overrides config)')
    parser.add_argument('--skip-malformed', action='store_true',
                        help='Log and skip unparseable lines instead of aborting')
    parser.add_argument('--log-file', type=str, default=DEFAULT_LOG_FILE,
                        help=f'Log file (default: {DEFAULT_LOG_FILE}, empty to disable)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    return parser


def print_summary(stats: ProcessingStats) -> None:
    print("\n" + "="*60)
    print("Processing Complete")
    print("="*60)
    print(f"Files processed: {stats.files_processed}")
    print(f"Lines processed: {stats.lines_processed}")
    print(f"Records discarded: {stats.records_discarded}")
    print(f"Records skipped: {stats.records_skipped}")
    print(f"Batches submitted: {stats.batches_submitted}")
    print(f"Batches failed: {stats.batches_failed}")
    print(f"Records written: {stats.records_written}")
    print(f"Elapsed time: {stats.elapsed_time():.2f} seconds")
    print("="*60)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code: 0 for success, 1 if the destination exists or on bad
        input, 2 (from argparse) on missing arguments, 66 (EX_NOINPUT) for a
        missing table file, the SQLite or OS error code otherwise
    """
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.log_file)
    logger = logging.getLogger(__name__)

    try:
        config = Config(args.config)

        # Override config with CLI arguments
        if args.batch_size is not None:
            config.set('processing', 'batch_size', args.batch_size)
        if args.workers is not None:
            config.set('processing', 'workers', args.workers)
        if args.skip_malformed:
            config.set('processing', 'skip_malformed', True)

        orchestrator = CharacterDatabaseOrchestrator(config, args.destination)
        stats = orchestrator.process_all(args.inputs)
        print_summary(stats)
        return 0

    except BuilderError as e:
        logger.error(f"{e}")
        return e.exit_code
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
