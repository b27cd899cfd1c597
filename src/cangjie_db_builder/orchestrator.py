"""
Main orchestrator for the database builder.

Drives table files through the reader and batch accumulator, submits batches
to the write coordinator and shuts the database down once every write has
completed.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from .batching import BatchAccumulator
from .config import Config
from .coordinator import WriteCoordinator
from .database import SCHEMA_VERSION, CharacterDatabase, sqlite_uri
from .exceptions import AlreadyExistsError, BuilderError, UsageError
from .reader import TableReader

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    IDLE = 'idle'
    MIGRATING = 'migrating'
    READING_FILE = 'reading_file'
    FLUSHING = 'flushing'
    AWAITING_COMPLETION = 'awaiting_completion'
    CLOSED = 'closed'
    FAILED = 'failed'


@dataclass
class ProcessingStats:
    """Statistics for processing run."""

    files_processed: int = 0
    lines_processed: int = 0
    records_discarded: int = 0
    records_skipped: int = 0
    batches_submitted: int = 0
    batches_failed: int = 0
    records_written: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0


class CharacterDatabaseOrchestrator:
    """
    Builds a character database from table files.

    Handles the complete workflow:
    1. Create the database and its schema
    2. Parse every table file in order, batching the records
    3. Wait for all batch writes and close the database
    """

    def __init__(
        self,
        config: Config,
        destination: str,
        database: Optional[CharacterDatabase] = None
    ):
        """
        Initialize orchestrator.

        Args:
            config: Configuration object
            destination: Path of the database file to create
            database: Storage adapter (default: a CharacterDatabase built from config)
        """
        self.config = config
        self.destination = destination
        self.processing_config = config.get_processing_config()

        if database is None:
            database = CharacterDatabase(
                workers=self.processing_config['workers'],
                **config.get_database_config()
            )
        self.database = database

        self.state = PipelineState.IDLE
        self.stats = ProcessingStats()

    def _set_state(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def process_all(self, inputs: Sequence[str]) -> ProcessingStats:
        """
        Build the database from the given table files.

        Args:
            inputs: Table file paths, processed in order

        Returns:
            Processing statistics

        Raises:
            AlreadyExistsError: If the destination already exists
            BuilderError: On the first fatal error, after flushing and
                closing the database
        """
        if not inputs:
            raise UsageError("At least one table file is required")
        if os.path.exists(self.destination):
            self._set_state(PipelineState.FAILED)
            raise AlreadyExistsError(self.destination)

        self.stats = ProcessingStats()
        self.stats.start_time = datetime.now()

        coordinator = WriteCoordinator(self.database)
        accumulator = BatchAccumulator(
            coordinator.submit,
            batch_size=self.processing_config['batch_size']
        )

        error: Optional[BuilderError] = None
        try:
            self._set_state(PipelineState.MIGRATING)
            self.database.open(sqlite_uri(self.destination))
            self.database.migrate_schema(SCHEMA_VERSION)

            for tablepath in inputs:
                self._set_state(PipelineState.READING_FILE)
                self.process_file(tablepath, accumulator)
        except BuilderError as e:
            error = e
            self._set_state(PipelineState.FAILED)
        except BaseException:
            self._set_state(PipelineState.FAILED)
            raise
        finally:
            failed = self.state is PipelineState.FAILED
            # Keep what was already parsed even when aborting
            if self.database.is_open:
                if not failed:
                    self._set_state(PipelineState.FLUSHING)
                accumulator.flush()
                coordinator.finish()
                if not failed:
                    self._set_state(PipelineState.AWAITING_COMPLETION)
                coordinator.wait()

            self.stats.batches_submitted = coordinator.batches_submitted
            self.stats.batches_failed = coordinator.batches_failed
            self.stats.records_written = coordinator.records_written

            error = self._close(error)
            self.stats.end_time = datetime.now()

        if error is not None:
            raise error

        self._set_state(PipelineState.CLOSED)
        self._log_summary()
        return self.stats

    def process_file(self, tablepath: str, accumulator: BatchAccumulator) -> None:
        """
        Parse one table file into the accumulator.

        Args:
            tablepath: Path to a table-<version>.txt file
            accumulator: Receives every record kept from the file
        """
        started = datetime.now()
        reader = TableReader(tablepath)
        logger.info(f"Reading {tablepath} (version {reader.version.nick})")

        try:
            for record in reader.iter_records(self.processing_config['skip_malformed']):
                accumulator.add(record)
        finally:
            self.stats.lines_processed += reader.lines_processed
            self.stats.records_discarded += reader.records_discarded
            self.stats.records_skipped += reader.records_skipped

        self.stats.files_processed += 1
        elapsed = (datetime.now() - started).total_seconds()
        logger.info(f"Time taken to parse {tablepath}: {elapsed:.6f} seconds")

    def _close(self, error: Optional[BuilderError]) -> Optional[BuilderError]:
        """Close the database, returning the error to report (the first one wins)."""
        try:
            self.database.close()
        except BuilderError as e:
            logger.warning(f"{e}")
            if error is None:
                self._set_state(PipelineState.FAILED)
                return e
        return error

    def _log_summary(self) -> None:
        logger.info("Processing complete")
        logger.info(f"Files processed: {self.stats.files_processed}")
        logger.info(f"Records written: {self.stats.records_written}")
        if self.stats.batches_failed:
            logger.warning(f"{self.stats.batches_failed} batch(es) failed to write")
        logger.info(f"Total time taken: {self.stats.elapsed_time():.6f} seconds")
