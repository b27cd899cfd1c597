"""
Groups records into fixed-size batches for the writer.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List

from .models import CharacterRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


@dataclass
class Batch:
    """Records written to the database in one transaction."""

    sequence: int
    records: List[CharacterRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)


class BatchAccumulator:
    """
    Collects records and hands off a sealed batch every ``batch_size`` records.

    A new batch is started as soon as one is sealed, so reading never waits
    on a write. ``flush`` hands off the remainder and never an empty batch.
    """

    def __init__(self, sink: Callable[[Batch], None], batch_size: int = DEFAULT_BATCH_SIZE):
        """
        Args:
            sink: Called with each sealed batch
            batch_size: Records per batch

        Raises:
            ValueError: If batch_size is smaller than 1
        """
        if batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {batch_size}")
        self.sink = sink
        self.batch_size = batch_size
        self.batches_sealed = 0
        self.records_added = 0
        self._current = Batch(sequence=0)

    def add(self, record: CharacterRecord) -> None:
        self._current.records.append(record)
        self.records_added += 1
        if len(self._current) >= self.batch_size:
            self._seal()

    def flush(self) -> None:
        """Hand off the current batch if it holds any records."""
        if self._current.records:
            self._seal()

    def _seal(self) -> None:
        batch = self._current
        self.batches_sealed += 1
        self._current = Batch(sequence=self.batches_sealed)
        logger.debug(f"Sealed batch {batch.sequence} with {len(batch)} records")
        self.sink(batch)
