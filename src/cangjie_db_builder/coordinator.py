"""
Asynchronous batch write coordination.

Batches are submitted to the storage executor without waiting. Each
submission returns a Future; its done-callback updates the in-flight count
and, once input is finished and nothing is in flight, releases ``wait``.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Protocol

from .batching import Batch
from .exceptions import WriteError

logger = logging.getLogger(__name__)


class BatchWriter(Protocol):
    def submit_batch_write(self, batch: Batch) -> 'Future[int]':
        ...


class InFlightCounter:
    """Thread-safe count of submitted but unacknowledged batches."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        with self._lock:
            if self._value == 0:
                raise RuntimeError("In-flight counter decremented below zero")
            self._value -= 1
            return self._value


class WriteCoordinator:
    """
    Submits batches to storage and tracks their completion.

    Failed writes are logged and counted but not retried; they do not stop
    the run.
    """

    def __init__(self, writer: BatchWriter):
        self.writer = writer
        self.in_flight = InFlightCounter()
        self.batches_submitted = 0
        self.batches_failed = 0
        self.records_written = 0
        self._stats_lock = threading.Lock()
        self._finished = threading.Event()
        self._done = threading.Event()

    def submit(self, batch: Batch) -> None:
        """Start an asynchronous write of ``batch``."""
        if self._finished.is_set():
            raise RuntimeError("Batch submitted after finish()")

        self.in_flight.increment()
        self.batches_submitted += 1
        try:
            future = self.writer.submit_batch_write(batch)
        except WriteError as e:
            self._record_failure(batch, e)
            self._release()
            return

        future.add_done_callback(lambda f: self._on_complete(batch, f))

    def finish(self) -> None:
        """Signal that no more batches will be submitted."""
        self._finished.set()
        if self.in_flight.value == 0:
            self._done.set()

    def wait(self) -> None:
        """Block until finish() was called and every write has completed."""
        self._done.wait()
        logger.info("All done, exiting")

    @property
    def is_done(self) -> bool:
        return self._done.is_set()

    def _on_complete(self, batch: Batch, future: 'Future[int]') -> None:
        error = future.exception()
        if error is not None:
            self._record_failure(batch, error)
        else:
            with self._stats_lock:
                self.records_written += future.result()
            logger.debug(f"Batch {batch.sequence} written ({len(batch)} records)")
        self._release()

    def _record_failure(self, batch: Batch, error: BaseException) -> None:
        with self._stats_lock:
            self.batches_failed += 1
        logger.warning(f"Error writing batch {batch.sequence} to the database: {error}")

    def _release(self) -> None:
        if self.in_flight.decrement() == 0 and self._finished.is_set():
            self._done.set()
