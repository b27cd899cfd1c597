"""
Tests for the asynchronous write coordinator.

The fake writer hands out futures that the test completes by hand, so
completion order and timing are fully controlled.
"""

import threading
from concurrent.futures import Future

import pytest

from cangjie_db_builder.batching import Batch
from cangjie_db_builder.coordinator import InFlightCounter, WriteCoordinator
from cangjie_db_builder.exceptions import WriteError


class ManualWriter:
    """Returns an unresolved future for every submitted batch."""

    def __init__(self):
        self.futures = []

    def submit_batch_write(self, batch):
        future = Future()
        self.futures.append(future)
        return future


class RejectingWriter:
    def submit_batch_write(self, batch):
        raise WriteError("Database is not open")


def _batch(sequence, size=1):
    return Batch(sequence=sequence, records=[object()] * size)


def test_counter_increments_and_decrements():
    counter = InFlightCounter()
    assert counter.increment() == 1
    assert counter.increment() == 2
    assert counter.decrement() == 1
    assert counter.value == 1


def test_counter_cannot_go_negative():
    with pytest.raises(RuntimeError):
        InFlightCounter().decrement()


def test_counter_is_thread_safe():
    counter = InFlightCounter()

    def work():
        for _ in range(1000):
            counter.increment()
            counter.decrement()
        for _ in range(100):
            counter.increment()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counter.value == 800


def test_not_done_until_finish_is_called():
    writer = ManualWriter()
    coordinator = WriteCoordinator(writer)

    coordinator.submit(_batch(0))
    writer.futures[0].set_result(1)

    assert coordinator.in_flight.value == 0
    assert not coordinator.is_done

    coordinator.finish()
    assert coordinator.is_done


def test_delayed_completion_holds_shutdown():
    writer = ManualWriter()
    coordinator = WriteCoordinator(writer)

    coordinator.submit(_batch(0, size=100))
    coordinator.submit(_batch(1, size=50))
    coordinator.finish()

    # Complete out of submission order
    writer.futures[1].set_result(50)
    assert coordinator.in_flight.value == 1
    assert not coordinator.is_done

    waiter = threading.Thread(target=coordinator.wait)
    waiter.start()
    waiter.join(timeout=0.2)
    assert waiter.is_alive()

    writer.futures[0].set_result(100)
    waiter.join(timeout=5)

    assert not waiter.is_alive()
    assert coordinator.is_done
    assert coordinator.records_written == 150


def test_finish_with_nothing_in_flight():
    coordinator = WriteCoordinator(ManualWriter())
    coordinator.finish()
    coordinator.wait()
    assert coordinator.batches_submitted == 0


def test_failed_write_is_counted_and_does_not_block():
    writer = ManualWriter()
    coordinator = WriteCoordinator(writer)

    coordinator.submit(_batch(0))
    coordinator.submit(_batch(1))
    coordinator.finish()
    writer.futures[0].set_exception(WriteError("disk I/O error"))
    writer.futures[1].set_result(1)

    coordinator.wait()
    assert coordinator.batches_submitted == 2
    assert coordinator.batches_failed == 1
    assert coordinator.records_written == 1


def test_rejected_submission_releases_counter():
    coordinator = WriteCoordinator(RejectingWriter())

    coordinator.submit(_batch(0))

    assert coordinator.in_flight.value == 0
    assert coordinator.batches_failed == 1
    coordinator.finish()
    assert coordinator.is_done


def test_submit_after_finish_is_rejected():
    coordinator = WriteCoordinator(ManualWriter())
    coordinator.finish()
    with pytest.raises(RuntimeError):
        coordinator.submit(_batch(0))
