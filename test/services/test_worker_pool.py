"""Unit tests for WorkerPool."""

import logging
import queue
import threading
import time

import pytest

from parasect.exceptions import ConfigurationError
from parasect.models.search import Outcome, ProbeOutcome, ProbeState
from parasect.services.worker_pool import WorkerPool


def passing(index: int) -> ProbeOutcome:
    return ProbeOutcome(outcome=Outcome.PASS)


class TestWorkerPoolConfiguration:
    def test_zero_parallelism_rejected(self):
        with pytest.raises(ConfigurationError, match="cannot be 0"):
            WorkerPool(passing, 0)

    def test_capacity_and_idle_slots(self):
        with WorkerPool(passing, 3) as pool:
            assert pool.capacity() == 3
            assert pool.idle_slots() == 3
            assert pool.in_flight() == []


class TestWorkerPoolExecution:
    def test_completion_returns_probe_with_outcome(self):
        with WorkerPool(passing, 2) as pool:
            probe = pool.submit(7)
            assert probe.state in (ProbeState.RUNNING, ProbeState.COMPLETED)

            completion = pool.next_completion(timeout=5)

            assert completion.probe.index == 7
            assert completion.probe.state == ProbeState.COMPLETED
            assert completion.probe.result.outcome == Outcome.PASS
            assert pool.idle_slots() == 2

    def test_results_arrive_in_completion_order(self):
        def run(index: int) -> ProbeOutcome:
            time.sleep(0.3 if index == 1 else 0.0)
            return ProbeOutcome(outcome=Outcome.PASS)

        with WorkerPool(run, 2) as pool:
            pool.submit(1)
            pool.submit(2)

            first = pool.next_completion(timeout=5)
            second = pool.next_completion(timeout=5)

        assert [first.probe.index, second.probe.index] == [2, 1]

    def test_slots_are_distinct_and_reused(self):
        release = threading.Event()

        def run(index: int) -> ProbeOutcome:
            release.wait(5)
            return ProbeOutcome(outcome=Outcome.PASS)

        with WorkerPool(run, 2) as pool:
            a = pool.submit(1)
            b = pool.submit(2)
            assert {a.slot, b.slot} == {0, 1}
            assert pool.idle_slots() == 0
            assert sorted(pool.in_flight()) == [1, 2]

            release.set()
            freed = pool.next_completion(timeout=5).probe.slot
            c = pool.submit(3)
            assert c.slot == freed

    def test_slot_stays_busy_until_completion_is_collected(self):
        with WorkerPool(passing, 1) as pool:
            pool.submit(1)
            time.sleep(0.1)
            assert pool.idle_slots() == 0
            pool.next_completion(timeout=5)
            assert pool.idle_slots() == 1

    def test_duplicate_index_rejected_while_in_flight(self):
        release = threading.Event()

        def run(index: int) -> ProbeOutcome:
            release.wait(5)
            return ProbeOutcome(outcome=Outcome.PASS)

        with WorkerPool(run, 2) as pool:
            pool.submit(4)
            with pytest.raises(ValueError, match="already being probed"):
                pool.submit(4)
            release.set()

    def test_submit_blocks_when_all_slots_busy(self):
        release = threading.Event()

        def run(index: int) -> ProbeOutcome:
            if index == 1:
                release.wait(5)
            return ProbeOutcome(outcome=Outcome.PASS)

        with WorkerPool(run, 1) as pool:
            pool.submit(1)
            submitter = threading.Thread(target=pool.submit, args=(2,))
            submitter.start()

            time.sleep(0.2)
            assert submitter.is_alive()

            release.set()
            assert pool.next_completion(timeout=5).probe.index == 1
            submitter.join(5)
            assert not submitter.is_alive()
            assert pool.next_completion(timeout=5).probe.index == 2

    def test_next_completion_timeout(self):
        with WorkerPool(passing, 1) as pool:
            with pytest.raises(queue.Empty):
                pool.next_completion(timeout=0.05)

    def test_unexpected_exception_is_reraised_and_frees_slot(self):
        def run(index: int) -> ProbeOutcome:
            raise KeyError("broken")

        with WorkerPool(run, 1) as pool:
            pool.submit(1)
            with pytest.raises(KeyError):
                pool.next_completion(timeout=5)
            assert pool.idle_slots() == 1

    def test_spawn_error_outcome_frees_slot(self):
        def run(index: int) -> ProbeOutcome:
            return ProbeOutcome(outcome=Outcome.SPAWN_ERROR, detail="no such file")

        with WorkerPool(run, 1) as pool:
            pool.submit(1)
            completion = pool.next_completion(timeout=5)
            assert completion.probe.result.outcome == Outcome.SPAWN_ERROR
            assert pool.idle_slots() == 1


class TestWorkerPoolDrain:
    def test_drain_collects_everything(self):
        def run(index: int) -> ProbeOutcome:
            time.sleep(0.05 * index)
            return ProbeOutcome(outcome=Outcome.FAIL)

        with WorkerPool(run, 3) as pool:
            for i in (1, 2, 3):
                pool.submit(i)

            drained = pool.drain()

            assert sorted(c.probe.index for c in drained) == [1, 2, 3]
            assert pool.idle_slots() == 3

    def test_drain_does_not_raise_worker_errors(self):
        def run(index: int) -> ProbeOutcome:
            raise RuntimeError("broken")

        with WorkerPool(run, 2) as pool:
            pool.submit(1)
            drained = pool.drain()

        assert drained[0].error is not None

    def test_drained_spawn_error_is_logged(self, caplog):
        def run(index: int) -> ProbeOutcome:
            return ProbeOutcome(outcome=Outcome.SPAWN_ERROR, detail="no such file")

        with caplog.at_level(logging.WARNING, logger="parasect"):
            with WorkerPool(run, 2) as pool:
                pool.submit(8)
                drained = pool.drain()

        assert drained[0].probe.result.outcome == Outcome.SPAWN_ERROR
        assert any(
            r.levelno == logging.WARNING and "x=8" in r.getMessage() and "no such file" in r.getMessage()
            for r in caplog.records
        )

    def test_submit_after_shutdown_rejected(self):
        pool = WorkerPool(passing, 1)
        pool.shutdown()
        with pytest.raises(RuntimeError, match="shut down"):
            pool.submit(1)
