"""Bounded pool of probe slots with completion-order delivery."""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from parasect.exceptions import ConfigurationError
from parasect.models.search import Outcome, Probe, ProbeOutcome

logger = logging.getLogger(__name__)

ProbeFunction = Callable[[int], ProbeOutcome]


@dataclass
class ProbeCompletion:
    """A finished probe as delivered to the coordinator."""

    probe: Probe
    error: Optional[BaseException] = None


class WorkerPool:
    """Run at most ``max_parallelism`` probes at once.

    Each slot is one worker thread blocked on one external process. Finished
    probes are queued in the order they complete, and a slot only becomes
    idle again once its completion has been collected with
    :meth:`next_completion`, so the consumer always sees a result before it
    sees the slot it freed.
    """

    def __init__(self, run_probe: ProbeFunction, max_parallelism: int):
        if max_parallelism < 1:
            raise ConfigurationError(
                "The max parallelism cannot be 0. Specify a value >= 1 for --max-parallelism"
            )

        self._run_probe = run_probe
        self._capacity = max_parallelism
        self._executor = ThreadPoolExecutor(
            max_workers=max_parallelism, thread_name_prefix="parasect-slot"
        )
        self._slots = threading.BoundedSemaphore(max_parallelism)
        self._completions: "queue.Queue[ProbeCompletion]" = queue.Queue(maxsize=max_parallelism)
        self._lock = threading.Lock()
        self._free_slots = list(range(max_parallelism))
        self._in_flight: dict[int, Probe] = {}
        self._closed = False

    def capacity(self) -> int:
        return self._capacity

    def idle_slots(self) -> int:
        with self._lock:
            return self._capacity - len(self._in_flight)

    def in_flight(self) -> list[int]:
        """Indices currently submitted and not yet collected."""
        with self._lock:
            return list(self._in_flight)

    def submit(self, index: int) -> Probe:
        """Start a probe for ``index``, blocking while every slot is busy."""
        if self._closed:
            raise RuntimeError("Cannot submit to a pool that has been shut down")

        with self._lock:
            if index in self._in_flight:
                raise ValueError(f"Index {index} is already being probed")

        self._slots.acquire()
        with self._lock:
            slot = min(self._free_slots)
            self._free_slots.remove(slot)
            probe = Probe(index=index)
            probe.mark_running(slot)
            self._in_flight[index] = probe

        logger.debug(f"Slot {slot}: submitted x={index}")
        self._executor.submit(self._execute, probe)
        return probe

    def _execute(self, probe: Probe) -> None:
        try:
            result = self._run_probe(probe.index)
        except Exception as e:
            logger.info(f"Slot {probe.slot}: probe x={probe.index} raised {e!r}")
            probe.mark_completed(ProbeOutcome(outcome=Outcome.SPAWN_ERROR, detail=repr(e)))
            self._completions.put(ProbeCompletion(probe=probe, error=e))
            return

        probe.mark_completed(result)
        self._completions.put(ProbeCompletion(probe=probe))

    def _collect(self, timeout: Optional[float] = None) -> ProbeCompletion:
        completion = self._completions.get(timeout=timeout)
        with self._lock:
            self._in_flight.pop(completion.probe.index, None)
            self._free_slots.append(completion.probe.slot)
        self._slots.release()
        return completion

    def next_completion(self, timeout: Optional[float] = None) -> ProbeCompletion:
        """Block until any probe finishes and return it, freeing its slot.

        Raises ``queue.Empty`` on timeout, and re-raises any unexpected
        exception the probe function raised in its worker thread.
        """
        completion = self._collect(timeout=timeout)
        if completion.error is not None:
            raise completion.error
        return completion

    def drain(self) -> list[ProbeCompletion]:
        """Wait for every outstanding probe and return their completions."""
        drained = []
        while self.idle_slots() < self._capacity:
            completion = self._collect()
            if completion.error is not None:
                logger.warning(
                    f"Ignoring error from drained probe x={completion.probe.index}: "
                    f"{completion.error!r}"
                )
            elif completion.probe.result.outcome == Outcome.SPAWN_ERROR:
                logger.warning(
                    f"Ignoring spawn error from drained probe x={completion.probe.index}: "
                    f"{completion.probe.result.detail}"
                )
            drained.append(completion)
        return drained

    def shutdown(self) -> None:
        if self._closed:
            return
        self.drain()
        self._closed = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
