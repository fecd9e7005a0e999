"""Search coordinator: drives the window to the first bad index."""

import logging
import os
import time
from typing import Optional

from parasect.clients.probe_runner import ProbeRunner
from parasect.exceptions import ConfigurationError, InvariantViolation, SpawnError
from parasect.models.command import CommandTemplate
from parasect.models.events import (
    EventCallback,
    ProbeCompleted,
    ProbeDispatched,
    SearchAborted,
    SearchEvent,
    SearchFinished,
    WindowNarrowed,
)
from parasect.models.search import Outcome, Probe, SearchRange, SearchResult, Window
from parasect.services.worker_pool import ProbeCompletion, WorkerPool
from parasect.utils.spacing import choose_candidates

logger = logging.getLogger(__name__)


class SearchCoordinator:
    """Owns the window and keeps every pool slot busy until it closes.

    All window mutation happens on the thread calling :meth:`run`; worker
    threads only hand back completions through the pool. Whenever a probe
    finishes, its result is folded in and the freed slot is refilled right
    away from the current undetermined interval, without waiting for the
    rest of the batch.
    """

    def __init__(self, pool: WorkerPool, on_event: Optional[EventCallback] = None):
        self._pool = pool
        self._on_event = on_event
        self._probes: list[Probe] = []

    def _emit(self, event: SearchEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)

    def _refill(self, window: Window) -> None:
        free = self._pool.idle_slots()
        if not free:
            return

        low, high = window.undetermined()
        for index in choose_candidates(low, high, free, busy=self._pool.in_flight()):
            probe = self._pool.submit(index)
            self._probes.append(probe)
            logger.debug(f"Dispatched x={index} to slot {probe.slot} (window {low}..{high})")
            self._emit(ProbeDispatched(index=index, slot=probe.slot))

    def _report(self, completion: ProbeCompletion) -> None:
        probe = completion.probe
        self._emit(
            ProbeCompleted(
                index=probe.index,
                slot=probe.slot,
                outcome=probe.result,
                duration=probe.duration,
            )
        )

    def _fold(self, window: Window, completion: ProbeCompletion) -> None:
        probe = completion.probe
        self._report(completion)

        if probe.result.outcome == Outcome.SPAWN_ERROR:
            raise SpawnError(probe.index, probe.result.detail)

        stale = not window.contains_undetermined(probe.index)
        if window.fold(probe.index, probe.result.outcome):
            logger.info(
                f"Window narrowed by x={probe.index} ({probe.result.outcome.label}): "
                f"good={window.good_bound} bad={window.bad_bound}"
            )
            self._emit(WindowNarrowed(good_bound=window.good_bound, bad_bound=window.bad_bound))
        elif stale:
            logger.debug(f"Stale probe x={probe.index} did not move the window")

    def _drain(self) -> list[ProbeCompletion]:
        drained = self._pool.drain()
        for completion in drained:
            self._report(completion)
        if drained:
            logger.debug(f"Drained {len(drained)} outstanding probe(s)")
        return drained

    def run(self, search_range: SearchRange) -> SearchResult:
        """Search ``search_range`` and return the first bad index, if any.

        Raises:
            ConfigurationError: the range or pool size is invalid
            SpawnError: a probe could not run; outstanding probes are drained first
            InvariantViolation: the window became inconsistent
        """
        search_range.validate()
        if self._pool.capacity() < 1:
            raise ConfigurationError("The max parallelism must be at least 1")

        window = Window.for_range(search_range)
        self._probes = []
        started = time.perf_counter()
        logger.info(
            f"Searching [{search_range.low}, {search_range.high}] "
            f"with {self._pool.capacity()} slot(s)"
        )

        try:
            while not window.is_complete:
                self._refill(window)
                if not self._pool.in_flight():
                    raise InvariantViolation(
                        f"No candidates left between good={window.good_bound} and "
                        f"bad={window.bad_bound} with no probes running"
                    )
                self._fold(window, self._pool.next_completion())
        except Exception as e:
            logger.info(f"Search aborted: {e}")
            self._drain()
            self._emit(SearchAborted(reason=str(e)))
            raise

        self._drain()

        result = SearchResult(
            search_range=search_range,
            window=window,
            probes_run=len(self._probes),
            elapsed_s=time.perf_counter() - started,
            probes=list(self._probes),
        )
        logger.info(
            f"Search finished after {result.probes_run} probe(s) in {result.elapsed_s:.2f}s: "
            f"boundary={result.boundary}"
        )
        self._emit(SearchFinished(result=result))
        return result


def default_parallelism() -> int:
    return os.cpu_count() or 1


def parasect(
    search_range: SearchRange,
    template: CommandTemplate,
    max_parallelism: Optional[int] = None,
    on_event: Optional[EventCallback] = None,
    cwd: Optional[str] = None,
) -> SearchResult:
    """Run a full search of ``template`` over ``search_range``."""
    if max_parallelism is None:
        max_parallelism = default_parallelism()

    # Reject bad input before any worker thread exists.
    search_range.validate()
    runner = ProbeRunner(template, cwd=cwd)
    with WorkerPool(runner.run, max_parallelism) as pool:
        return SearchCoordinator(pool, on_event=on_event).run(search_range)
