"""Search state models."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from parasect.exceptions import ConfigurationError, InvariantViolation


class Outcome(str, Enum):
    """Classification of a finished probe."""

    PASS = "pass"
    FAIL = "fail"
    SPAWN_ERROR = "spawn_error"

    @property
    def label(self) -> str:
        return {Outcome.PASS: "Good", Outcome.FAIL: "Bad", Outcome.SPAWN_ERROR: "Abort"}[self]


class ProbeState(str, Enum):
    """Lifecycle of a probe."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ExitStatus:
    """How a probe process ended: a normal exit code or a terminating signal."""

    code: Optional[int] = None
    signal: Optional[int] = None

    @classmethod
    def exited(cls, code: int) -> "ExitStatus":
        return cls(code=code)

    @classmethod
    def signaled(cls, signal_number: int) -> "ExitStatus":
        return cls(signal=signal_number)

    @property
    def is_signaled(self) -> bool:
        return self.signal is not None

    def describe(self) -> str:
        if self.is_signaled:
            return f"killed by signal {self.signal}"
        return f"exit code {self.code}"


@dataclass(frozen=True)
class ProbeOutcome:
    outcome: Outcome
    detail: str = ""
    exit_status: Optional[ExitStatus] = None
    output_tail: str = ""


@dataclass(frozen=True)
class SearchRange:
    """Inclusive integer range to search."""

    low: int
    high: int

    def validate(self) -> None:
        if self.low > self.high:
            raise ConfigurationError(
                f"Low must be less than or equal to high (low was {self.low}, "
                f"which is > the high of {self.high})"
            )

    @property
    def size(self) -> int:
        return self.high - self.low + 1

    def __contains__(self, index: int) -> bool:
        return self.low <= index <= self.high


@dataclass
class Window:
    """Best known bracket around the first bad index.

    Every index <= good_bound passes and every index >= bad_bound fails. The
    initial bounds are sentinels one step outside the searched range.
    """

    good_bound: int
    bad_bound: int

    @classmethod
    def for_range(cls, search_range: SearchRange) -> "Window":
        return cls(good_bound=search_range.low - 1, bad_bound=search_range.high + 1)

    @property
    def is_complete(self) -> bool:
        return self.bad_bound - self.good_bound == 1

    def undetermined(self) -> tuple[int, int]:
        """Inclusive bounds of the indices still unknown (may be empty)."""
        return self.good_bound + 1, self.bad_bound - 1

    def contains_undetermined(self, index: int) -> bool:
        return self.good_bound < index < self.bad_bound

    def fold(self, index: int, outcome: Outcome) -> bool:
        """Tighten the window with one result and return whether it moved."""
        if outcome == Outcome.PASS:
            if index <= self.good_bound:
                return False
            self.good_bound = index
        elif outcome == Outcome.FAIL:
            if index >= self.bad_bound:
                return False
            self.bad_bound = index
        else:
            raise ValueError(f"Cannot fold outcome {outcome.value} into the window")

        if self.good_bound >= self.bad_bound:
            raise InvariantViolation(
                f"Found good point {self.good_bound} at or after bad point {self.bad_bound}."
            )
        return True


@dataclass
class Probe:
    """One execution of the predicate command against a candidate index."""

    index: int
    slot: Optional[int] = None
    state: ProbeState = ProbeState.PENDING
    result: Optional[ProbeOutcome] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    def mark_running(self, slot: int) -> None:
        self.slot = slot
        self.state = ProbeState.RUNNING
        self.started_at = time.perf_counter()

    def mark_completed(self, result: ProbeOutcome) -> None:
        self.result = result
        self.state = ProbeState.COMPLETED
        self.finished_at = time.perf_counter()

    @property
    def duration(self) -> float:
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return self.finished_at - self.started_at


@dataclass
class SearchResult:
    """Final answer of a search; ``boundary`` is None when nothing failed."""

    search_range: SearchRange
    window: Window
    probes_run: int = 0
    elapsed_s: float = 0.0
    probes: list[Probe] = field(default_factory=list)

    @property
    def boundary(self) -> Optional[int]:
        if self.window.bad_bound > self.search_range.high:
            return None
        return self.window.bad_bound
