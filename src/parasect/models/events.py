"""Events emitted by the search coordinator.

Reporters consume these to keep their own render state; nothing in here
refers back to coordinator internals.
"""

from dataclasses import dataclass
from typing import Callable, Union

from parasect.models.search import ProbeOutcome, SearchResult


@dataclass(frozen=True)
class ProbeDispatched:
    index: int
    slot: int


@dataclass(frozen=True)
class ProbeCompleted:
    index: int
    slot: int
    outcome: ProbeOutcome
    duration: float


@dataclass(frozen=True)
class WindowNarrowed:
    good_bound: int
    bad_bound: int


@dataclass(frozen=True)
class SearchFinished:
    result: SearchResult


@dataclass(frozen=True)
class SearchAborted:
    reason: str


SearchEvent = Union[ProbeDispatched, ProbeCompleted, WindowNarrowed, SearchFinished, SearchAborted]

EventCallback = Callable[[SearchEvent], None]
