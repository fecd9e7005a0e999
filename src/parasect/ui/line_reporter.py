"""Line-oriented event log for non-interactive output."""

from typing import Optional

import click

from parasect.models.events import (
    ProbeCompleted,
    ProbeDispatched,
    SearchAborted,
    SearchEvent,
    SearchFinished,
    WindowNarrowed,
)
from parasect.models.search import Outcome, ProbeOutcome, SearchRange
from parasect.ui.reporter import Reporter

_OUTCOME_COLORS = {Outcome.PASS: "green", Outcome.FAIL: "red", Outcome.SPAWN_ERROR: "magenta"}


def _index(value: int) -> str:
    return click.style(str(value), fg="blue", bold=True)


def outcome_label(result: ProbeOutcome) -> str:
    label = result.outcome.label
    if result.outcome == Outcome.SPAWN_ERROR and result.detail:
        label = f"{label} ({result.detail})"
    return click.style(label, fg=_OUTCOME_COLORS[result.outcome], bold=True)


class EventFormatter:
    """Turns events into human readable lines.

    Tracks the window from ``WindowNarrowed`` events so that narrowing lines
    can name the range that just became known.
    """

    def __init__(self, search_range: SearchRange):
        self.good_bound = search_range.low - 1
        self.bad_bound = search_range.high + 1

    def format(self, event: SearchEvent) -> Optional[str]:
        if isinstance(event, ProbeDispatched):
            return (
                f"Slot {event.slot}: {click.style('working', fg='yellow')} x={_index(event.index)} "
                f"range=[{self.good_bound + 1}, {self.bad_bound - 1}]"
            )
        if isinstance(event, ProbeCompleted):
            return (
                f"Slot {event.slot}: {click.style('completed', fg='green', bold=True)} "
                f"status={outcome_label(event.outcome)} x={_index(event.index)} "
                f"({event.duration:.2f}s)"
            )
        if isinstance(event, WindowNarrowed):
            return self._format_narrowed(event)
        if isinstance(event, SearchAborted):
            return (
                click.style("Parasect cancelled", fg="magenta", bold=True)
                + ": "
                + click.style(event.reason, fg="magenta")
            )
        if isinstance(event, SearchFinished):
            return None
        raise TypeError(f"Unknown event: {event!r}")

    def _format_narrowed(self, event: WindowNarrowed) -> str:
        parts = []
        if event.good_bound > self.good_bound:
            parts.append(
                f"[{self.good_bound + 1}, {event.good_bound}] known to be "
                + click.style("Good", fg="green", bold=True)
            )
        if event.bad_bound < self.bad_bound:
            parts.append(
                f"[{event.bad_bound}, {self.bad_bound - 1}] known to be "
                + click.style("Bad", fg="red", bold=True)
            )
        self.good_bound = max(self.good_bound, event.good_bound)
        self.bad_bound = min(self.bad_bound, event.bad_bound)
        return "; ".join(parts)


class LineReporter(Reporter):
    """Writes one line per event to stdout."""

    def __init__(self, search_range: SearchRange, color: Optional[bool] = None):
        self._formatter = EventFormatter(search_range)
        self._color = color

    def handle(self, event: SearchEvent) -> None:
        line = self._formatter.format(event)
        if line:
            click.echo(line, color=self._color)
