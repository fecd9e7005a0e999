"""Reporter interface shared by the log and dashboard renderers."""

import click

from parasect.models.command import CommandTemplate
from parasect.models.events import SearchEvent
from parasect.models.search import SearchResult


class Reporter:
    """Receives search events and renders them.

    Reporters keep their own render state built only from events. Use as a
    context manager: rendering starts on enter and is fully torn down on
    exit, so anything printed afterwards lands on a clean terminal.
    """

    def handle(self, event: SearchEvent) -> None:
        raise NotImplementedError

    def __call__(self, event: SearchEvent) -> None:
        self.handle(event)

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def __enter__(self) -> "Reporter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def no_bad_index_line(result: SearchResult) -> str:
    return f"No bad index found in [{result.search_range.low}, {result.search_range.high}]"


def result_lines(template: CommandTemplate, result: SearchResult) -> list[str]:
    """Final summary; the last line is the machine-readable answer."""
    if result.boundary is None:
        return [
            click.style("Parasected", fg="yellow") + f" {template.display()}",
            no_bad_index_line(result),
        ]
    return [
        click.style("Successfully parasected", fg="green") + f" {template.display()}",
        "First bad index: " + click.style(str(result.boundary), fg="blue", bold=True),
    ]
