"""Interactive terminal dashboard built on rich's Live display."""

import logging
import threading
from typing import Optional

from rich.console import Console, ConsoleOptions, RenderResult
from rich.live import Live
from rich.logging import RichHandler
from rich.text import Text

from parasect.constants import REFRESH_PER_SECOND
from parasect.models.events import (
    ProbeCompleted,
    ProbeDispatched,
    SearchAborted,
    SearchEvent,
    SearchFinished,
    WindowNarrowed,
)
from parasect.models.search import SearchRange
from parasect.ui.line_reporter import EventFormatter
from parasect.ui.progress_bar import ProgressBar
from parasect.ui.reporter import Reporter


class Dashboard(Reporter):
    """Title, shrinking progress bar and the latest log line per slot.

    Events arrive on the search thread while rich repaints from its own
    refresh thread, so render state is guarded by a lock.
    """

    def __init__(
        self,
        title: Text,
        search_range: SearchRange,
        console: Optional[Console] = None,
        refresh_per_second: float = REFRESH_PER_SECOND,
    ):
        self._title = title.copy()
        self._title.justify = "center"
        self._console = console or Console()
        self._refresh_per_second = refresh_per_second
        self._lock = threading.Lock()
        self._bar = ProgressBar(search_range)
        self._formatter = EventFormatter(search_range)
        # One entry per log kind: each slot, window narrowing, abort.
        self._recent: dict[str, str] = {}
        self._live: Optional[Live] = None
        self._saved_handlers: list[logging.Handler] = []

    def handle(self, event: SearchEvent) -> None:
        with self._lock:
            line = self._formatter.format(event)
            if isinstance(event, ProbeDispatched):
                self._bar.probe_started(event.index)
                key = f"slot-{event.slot}"
            elif isinstance(event, ProbeCompleted):
                self._bar.probe_finished(event.index)
                key = f"slot-{event.slot}"
            elif isinstance(event, WindowNarrowed):
                self._bar.narrow(event.good_bound, event.bad_bound)
                key = "window"
            elif isinstance(event, SearchAborted):
                key = "abort"
            elif isinstance(event, SearchFinished):
                return
            else:
                raise TypeError(f"Unknown event: {event!r}")

            # Most recently updated entries are shown first.
            self._recent.pop(key, None)
            self._recent[key] = line

    def render_lines(self, width: int, height: int) -> list[Text]:
        """Lay out title, bar and recent logs within ``width`` x ``height``."""
        with self._lock:
            title = self._title.copy()
            title.truncate(width, overflow="ellipsis")
            lines = [title] if height > 0 else []

            # Leave at least one line for the log when space allows.
            bar_height = max(0, min(4, height - len(lines) - 1))
            lines.extend(self._bar.render(width, bar_height))

            for line in reversed(list(self._recent.values())):
                if len(lines) >= height:
                    break
                text = Text.from_ansi(line)
                text.truncate(width, overflow="ellipsis")
                lines.append(text)
            return lines

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        height = options.height or console.size.height
        yield from self.render_lines(options.max_width, height)

    def start(self) -> None:
        self._live = Live(
            self,
            console=self._console,
            refresh_per_second=self._refresh_per_second,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self._live.start()

        # Log records are printed above the live view instead of through it.
        root = logging.getLogger()
        self._saved_handlers = root.handlers[:]
        root.handlers = [RichHandler(console=self._console, show_path=False)]

    def stop(self) -> None:
        if self._live is None:
            return
        try:
            self._live.refresh()
            self._live.stop()
        finally:
            logging.getLogger().handlers = self._saved_handlers
            self._saved_handlers = []
            self._live = None
