"""Shrinking colour bar over the part of the range still in play."""

from rich.text import Text

from parasect.constants import PROGRESS_BAR_CELL, PROGRESS_BAR_HEIGHT
from parasect.models.search import SearchRange


class ProgressBar:
    """Render state for the dashboard's progress bar.

    The bar spans the current window including its two known bounds, so it
    shrinks as the search narrows. Cell colours:

    * green: every index in the cell is known good
    * red: every index in the cell is known bad
    * blue: nothing in the cell is known yet
    * yellow: a mix of the above

    Cells holding a running probe blink.
    """

    def __init__(self, search_range: SearchRange):
        self.low = search_range.low
        self.high = search_range.high
        self.good_bound = search_range.low - 1
        self.bad_bound = search_range.high + 1
        self.active: set[int] = set()

    def narrow(self, good_bound: int, bad_bound: int) -> None:
        self.good_bound = max(self.good_bound, good_bound)
        self.bad_bound = min(self.bad_bound, bad_bound)

    def probe_started(self, index: int) -> None:
        self.active.add(index)

    def probe_finished(self, index: int) -> None:
        self.active.discard(index)

    def view(self) -> tuple[int, int]:
        """Inclusive bounds of the indices the bar currently covers."""
        return max(self.low, self.good_bound), min(self.high, self.bad_bound)

    def cells(self, width: int) -> list[tuple[int, int]]:
        """Split the view into ``width`` inclusive sub-ranges."""
        first, last = self.view()
        size = last - first + 1
        if width <= 0:
            return []
        if size >= width:
            return [
                (first + (i * size) // width, first + ((i + 1) * size) // width - 1)
                for i in range(width)
            ]
        # Fewer indices than columns: each index spans several cells.
        return [(first + (i * size) // width,) * 2 for i in range(width)]

    def cell_color(self, start: int, end: int) -> str:
        if end <= self.good_bound:
            return "green"
        if start >= self.bad_bound:
            return "red"
        if start > self.good_bound and end < self.bad_bound:
            return "blue"
        return "yellow"

    def _is_active(self, start: int, end: int) -> bool:
        return any(start <= index <= end for index in self.active)

    def color_bar(self, width: int) -> Text:
        bar = Text()
        for start, end in self.cells(width):
            style = self.cell_color(start, end)
            if self._is_active(start, end):
                style += " blink"
            bar.append(PROGRESS_BAR_CELL, style=style)
        return bar

    def bounds_bar(self, width: int, height: int = 2) -> list[Text]:
        first, last = self.view()
        low_s, high_s = str(first), str(last)
        if len(low_s) + len(high_s) + 1 > width:
            return [Text(low_s[:width])] if height else []

        numbers = Text(low_s + " " * (width - len(low_s) - len(high_s)) + high_s)
        carets = Text("^" + " " * (width - 2) + "^")
        if height <= 0:
            return []
        if height == 1:
            return [numbers]
        return [carets, numbers]

    def render(self, width: int, max_height: int = PROGRESS_BAR_HEIGHT + 2) -> list[Text]:
        """Render into at most ``max_height`` lines, dropping detail as space runs out."""
        if max_height <= 0:
            return []
        bar_rows = {1: 0, 2: 1}.get(max_height, PROGRESS_BAR_HEIGHT)
        bounds_rows = 1 if max_height <= 3 else 2
        lines = [self.color_bar(width) for _ in range(bar_rows)]
        lines.extend(self.bounds_bar(width, bounds_rows))
        return lines
