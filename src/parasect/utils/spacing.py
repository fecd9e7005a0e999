"""Even spacing of candidate indices across the undetermined interval."""

import heapq
from typing import Iterable


def _gaps(low: int, high: int, busy: Iterable[int]) -> list[tuple[int, int]]:
    """Split [low, high] into maximal runs of indices not already being probed."""
    cuts = sorted({index for index in busy if low <= index <= high})
    gaps = []
    start = low
    for cut in cuts:
        if cut > start:
            gaps.append((start, cut - start))
        start = cut + 1
    if start <= high:
        gaps.append((start, high - start + 1))
    return gaps


def _evenly_spaced(start: int, length: int, points: int) -> list[int]:
    # Offsets grow by (length + 1) / (points + 1) >= 1, so they never collide.
    return [start + ((i + 1) * (length + 1)) // (points + 1) - 1 for i in range(points)]


def choose_candidates(low: int, high: int, count: int, busy: Iterable[int] = ()) -> list[int]:
    """Pick up to ``count`` new indices in [low, high] to probe next.

    Indices in ``busy`` are already in flight: they are never returned and they
    act as existing cut points. The new points go to whichever gaps leave the
    largest unexplored piece, and are spread evenly inside each gap. With no
    busy indices this splits the interval into ``count + 1`` near-equal parts,
    and a single candidate is the classical bisection midpoint.
    """
    if count <= 0 or low > high:
        return []

    # Largest piece of a gap of length L holding p evenly spaced points is L // (p + 1).
    heap = [(-length, start, length, 0) for start, length in _gaps(low, high, busy)]
    heapq.heapify(heap)
    placed: dict[int, tuple[int, int]] = {}

    remaining = count
    while remaining and heap:
        neg_piece, start, length, points = heapq.heappop(heap)
        if neg_piece == 0:
            break
        points += 1
        remaining -= 1
        placed[start] = (length, points)
        heapq.heappush(heap, (-(length // (points + 1)), start, length, points))

    candidates = []
    for start, (length, points) in placed.items():
        candidates.extend(_evenly_spaced(start, length, points))
    return sorted(candidates)
