"""
Interval algebra over a single day.

Intervals are half-open ``[start, end)`` minute offsets from midnight. An
interval with ``start >= end`` is empty and never appears in a result.
"""
from enum import Enum
from typing import Iterable, List, NamedTuple

WORK_DAY_START = 7 * 60
WORK_DAY_END = 22 * 60


class SegmentState(str, Enum):
    UNAVAILABLE = "unavailable"
    AVAILABLE = "available"
    BUSY = "busy"


class Interval(NamedTuple):
    start: int
    end: int

    @property
    def length(self) -> int:
        return max(0, self.end - self.start)

    def contains(self, point: float) -> bool:
        return self.start <= point < self.end


class Segment(NamedTuple):
    start: int
    end: int
    state: SegmentState


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Union of possibly overlapping intervals, sorted by start."""
    merged: List[Interval] = []
    for start, end in sorted(i for i in intervals if i[0] < i[1]):
        if merged and start <= merged[-1].end:
            merged[-1] = Interval(merged[-1].start, max(merged[-1].end, end))
        else:
            merged.append(Interval(start, end))
    return merged


def subtract_intervals(base: Iterable[Interval], cuts: Iterable[Interval]) -> List[Interval]:
    """
    Remove every cut from the base intervals.

    Each cut splits the intervals it overlaps into zero, one or two
    remainders. The result carries no ordering guarantee.
    """
    result = [Interval(*interval) for interval in base if interval[0] < interval[1]]

    for cut_start, cut_end in cuts:
        if cut_start >= cut_end:
            continue
        remaining = []
        for interval in result:
            if cut_end <= interval.start or cut_start >= interval.end:
                remaining.append(interval)
                continue
            if interval.start < cut_start:
                remaining.append(Interval(interval.start, cut_start))
            if interval.end > cut_end:
                remaining.append(Interval(cut_end, interval.end))
        result = remaining

    return result


def clip_intervals(intervals: Iterable[Interval], lower: int, upper: int) -> List[Interval]:
    """Trim intervals to ``[lower, upper)``, dropping what falls entirely outside."""
    clipped = []
    for start, end in intervals:
        start, end = max(start, lower), min(end, upper)
        if start < end:
            clipped.append(Interval(start, end))
    return clipped


def build_day_segments(
    available: Iterable[Interval],
    busy: Iterable[Interval],
    work_start: int = WORK_DAY_START,
    work_end: int = WORK_DAY_END
) -> List[Segment]:
    """
    Split ``[work_start, work_end)`` into maximal runs of one state.

    Busy wins over available; anything covered by neither is unavailable.
    The returned segments are sorted, contiguous, cover the whole work
    window, and no two neighbours share a state.
    """
    available = clip_intervals(available, work_start, work_end)
    busy = clip_intervals(busy, work_start, work_end)

    points = {work_start, work_end}
    for interval in available + busy:
        points.add(interval.start)
        points.add(interval.end)
    points = sorted(points)

    segments: List[Segment] = []
    for start, end in zip(points, points[1:]):
        if start == end:
            continue
        midpoint = (start + end) / 2
        if any(interval.contains(midpoint) for interval in busy):
            state = SegmentState.BUSY
        elif any(interval.contains(midpoint) for interval in available):
            state = SegmentState.AVAILABLE
        else:
            state = SegmentState.UNAVAILABLE

        if segments and segments[-1].state == state and segments[-1].end == start:
            segments[-1] = Segment(segments[-1].start, end, state)
        else:
            segments.append(Segment(start, end, state))

    return segments
