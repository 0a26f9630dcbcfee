"""
The editable grid behind the availability editor.

A grid is seven rows (Saturday first) of half-hour cells covering the work
window, ``True`` meaning available. It converts to and from the recurring
slot list the API stores. Only half-hour precision survives a load: slot
boundaries are floored to the cell they fall in, so ``09:10-10:05`` comes back
as ``09:00-10:00``.
"""
from typing import Iterable, List, Optional
from backend.utils.utl_intervals import WORK_DAY_END, WORK_DAY_START
from backend.utils.utl_time import DAYS_PER_WEEK, minutes_to_time, time_to_minutes

CELL_MINUTES = 30
CELLS_PER_DAY = (WORK_DAY_END - WORK_DAY_START) // CELL_MINUTES

Grid = List[List[bool]]


def empty_grid() -> Grid:
    return [[False] * CELLS_PER_DAY for _ in range(DAYS_PER_WEEK)]


def clone_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def cell_to_time(cell: int) -> str:
    """Cell index -> the "HH:mm" its half hour starts at (cell 30 is 22:00)."""
    return minutes_to_time(WORK_DAY_START + cell * CELL_MINUTES)


def time_to_cell(value: str) -> int:
    return (time_to_minutes(value) - WORK_DAY_START) // CELL_MINUTES


def _slot_field(slot, name: str):
    if isinstance(slot, dict):
        return slot[name]
    return getattr(slot, name)


def slots_to_grid(slots: Iterable, grid: Optional[Grid] = None) -> Grid:
    """
    Mark every cell covered by a slot. Accepts dicts or objects carrying
    day_of_week, start_time and end_time.
    """
    grid = grid if grid is not None else empty_grid()
    for slot in slots:
        day = _slot_field(slot, "day_of_week")
        if not 0 <= day < DAYS_PER_WEEK:
            raise ValueError(f"day_of_week must be between 0 and 6, got {day}")
        start_cell = max(0, time_to_cell(_slot_field(slot, "start_time")))
        end_cell = min(CELLS_PER_DAY, time_to_cell(_slot_field(slot, "end_time")))
        for cell in range(start_cell, end_cell):
            grid[day][cell] = True
    return grid


def grid_to_slots(grid: Grid) -> List[dict]:
    """One slot per maximal run of available cells, day by day."""
    slots = []
    for day in range(DAYS_PER_WEEK):
        start = None
        for cell in range(CELLS_PER_DAY + 1):
            active = cell < CELLS_PER_DAY and grid[day][cell]
            if active and start is None:
                start = cell
            elif not active and start is not None:
                slots.append({
                    "day_of_week": day,
                    "start_time": cell_to_time(start),
                    "end_time": cell_to_time(cell)
                })
                start = None
    return slots
