import httpx
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from backend.editor.edt_grid import (
    CELLS_PER_DAY,
    Grid,
    clone_grid,
    empty_grid,
    grid_to_slots,
    slots_to_grid
)
from backend.editor.edt_history import GridHistory
from backend.utils.utl_time import DAYS_PER_WEEK
from backend.configuration.monitor import log_event, log_exception, start_span

# Named templates as [from_cell, to_cell) ranges of the 07:00-22:00 grid
PRESETS: Dict[str, Tuple[int, int]] = {
    "morning": (0, 10),      # 07:00-12:00
    "afternoon": (10, 20),   # 12:00-17:00
    "full_day": (0, 30),     # 07:00-22:00
}

CellLocator = Callable[[float, float], Optional[Tuple[int, int]]]


class AvailabilityEditor:
    """
    Interactive state for editing one teacher's recurring weekly availability.

    The rendering layer feeds pointer events as (day, cell) pairs, or as raw
    coordinates resolved through the injected ``locate_cell`` callable. Grid
    changing actions (presets, clear, copy and each completed paint gesture)
    are recorded in an undo/redo history.
    """

    def __init__(self, slots: Iterable = (), locate_cell: Optional[CellLocator] = None):
        self.locate_cell = locate_cell
        self.selected_day: Optional[int] = None
        self.copy_source: Optional[int] = None
        self._paint_value: Optional[bool] = None
        self._last_cell: Optional[Tuple[int, int]] = None
        self._gesture_start: Optional[Grid] = None
        self.grid: Grid = empty_grid()
        self.history = GridHistory(self.grid)
        self.load(slots)

    def load(self, slots: Iterable):
        """Replace the grid with the given slots and start a fresh history"""
        self.grid = slots_to_grid(slots)
        self.history.reset(self.grid)
        self._end_drag()

    @property
    def dragging(self) -> bool:
        return self._paint_value is not None

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def select_day(self, day: Optional[int]):
        """Select one day for presets and clear, or None for all days"""
        if day is not None:
            self._check_day(day)
        self.selected_day = day

    def _check_day(self, day: int):
        if not 0 <= day < DAYS_PER_WEEK:
            raise ValueError(f"day must be between 0 and 6, got {day}")

    def _in_grid(self, day: int, cell: int) -> bool:
        return 0 <= day < DAYS_PER_WEEK and 0 <= cell < CELLS_PER_DAY

    def _target_days(self) -> List[int]:
        if self.selected_day is not None:
            return [self.selected_day]
        return list(range(DAYS_PER_WEEK))

    def _commit(self, grid: Grid):
        """Make grid current; an action that changed nothing adds no history entry"""
        self._end_drag()
        if grid == self.grid:
            return
        self.grid = grid
        self.history.push(grid)

    # Paint gesture

    def pointer_down(self, day: int, cell: int):
        """Toggle a cell and start painting every entered cell with its new value"""
        if not self._in_grid(day, cell):
            return
        self._gesture_start = clone_grid(self.grid)
        self._paint_value = not self.grid[day][cell]
        self._last_cell = (day, cell)
        self.grid[day][cell] = self._paint_value

    def pointer_enter(self, day: int, cell: int):
        if not self.dragging or not self._in_grid(day, cell):
            return
        if self._last_cell == (day, cell):
            return
        self._last_cell = (day, cell)
        self.grid[day][cell] = self._paint_value

    def pointer_move(self, x: float, y: float):
        """Resolve the cell under the pointer now and paint it"""
        if not self.dragging or self.locate_cell is None:
            return
        target = self.locate_cell(x, y)
        if target is None:
            return
        self.pointer_enter(*target)

    def pointer_up(self):
        """End the drag; a gesture that changed the grid becomes one history entry"""
        if self.dragging and self.grid != self._gesture_start:
            self.history.push(self.grid)
        self._end_drag()

    def _end_drag(self):
        self._paint_value = None
        self._last_cell = None
        self._gesture_start = None

    # Toolbar actions

    def apply_preset(self, name: str):
        """Overwrite the target day(s) so exactly the preset's range is available"""
        if name not in PRESETS:
            raise ValueError(f"Unknown preset '{name}'")
        from_cell, to_cell = PRESETS[name]
        grid = clone_grid(self.grid)
        for day in self._target_days():
            grid[day] = [from_cell <= cell < to_cell for cell in range(CELLS_PER_DAY)]
        self._commit(grid)

    def clear(self):
        grid = clone_grid(self.grid)
        for day in self._target_days():
            grid[day] = [False] * CELLS_PER_DAY
        self._commit(grid)

    def select_copy_source(self, day: int):
        self._check_day(day)
        self.copy_source = day

    def cancel_copy(self):
        self.copy_source = None

    def copy_to(self, *days: int):
        """Overwrite each destination day with the selected source day"""
        if self.copy_source is None:
            raise ValueError("Select a source day before copying")
        for day in days:
            self._check_day(day)
        grid = clone_grid(self.grid)
        for day in days:
            if day != self.copy_source:
                grid[day] = list(self.grid[self.copy_source])
        self.copy_source = None
        self._commit(grid)

    def undo(self) -> bool:
        self._end_drag()
        grid = self.history.undo()
        if grid is None:
            return False
        self.grid = grid
        return True

    def redo(self) -> bool:
        self._end_drag()
        grid = self.history.redo()
        if grid is None:
            return False
        self.grid = grid
        return True

    # Persistence

    def to_slots(self) -> List[dict]:
        return grid_to_slots(self.grid)

    def save(self, client: httpx.Client, teacher_id: str) -> List[dict]:
        """
        Replace the teacher's recurring availability with the current grid.
        Raises httpx.HTTPStatusError when the API rejects the request.
        """
        slots = self.to_slots()
        try:
            with start_span("save_availability_grid", attributes={"teacher_id": teacher_id}):
                response = client.put(
                    f"/teachers/{teacher_id}/availability",
                    json={"slots": slots}
                )
                response.raise_for_status()
                log_event("Availability grid saved", {
                    "teacher_id": teacher_id,
                    "slot_count": len(slots)
                })
                return slots
        except Exception as e:
            log_exception(e, {"operation": "save_availability_grid", "teacher_id": teacher_id})
            raise
