from typing import List, Optional
from backend.editor.edt_grid import Grid, clone_grid, empty_grid


class GridHistory:
    """Linear undo/redo stack of grid snapshots with a cursor."""

    def __init__(self, initial: Optional[Grid] = None):
        self.reset(initial if initial is not None else empty_grid())

    def reset(self, grid: Grid):
        self._entries: List[Grid] = [clone_grid(grid)]
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def push(self, grid: Grid):
        # Anything after the cursor is discarded
        del self._entries[self._index + 1:]
        self._entries.append(clone_grid(grid))
        self._index = len(self._entries) - 1

    def undo(self) -> Optional[Grid]:
        if not self.can_undo:
            return None
        self._index -= 1
        return clone_grid(self._entries[self._index])

    def redo(self) -> Optional[Grid]:
        if not self.can_redo:
            return None
        self._index += 1
        return clone_grid(self._entries[self._index])
