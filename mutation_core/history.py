from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board
from .state import GameState

HISTORY_LIMIT = 50


@dataclass(frozen=True)
class Snapshot:
    board: Board
    placement_id_counter: int


@dataclass
class History:
    """Linear undo/redo stack of board snapshots. A new save drops the redo branch."""
    limit: int = HISTORY_LIMIT
    snapshots: List[Snapshot] = field(default_factory=list)
    index: int = -1

    def save(self, state: GameState) -> None:
        if self.index < len(self.snapshots) - 1:
            del self.snapshots[self.index + 1:]
        self.snapshots.append(Snapshot(board=state.board.copy(), placement_id_counter=state.placement_id_counter))
        self.index += 1
        if len(self.snapshots) > self.limit:
            self.snapshots.pop(0)
            self.index -= 1

    def can_undo(self) -> bool:
        return self.index > 0

    def can_redo(self) -> bool:
        return self.index < len(self.snapshots) - 1

    def current(self) -> Optional[Snapshot]:
        if 0 <= self.index < len(self.snapshots):
            return self.snapshots[self.index]
        return None

    def _restore(self, state: GameState) -> None:
        snap = self.snapshots[self.index]
        state.board = snap.board.copy()
        state.placement_id_counter = snap.placement_id_counter

    def undo(self, state: GameState) -> bool:
        if not self.can_undo():
            return False
        self.index -= 1
        self._restore(state)
        return True

    def redo(self, state: GameState) -> bool:
        if not self.can_redo():
            return False
        self.index += 1
        self._restore(state)
        return True

    def __len__(self) -> int:
        return len(self.snapshots)
