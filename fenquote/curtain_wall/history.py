"""
Design History - Bounded undo/redo of curtain-wall grid edits.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .grid import CurtainWallGrid

logger = logging.getLogger(__name__)

MAX_STATES = 50


@dataclass
class DesignState:
    """Grid snapshot taken before an edit."""
    seq: int
    action: str
    description: str
    snapshot: dict


class DesignHistory:
    """
    Undo/redo stacks of grid snapshots.

    `record` is called before an edit with the state the edit replaces.
    Only the last MAX_STATES snapshots are kept.
    """

    def __init__(self, limit: int = MAX_STATES):
        self.limit = limit
        self._undo: List[DesignState] = []
        self._redo: List[DesignState] = []
        self._seq = 0

    def __len__(self) -> int:
        return len(self._undo)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def record(self, grid: CurtainWallGrid, action: str, description: str = "") -> DesignState:
        self._seq += 1
        state = DesignState(self._seq, action, description, grid.snapshot())
        self._undo.append(state)
        if len(self._undo) > self.limit:
            self._undo = self._undo[-self.limit:]
        self._redo.clear()
        return state

    def undo(self, grid: CurtainWallGrid) -> Optional[DesignState]:
        """Restore the state before the last edit."""
        if not self._undo:
            return None
        state = self._undo.pop()
        self._redo.append(DesignState(state.seq, state.action, state.description, grid.snapshot()))
        grid.restore(state.snapshot)
        return state

    def redo(self, grid: CurtainWallGrid) -> Optional[DesignState]:
        if not self._redo:
            return None
        state = self._redo.pop()
        self._undo.append(DesignState(state.seq, state.action, state.description, grid.snapshot()))
        grid.restore(state.snapshot)
        return state

    def undo_last(self, grid: CurtainWallGrid, action: str) -> Optional[DesignState]:
        """
        Roll back to just before the most recent edit of `action`
        (e.g. "panel_merge"), discarding the edits made after it.
        """
        for index in range(len(self._undo) - 1, -1, -1):
            if self._undo[index].action == action:
                state = self._undo[index]
                del self._undo[index:]
                self._redo.clear()
                grid.restore(state.snapshot)
                logger.debug(f"Rolled back to before '{action}' #{state.seq}")
                return state
        return None

    def has_action(self, action: str) -> bool:
        return any(s.action == action for s in self._undo)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
