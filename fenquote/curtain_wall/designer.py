"""
Curtain Wall Designer - Grid editing session with history.

Wraps a CurtainWallGrid so every user edit is recorded for undo/redo.
Shape changes (columns, rows, wall size, presets) regenerate the grid and
start a new history.
"""

import logging
from typing import Iterable, Optional, Sequence, Union

from ..models.quote_schema import CurtainWallDesign, PanelType
from .aggregates import GridAggregates
from .grid import CurtainWallGrid, generate_grid
from .history import DesignHistory, DesignState
from .presets import DesignPreset, apply_preset

logger = logging.getLogger(__name__)


class CurtainWallDesigner:
    """Editable curtain-wall layout."""

    def __init__(
        self,
        wall_width: float,
        wall_height: float,
        columns: int = 4,
        rows: int = 3,
        column_sizes: Optional[Sequence[float]] = None,
        row_sizes: Optional[Sequence[float]] = None,
    ):
        self.grid = generate_grid(columns, rows, wall_width, wall_height, column_sizes, row_sizes)
        self.history = DesignHistory()

    @classmethod
    def from_design_data(cls, design: Union[CurtainWallDesign, dict]) -> "CurtainWallDesigner":
        designer = cls.__new__(cls)
        designer.grid = CurtainWallGrid.from_design_data(design)
        designer.history = DesignHistory()
        return designer

    # Shape changes: destructive, history restarts

    def set_columns(self, columns: int) -> None:
        self.grid.reshape(columns=columns)
        self.history.clear()

    def set_rows(self, rows: int) -> None:
        self.grid.reshape(rows=rows)
        self.history.clear()

    def set_wall_size(self, wall_width: float, wall_height: float) -> None:
        self.grid.resize_wall(wall_width, wall_height)
        self.history.clear()

    def apply_preset(self, preset: DesignPreset) -> None:
        self.history.record(self.grid, "preset_apply", f"Applied preset: {preset.name}")
        self.grid = apply_preset(preset, self.grid.wall_width, self.grid.wall_height)

    # Recorded edits

    def set_panel_type(self, panel_ids: Iterable[str], panel_type: Union[PanelType, str]) -> int:
        panel_ids = list(panel_ids)
        if not panel_ids:
            return 0
        panel_type = PanelType(panel_type)
        self.history.record(
            self.grid, "panel_type_change",
            f"Changed {len(panel_ids)} panel(s) to {panel_type.value}",
        )
        return self.grid.set_panel_type(panel_ids, panel_type)

    def merge(self, panel_ids: Iterable[str]) -> Optional[str]:
        known = [pid for pid in set(panel_ids) if self.grid.get(pid) is not None]
        if len(known) < 2:
            logger.debug(f"Merge skipped: {len(known)} known panel(s)")
            return None
        self.history.record(self.grid, "panel_merge", f"Merged {len(known)} panels")
        return self.grid.merge_panels(known)

    def split_all(self) -> int:
        if not self.grid.merge_groups():
            return 0
        self.history.record(self.grid, "panel_split", "Split all merged panels")
        return self.grid.split_all()

    def resize_column(self, index: int, value: float) -> None:
        self.history.record(self.grid, "column_size_change", f"Column {index + 1} set to {value:.1f}m")
        self.grid.resize_column(index, value)

    def resize_row(self, index: int, value: float) -> None:
        self.history.record(self.grid, "row_size_change", f"Row {index + 1} set to {value:.1f}m")
        self.grid.resize_row(index, value)

    def reset_equal_sizes(self) -> None:
        self.history.record(self.grid, "reset_sizes", "Reset to equal column and row sizes")
        self.grid.reset_equal_sizes()

    # History

    def undo(self) -> Optional[DesignState]:
        return self.history.undo(self.grid)

    def redo(self) -> Optional[DesignState]:
        return self.history.redo(self.grid)

    def undo_merges(self) -> Optional[DesignState]:
        return self.history.undo_last(self.grid, "panel_merge")

    # Output

    def aggregates(self) -> GridAggregates:
        return self.grid.compute_aggregates()

    def design_data(self) -> dict:
        return self.grid.to_design_data()
