"""
Curtain Wall Grid - Rows x columns panel layout of a rectangular wall.

Lifecycle:
- generate: all panels start as `structure`, sized from the column/row tables
- retype / merge / split: in place, never touching sizes
- reshape (columns, rows or wall size change): full regeneration, prior
  panel types and merges are discarded
- resize a column/row: sizes move, types and merges stay

Nothing here is called implicitly by pricing; pricing only reads panels.
"""

import logging
import warnings
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..models.quote_schema import CurtainWallDesign, PanelType
from .aggregates import GridAggregates, compute_aggregates, find_coverage_issues

logger = logging.getLogger(__name__)

MIN_SIZE = 0.1  # meters, smallest column/row a resize may produce
SIZE_TOLERANCE = 1e-6


class GeometryInconsistency(UserWarning):
    """Column/row sizes do not tile the wall exactly."""


@dataclass
class CurtainPanel:
    """One cell of the grid."""
    id: str
    type: PanelType
    col: int
    row: int
    width: float
    height: float
    left: float = 0.0
    top: float = 0.0
    col_span: int = 1
    row_span: int = 1
    merged_id: Optional[str] = None

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def perimeter(self) -> float:
        return 2 * (self.width + self.height)

    @property
    def is_opening(self) -> bool:
        return self.type in (PanelType.WINDOW, PanelType.DOOR)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "col": self.col,
            "row": self.row,
            "colSpan": self.col_span,
            "rowSpan": self.row_span,
            "widthMeters": self.width,
            "heightMeters": self.height,
            "left": self.left,
            "top": self.top,
            "mergedId": self.merged_id,
        }


@dataclass
class CurtainWallGrid:
    """Panel layout of one curtain wall."""
    wall_width: float
    wall_height: float
    columns: int
    rows: int
    column_sizes: List[float] = field(default_factory=list)
    row_sizes: List[float] = field(default_factory=list)
    panels: List[CurtainPanel] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    merge_seq: int = 0

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    def regenerate(
        self,
        column_sizes: Optional[Sequence[float]] = None,
        row_sizes: Optional[Sequence[float]] = None,
    ) -> None:
        """Rebuild every panel as `structure`. Discards types and merges."""
        if self.columns < 1 or self.rows < 1:
            raise ValueError(f"Grid needs at least 1 column and 1 row, got {self.columns}x{self.rows}")

        self.column_sizes, col_issue = _normalize_sizes(
            column_sizes, self.wall_width, self.columns, "Column"
        )
        self.row_sizes, row_issue = _normalize_sizes(
            row_sizes, self.wall_height, self.rows, "Row"
        )
        self.warnings = []
        self._report(col_issue, row_issue)

        lefts = _offsets(self.column_sizes)
        tops = _offsets(self.row_sizes)

        self.panels = []
        for row in range(self.rows):
            for col in range(self.columns):
                self.panels.append(CurtainPanel(
                    id=f"panel-{row * self.columns + col}",
                    type=PanelType.STRUCTURE,
                    col=col,
                    row=row,
                    width=self.column_sizes[col],
                    height=self.row_sizes[row],
                    left=lefts[col],
                    top=tops[row],
                ))
        self.merge_seq = 0

        logger.debug(f"Generated {self.columns}x{self.rows} grid on {self.wall_width}x{self.wall_height}m wall")

    def reshape(self, columns: Optional[int] = None, rows: Optional[int] = None) -> None:
        """
        Change the column and/or row count.

        The changed axis goes back to uniform sizes and the whole grid is
        regenerated, so every panel returns to `structure` and merges are lost.
        A rejected shape leaves the grid untouched.
        """
        new_columns = self.columns if columns is None else columns
        new_rows = self.rows if rows is None else rows
        if new_columns < 1 or new_rows < 1:
            raise ValueError(f"Grid needs at least 1 column and 1 row, got {new_columns}x{new_rows}")

        column_sizes = self.column_sizes if new_columns == self.columns else None
        row_sizes = self.row_sizes if new_rows == self.rows else None
        self.columns = new_columns
        self.rows = new_rows

        logger.info(f"Reshaping grid to {self.columns}x{self.rows}; panel customization discarded")
        self.regenerate(column_sizes, row_sizes)

    def resize_wall(self, wall_width: float, wall_height: float) -> None:
        """New wall dimensions; uniform sizes and a fresh grid."""
        self.wall_width = wall_width
        self.wall_height = wall_height
        self.regenerate()

    def resize_column(self, index: int, value: float) -> None:
        """
        Set one column's width; the remaining width is shared equally
        by the other columns. Panel types and merges are kept.
        """
        if not 0 <= index < self.columns:
            raise ValueError(f"Column index {index} out of range for {self.columns} columns")
        self.column_sizes = _redistribute(self.column_sizes, index, value, self.wall_width)
        self._apply_sizes()

    def resize_row(self, index: int, value: float) -> None:
        """Row counterpart of resize_column."""
        if not 0 <= index < self.rows:
            raise ValueError(f"Row index {index} out of range for {self.rows} rows")
        self.row_sizes = _redistribute(self.row_sizes, index, value, self.wall_height)
        self._apply_sizes()

    def reset_equal_sizes(self) -> None:
        self.column_sizes = [self.wall_width / self.columns] * self.columns
        self.row_sizes = [self.wall_height / self.rows] * self.rows
        self._apply_sizes()

    def _apply_sizes(self) -> None:
        _, col_issue = _normalize_sizes(self.column_sizes, self.wall_width, self.columns, "Column")
        _, row_issue = _normalize_sizes(self.row_sizes, self.wall_height, self.rows, "Row")
        self.warnings = []
        self._report(col_issue, row_issue)

        lefts = _offsets(self.column_sizes)
        tops = _offsets(self.row_sizes)
        for panel in self.panels:
            panel.width = sum(self.column_sizes[panel.col:panel.col + panel.col_span])
            panel.height = sum(self.row_sizes[panel.row:panel.row + panel.row_span])
            panel.left = lefts[panel.col]
            panel.top = tops[panel.row]

    def _report(self, *issues: Optional[str]) -> None:
        for issue in issues:
            if not issue:
                continue
            self.warnings.append(issue)
            logger.warning(f"Geometry inconsistency: {issue}")
            warnings.warn(issue, GeometryInconsistency, stacklevel=3)

    # ------------------------------------------------------------------
    # Panel edits
    # ------------------------------------------------------------------

    def get(self, panel_id: str) -> Optional[CurtainPanel]:
        for panel in self.panels:
            if panel.id == panel_id:
                return panel
        return None

    def _select(self, panel_ids: Iterable[str]) -> List[CurtainPanel]:
        wanted = set(panel_ids)
        return [p for p in self.panels if p.id in wanted]

    def set_panel_type(self, panel_ids: Iterable[str], panel_type: Union[PanelType, str]) -> int:
        """Retype panels in place. Spans and merges are untouched."""
        panel_type = PanelType(panel_type)
        selected = self._select(panel_ids)
        for panel in selected:
            panel.type = panel_type
        return len(selected)

    def merge_panels(self, panel_ids: Iterable[str]) -> Optional[str]:
        """
        Group panels under a new shared merged id.

        Member cells keep their own row/col/size (see compute_aggregates for
        what that means for pricing). Fewer than two known panels is a no-op.

        Returns:
            The new group id, or None when nothing was merged
        """
        selected = self._select(panel_ids)
        if len(selected) < 2:
            logger.debug(f"Merge needs at least 2 panels, got {len(selected)}")
            return None

        self.merge_seq += 1
        group_id = f"merged-{self.merge_seq}"
        for panel in selected:
            panel.merged_id = group_id
        return group_id

    def split_all(self) -> int:
        """Clear every merge group. Types are kept."""
        count = 0
        for panel in self.panels:
            if panel.merged_id is not None:
                panel.merged_id = None
                count += 1
        return count

    def merge_groups(self) -> Dict[str, List[CurtainPanel]]:
        groups: Dict[str, List[CurtainPanel]] = {}
        for panel in self.panels:
            if panel.merged_id:
                groups.setdefault(panel.merged_id, []).append(panel)
        return groups

    def group_bounds(self, group_id: str) -> Optional[Tuple[int, int, int, int]]:
        """Cell rectangle (min_row, min_col, max_row, max_col) spanned by a group, for display."""
        members = self.merge_groups().get(group_id)
        if not members:
            return None
        return (
            min(p.row for p in members),
            min(p.col for p in members),
            max(p.row + p.row_span - 1 for p in members),
            max(p.col + p.col_span - 1 for p in members),
        )

    # ------------------------------------------------------------------
    # Queries / conversion
    # ------------------------------------------------------------------

    def compute_aggregates(self) -> GridAggregates:
        return compute_aggregates(self.panels, self.wall_width, self.wall_height, self.warnings)

    def snapshot(self) -> dict:
        return {
            "columns": self.columns,
            "rows": self.rows,
            "column_sizes": list(self.column_sizes),
            "row_sizes": list(self.row_sizes),
            "panels": deepcopy(self.panels),
            "warnings": list(self.warnings),
            "merge_seq": self.merge_seq,
        }

    def restore(self, snapshot: dict) -> None:
        self.columns = snapshot["columns"]
        self.rows = snapshot["rows"]
        self.column_sizes = list(snapshot["column_sizes"])
        self.row_sizes = list(snapshot["row_sizes"])
        self.panels = deepcopy(snapshot["panels"])
        self.warnings = list(snapshot["warnings"])
        self.merge_seq = snapshot["merge_seq"]

    def to_design_data(self) -> dict:
        """Stored `designData` form, including the aggregates for display."""
        agg = self.compute_aggregates()
        return {
            "wallWidth": self.wall_width,
            "wallHeight": self.wall_height,
            "columns": self.columns,
            "rows": self.rows,
            "columnSizes": list(self.column_sizes),
            "rowSizes": list(self.row_sizes),
            "panels": [p.to_dict() for p in self.panels],
            "frameMeters": agg.frame_meters,
            "windowMeters": agg.window_meters,
            "glassArea": agg.glass_area,
            "cornerCount": agg.corner_count,
        }

    @classmethod
    def from_design_data(cls, design: Union[CurtainWallDesign, dict]) -> "CurtainWallGrid":
        """Rebuild an editable grid from stored design data."""
        if not isinstance(design, CurtainWallDesign):
            design = CurtainWallDesign.model_validate(design)

        grid = cls(
            wall_width=design.wall_width,
            wall_height=design.wall_height,
            columns=design.columns,
            rows=design.rows,
        )
        if not design.panels:
            grid.regenerate(design.column_sizes or None, design.row_sizes or None)
            return grid

        grid.column_sizes, col_issue = _normalize_sizes(
            design.column_sizes or None, design.wall_width, design.columns, "Column"
        )
        grid.row_sizes, row_issue = _normalize_sizes(
            design.row_sizes or None, design.wall_height, design.rows, "Row"
        )
        grid.panels = [
            CurtainPanel(
                id=rec.id,
                type=rec.type,
                col=rec.col,
                row=rec.row,
                width=rec.width,
                height=rec.height,
                left=rec.left,
                top=rec.top,
                col_span=rec.col_span,
                row_span=rec.row_span,
                merged_id=rec.merged_id,
            )
            for rec in design.panels
        ]
        grid._report(col_issue, row_issue, *find_coverage_issues(grid.panels, grid.columns, grid.rows))
        grid.merge_seq = _last_merge_seq(grid.panels)
        return grid


def generate_grid(
    columns: int,
    rows: int,
    wall_width: float,
    wall_height: float,
    column_sizes: Optional[Sequence[float]] = None,
    row_sizes: Optional[Sequence[float]] = None,
) -> CurtainWallGrid:
    """
    Create a columns x rows grid of `structure` panels.

    Args:
        columns: Column count (>= 1)
        rows: Row count (>= 1)
        wall_width: Wall width in meters
        wall_height: Wall height in meters
        column_sizes: Width per column; uniform when omitted
        row_sizes: Height per row; uniform when omitted

    Returns:
        CurtainWallGrid (with GeometryInconsistency warnings when the size
        tables do not sum to the wall dimensions)
    """
    grid = CurtainWallGrid(
        wall_width=wall_width,
        wall_height=wall_height,
        columns=columns,
        rows=rows,
    )
    grid.regenerate(column_sizes, row_sizes)
    return grid


def _normalize_sizes(
    sizes: Optional[Sequence[float]],
    total: float,
    count: int,
    axis: str,
) -> Tuple[List[float], Optional[str]]:
    """Size table of exactly `count` entries plus a description of any mismatch."""
    uniform = total / count
    if sizes is None:
        return [uniform] * count, None

    sizes = list(sizes)
    values = [float(s) if s else uniform for s in sizes[:count]]
    issues = []

    if len(sizes) != count:
        issues.append(f"{axis} sizes list has {len(sizes)} entries for {count} {axis.lower()}s")
        values += [uniform] * (count - len(values))

    covered = float(np.sum(values))
    if not np.isclose(covered, total, rtol=0.0, atol=SIZE_TOLERANCE):
        issues.append(f"{axis} sizes sum to {covered:.4f}m but the wall is {total:.4f}m")

    return values, "; ".join(issues) or None


def _offsets(sizes: Sequence[float]) -> List[float]:
    starts = np.concatenate(([0.0], np.cumsum(sizes)[:-1]))
    return [float(x) for x in starts]


def _redistribute(sizes: Sequence[float], index: int, value: float, total: float) -> List[float]:
    constrained = max(MIN_SIZE, min(total, value))
    count = len(sizes)
    if count == 1:
        return [constrained]

    share = max(MIN_SIZE, (total - constrained) / (count - 1))
    return [constrained if i == index else share for i in range(count)]


def _last_merge_seq(panels: Iterable[CurtainPanel]) -> int:
    seq = 0
    for panel in panels:
        if panel.merged_id and panel.merged_id.startswith("merged-"):
            suffix = panel.merged_id[len("merged-"):]
            if suffix.isdigit():
                seq = max(seq, int(suffix))
    return seq
