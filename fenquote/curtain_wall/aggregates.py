"""
Curtain Wall Aggregates - Geometric quantities that drive curtain-wall pricing.

Works on anything panel-shaped (grid panels or stored panel records):
each panel needs `type`, `width`, `height`, and for coverage checks
`row`, `col`, `row_span`, `col_span`.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..models.quote_schema import PanelType

logger = logging.getLogger(__name__)

# Only the outer frame corners are counted; mullion junctions are not corners
OUTER_CORNERS = 4


@dataclass
class GridAggregates:
    """Aggregate geometry of one curtain-wall design."""
    frame_meters: float
    window_meters: float
    glass_area: float
    corner_count: int
    num_windows: int
    num_doors: int
    total_panel_area: float
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "frame_meters": self.frame_meters,
            "window_meters": self.window_meters,
            "glass_area": self.glass_area,
            "corner_count": self.corner_count,
            "num_windows": self.num_windows,
            "num_doors": self.num_doors,
            "total_panel_area": self.total_panel_area,
            "warnings": list(self.warnings),
        }


def compute_aggregates(
    panels: Iterable,
    wall_width: float,
    wall_height: float,
    warnings: Optional[List[str]] = None,
) -> GridAggregates:
    """
    Fold a panel list into frame/opening meters, glass area and counts.

    Frame meters are the outer wall perimeter only, independent of the
    internal layout. Window meters and glass area sum every window/door
    panel on its own.

    NOTE: a merged group is NOT measured as one opening. Each member cell
    keeps its own width/height and contributes its own perimeter and area,
    so a merged 2x1 window prices as two perimeters, not the bounding box.
    Quotes already issued depend on this; do not switch to group bounds.

    Args:
        panels: Panels of the design
        wall_width: Wall width in meters
        wall_height: Wall height in meters
        warnings: Geometry warnings to carry into the result

    Returns:
        GridAggregates
    """
    window_meters = 0.0
    glass_area = 0.0
    total_panel_area = 0.0
    num_windows = 0
    num_doors = 0

    for panel in panels:
        area = panel.width * panel.height
        total_panel_area += area

        if panel.type == PanelType.WINDOW:
            num_windows += 1
        elif panel.type == PanelType.DOOR:
            num_doors += 1
        else:
            continue

        window_meters += 2 * (panel.width + panel.height)
        glass_area += area

    return GridAggregates(
        frame_meters=2 * (wall_width + wall_height),
        window_meters=window_meters,
        glass_area=glass_area,
        corner_count=OUTER_CORNERS,
        num_windows=num_windows,
        num_doors=num_doors,
        total_panel_area=total_panel_area,
        warnings=list(warnings or []),
    )


def find_coverage_issues(panels: Iterable, columns: int, rows: int) -> List[str]:
    """
    Check that every (row, col) cell is covered by exactly one panel.

    Returns:
        Human-readable issues; empty when the grid tiles cleanly
    """
    owners = {}
    issues = []

    for panel in panels:
        for cell in _cells(panel):
            row, col = cell
            if not (0 <= row < rows and 0 <= col < columns):
                issues.append(f"Panel {panel.id} covers cell {cell} outside the {columns}x{rows} grid")
                continue
            if cell in owners:
                issues.append(f"Cell {cell} covered by both {owners[cell]} and {panel.id}")
                continue
            owners[cell] = panel.id

    missing = [
        (r, c) for r in range(rows) for c in range(columns)
        if (r, c) not in owners
    ]
    if missing:
        issues.append(f"{len(missing)} cell(s) not covered, first {missing[0]}")

    return issues


def _cells(panel) -> List[Tuple[int, int]]:
    row_span = getattr(panel, "row_span", 1) or 1
    col_span = getattr(panel, "col_span", 1) or 1
    return [
        (r, c)
        for r in range(panel.row, panel.row + row_span)
        for c in range(panel.col, panel.col + col_span)
    ]
