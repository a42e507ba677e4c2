"""
Curtain Wall Panel Grid Model - Layout and geometry of curtain-wall facades.

This module provides:
- A rows x columns panel grid sized from column/row size tables
- Panel retyping (structure/window/door/corner/mullion), merge and split
- Column/row resizing with redistribution of the remaining length
- Layout presets and bounded undo/redo
- Aggregate geometry for pricing: frame meters, opening meters,
  glass area, corner count, window/door counts
"""

from .aggregates import GridAggregates, compute_aggregates, find_coverage_issues
from .grid import CurtainPanel, CurtainWallGrid, GeometryInconsistency, generate_grid
from .history import DesignHistory, DesignState
from .presets import DesignPreset, load_presets, apply_preset
from .designer import CurtainWallDesigner

__all__ = [
    "GridAggregates",
    "compute_aggregates",
    "find_coverage_issues",
    "CurtainPanel",
    "CurtainWallGrid",
    "GeometryInconsistency",
    "generate_grid",
    "DesignHistory",
    "DesignState",
    "DesignPreset",
    "load_presets",
    "apply_preset",
    "CurtainWallDesigner",
    "run_curtain_wall_layout",
]


def run_curtain_wall_layout(
    wall_width: float,
    wall_height: float,
    columns: int,
    rows: int,
    preset_name: str = None,
    window_cells: list = None,
    door_cells: list = None,
) -> dict:
    """
    Build a curtain-wall layout and return its design data.

    Args:
        wall_width: Wall width in meters
        wall_height: Wall height in meters
        columns: Column count (ignored when a preset is given)
        rows: Row count (ignored when a preset is given)
        preset_name: Optional preset to start from
        window_cells: (row, col) cells to set as windows
        door_cells: (row, col) cells to set as doors

    Returns:
        Dict in stored `designData` form
    """
    import logging

    logger = logging.getLogger(__name__)

    if preset_name:
        presets = load_presets()
        if preset_name not in presets:
            raise KeyError(f"Unknown preset '{preset_name}'. Available: {', '.join(sorted(presets))}")
        grid = apply_preset(presets[preset_name], wall_width, wall_height)
    else:
        grid = generate_grid(columns, rows, wall_width, wall_height)

    by_cell = {(p.row, p.col): p.id for p in grid.panels}
    for cells, panel_type in ((window_cells or [], "window"), (door_cells or [], "door")):
        ids = [by_cell[tuple(c)] for c in cells if tuple(c) in by_cell]
        grid.set_panel_type(ids, panel_type)

    agg = grid.compute_aggregates()
    logger.info(
        f"Layout {grid.columns}x{grid.rows}: {agg.num_windows} windows, {agg.num_doors} doors, "
        f"glass {agg.glass_area:.2f} m2"
    )
    return grid.to_design_data()
