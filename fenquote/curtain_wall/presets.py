"""
Curtain Wall Presets - Ready-made panel layouts.

Presets are read from fenquote/rules/curtain_wall_presets.yaml when present,
otherwise the built-in set below is used.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ..models.quote_schema import PanelType
from .grid import CurtainWallGrid, generate_grid

logger = logging.getLogger(__name__)

DEFAULT_PRESETS_PATH = Path(__file__).parent.parent / "rules" / "curtain_wall_presets.yaml"


@dataclass
class DesignPreset:
    """Named layout: panel type per (row, col)."""
    name: str
    description: str
    columns: int
    rows: int
    layout: List[List[str]] = field(default_factory=list)

    def panel_type_at(self, row: int, col: int) -> PanelType:
        try:
            return PanelType(self.layout[row][col])
        except (IndexError, ValueError):
            return PanelType.STRUCTURE

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "columns": self.columns,
            "rows": self.rows,
            "layout": [list(r) for r in self.layout],
        }


DEFAULT_PRESETS = [
    DesignPreset(
        name="Standard Office",
        description="4x3 grid with mixed windows and structure",
        columns=4,
        rows=3,
        layout=[
            ["structure", "window", "window", "structure"],
            ["structure", "window", "window", "structure"],
            ["structure", "structure", "structure", "structure"],
        ],
    ),
    DesignPreset(
        name="Retail Front",
        description="Wide windows with minimal structure",
        columns=6,
        rows=2,
        layout=[
            ["structure", "window", "window", "window", "window", "structure"],
            ["structure", "structure", "structure", "structure", "structure", "structure"],
        ],
    ),
    DesignPreset(
        name="Residential",
        description="Balanced mix for homes",
        columns=3,
        rows=4,
        layout=[
            ["structure", "window", "structure"],
            ["structure", "window", "structure"],
            ["structure", "door", "structure"],
            ["structure", "structure", "structure"],
        ],
    ),
]


def load_presets(path: Optional[Path] = None) -> Dict[str, DesignPreset]:
    """
    Load presets keyed by name.

    Args:
        path: YAML file with a top-level `presets` list

    Returns:
        Dict of preset name -> DesignPreset
    """
    if path is None and DEFAULT_PRESETS_PATH.exists():
        path = DEFAULT_PRESETS_PATH

    if path is None or not Path(path).exists():
        return {p.name: p for p in DEFAULT_PRESETS}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        presets = {}
        for entry in data.get("presets", []):
            preset = DesignPreset(
                name=entry["name"],
                description=entry.get("description", ""),
                columns=int(entry["columns"]),
                rows=int(entry["rows"]),
                layout=entry.get("layout", []),
            )
            presets[preset.name] = preset
        return presets
    except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Could not load presets from {path}: {e}")
        return {p.name: p for p in DEFAULT_PRESETS}


def apply_preset(preset: DesignPreset, wall_width: float, wall_height: float) -> CurtainWallGrid:
    """Fresh uniform grid in the preset's shape, typed from its layout."""
    grid = generate_grid(preset.columns, preset.rows, wall_width, wall_height)
    for panel in grid.panels:
        panel.type = preset.panel_type_at(panel.row, panel.col)
    logger.info(f"Applied preset '{preset.name}' ({preset.columns}x{preset.rows})")
    return grid
