"""
Item Pricer - Cost breakdown for one quote line.

Two algorithms keyed on item type:
- window / door / sky_light: frame, leaves, glass, accessories, net, arch
- curtain_wall: driven by the panel grid aggregates

Every cost is computed per unit and then scaled by quantity. A missing
profile prices every rate at 0 (a draft line without a profile is valid).
Results are never rounded in memory; to_dict() rounds for display.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..curtain_wall.aggregates import (
    GridAggregates,
    compute_aggregates,
    find_coverage_issues,
)
from ..models.quote_schema import ItemType, Profile, SystemType
from .rules import PricingRules

logger = logging.getLogger(__name__)

_ZERO_PROFILE = Profile()

# Systems whose leaves divide the frame vertically (adds meeting stiles)
_DIVIDED_SYSTEMS = {
    SystemType.SLIDING.value,
    SystemType.HINGED.value,
    SystemType.TILT_AND_TURN.value,
}

@dataclass
class QuotePricingResult:
    """Cost breakdown for one quote item."""
    item_id: str
    item_type: str
    system: str
    quantity: int

    # Geometry (totals include quantity)
    area: float = 0.0
    frame_length: float = 0.0
    sach_perimeter: float = 0.0  # one leaf, one unit
    total_sach_length: float = 0.0

    # Costs (all include quantity)
    frame_cost: float = 0.0
    sach_cost: float = 0.0
    glass_cost: float = 0.0
    accessories: float = 0.0
    net_cost: float = 0.0
    arch_cost: float = 0.0
    additional_cost_total: float = 0.0

    # Curtain wall (geometry per assembly, costs include quantity)
    frame_meters: float = 0.0
    window_meters: float = 0.0
    glass_area: float = 0.0
    total_panel_area: float = 0.0
    corner_count: int = 0
    num_windows: int = 0
    num_doors: int = 0
    windows_cost: float = 0.0
    accessories_windows_doors: float = 0.0
    frame_accessories: float = 0.0
    corners_cost: float = 0.0

    # Totals
    total_before_profit: float = 0.0
    profit_rate: float = 0.0
    profit_amount: float = 0.0
    total_price: float = 0.0
    m2_price: float = 0.0
    profit_percentage: float = 0.0

    has_profile: bool = True
    warnings: List[str] = field(default_factory=list)

    @property
    def is_curtain_wall(self) -> bool:
        return self.item_type == ItemType.CURTAIN_WALL.value

    def to_dict(self, places: int = 2) -> dict:
        """Display form: money and metrics rounded to `places`."""
        out: Dict[str, Any] = {}
        for name, value in self.__dict__.items():
            if isinstance(value, float):
                if name == "profit_rate":
                    out[name] = round(value, 4)
                else:
                    out[name] = round(value, places)
            elif isinstance(value, list):
                out[name] = list(value)
            else:
                out[name] = value
        return out


class ItemPricer:
    """Price quote items against their attached profile."""

    def __init__(self, rules: Optional[PricingRules] = None):
        self.rules = rules or PricingRules()

    def price(self, item) -> QuotePricingResult:
        """
        Price one item.

        Args:
            item: SimpleItem or CurtainWallItem (or any object with the same attributes)

        Returns:
            QuotePricingResult
        """
        item_type = _value(getattr(item, "type", ItemType.WINDOW.value))
        if item_type == ItemType.CURTAIN_WALL.value:
            result = self._price_curtain_wall(item)
        else:
            result = self._price_simple(item)

        logger.debug(
            f"Priced {item_type} {result.item_id}: before profit {result.total_before_profit:.2f}, "
            f"total {result.total_price:.2f}"
        )
        return result

    def price_all(self, items: Iterable) -> List[QuotePricingResult]:
        return [self.price(item) for item in items]

    # ------------------------------------------------------------------
    # Windows, doors, sky lights
    # ------------------------------------------------------------------

    def _price_simple(self, item) -> QuotePricingResult:
        profile, warnings = self._profile_of(item)
        qty = int(getattr(item, "quantity", 1) or 1)
        system = _value(getattr(item, "system", SystemType.SLIDING.value))
        width = float(item.width)
        height = float(item.height)
        leaves = int(getattr(item, "leaves", 1) or 1)

        area_unit = width * height
        frame_length_unit = 2 * (width + height)
        if system in _DIVIDED_SYSTEMS:
            frame_length_unit += (leaves - 1) * height
        sach_perimeter = 2 * (width / leaves + height)
        total_sach_length_unit = sach_perimeter * leaves

        if system == SystemType.TILT_AND_TURN.value:
            accessories_unit = self.rules.tilt_turn_leaf_price * leaves
        else:
            accessories_unit = profile.accessories_for_leaves(leaves)

        frame_cost_unit = profile.frame_rate_for_leaves(leaves) * frame_length_unit
        sach_cost_unit = profile.sach_price * total_sach_length_unit
        glass_cost_unit = profile.glass_rate(getattr(item, "glass_type", None)) * area_unit

        net_cost_unit = 0.0
        if getattr(item, "mosquito", False):
            if system == SystemType.HINGED.value:
                net_type = getattr(item, "net_type", None)
            else:
                net_type = self.rules.default_net_type
            net_cost_unit = profile.net_rate(net_type) * sach_perimeter

        arch_cost_unit = profile.arc_price * frame_length_unit if getattr(item, "arch", False) else 0.0
        additional_unit = float(getattr(item, "additional_cost", None) or 0)

        before_unit = (
            frame_cost_unit
            + sach_cost_unit
            + glass_cost_unit
            + accessories_unit
            + net_cost_unit
            + arch_cost_unit
            + additional_unit
        )

        profit_rate = self._profit_rate(item, area_unit)
        result = QuotePricingResult(
            item_id=str(getattr(item, "id", "")),
            item_type=_value(getattr(item, "type", ItemType.WINDOW.value)),
            system=system,
            quantity=qty,
            area=area_unit * qty,
            frame_length=frame_length_unit * qty,
            sach_perimeter=sach_perimeter,
            total_sach_length=total_sach_length_unit * qty,
            frame_cost=frame_cost_unit * qty,
            sach_cost=sach_cost_unit * qty,
            glass_cost=glass_cost_unit * qty,
            accessories=accessories_unit * qty,
            net_cost=net_cost_unit * qty,
            arch_cost=arch_cost_unit * qty,
            additional_cost_total=additional_unit * qty,
            has_profile=getattr(item, "profile", None) is not None,
            warnings=warnings,
        )
        self._finish(result, before_unit, profit_rate, area_unit, qty)
        return result

    # ------------------------------------------------------------------
    # Curtain walls
    # ------------------------------------------------------------------

    def _price_curtain_wall(self, item) -> QuotePricingResult:
        profile, warnings = self._profile_of(item)
        qty = int(getattr(item, "quantity", 1) or 1)
        geometry = self.curtain_wall_geometry(item)
        warnings.extend(geometry.warnings)

        frame_cost_unit = geometry.frame_meters * profile.frame_price
        windows_cost_unit = geometry.window_meters * profile.sach_price
        openings = geometry.num_windows + geometry.num_doors
        accessories_wd_unit = openings * profile.accessories_2_sach
        frame_accessories_unit = geometry.frame_meters * profile.accessories_3_sach
        corners_unit = geometry.corner_count * profile.accessories_4_sach
        glass_cost_unit = geometry.glass_area * profile.glass_rate(getattr(item, "glass_type", None))
        additional_unit = float(getattr(item, "additional_cost", None) or 0)

        before_unit = (
            frame_cost_unit
            + windows_cost_unit
            + accessories_wd_unit
            + frame_accessories_unit
            + corners_unit
            + glass_cost_unit
            + additional_unit
        )

        area_unit = geometry.total_panel_area if geometry.total_panel_area > 0 else geometry.glass_area
        profit_rate = profile.base_profit_rate if getattr(item, "profile", None) is not None else 0.0

        result = QuotePricingResult(
            item_id=str(getattr(item, "id", "")),
            item_type=ItemType.CURTAIN_WALL.value,
            system=SystemType.CURTAIN_WALL.value,
            quantity=qty,
            area=area_unit * qty,
            frame_meters=geometry.frame_meters,
            window_meters=geometry.window_meters,
            glass_area=geometry.glass_area,
            total_panel_area=geometry.total_panel_area,
            corner_count=geometry.corner_count,
            num_windows=geometry.num_windows,
            num_doors=geometry.num_doors,
            frame_cost=frame_cost_unit * qty,
            windows_cost=windows_cost_unit * qty,
            accessories_windows_doors=accessories_wd_unit * qty,
            frame_accessories=frame_accessories_unit * qty,
            corners_cost=corners_unit * qty,
            glass_cost=glass_cost_unit * qty,
            additional_cost_total=additional_unit * qty,
            has_profile=getattr(item, "profile", None) is not None,
            warnings=warnings,
        )
        self._finish(result, before_unit, profit_rate, area_unit, qty)
        return result

    def curtain_wall_geometry(self, item) -> GridAggregates:
        """
        Aggregates for a curtain-wall item, read-only on its design.

        Panels present: recomputed from the panels.
        Design without panels: the figures cached on the design.
        No design: bare outer frame of width x height.
        """
        design = getattr(item, "design_data", None)
        if design is None:
            return compute_aggregates([], float(item.width), float(item.height))

        if design.panels:
            issues = find_coverage_issues(design.panels, design.columns, design.rows)
            for issue in issues:
                logger.warning(f"Curtain wall {getattr(item, 'id', '')}: {issue}")
            return compute_aggregates(design.panels, design.wall_width, design.wall_height, issues)

        return GridAggregates(
            frame_meters=design.frame_meters,
            window_meters=design.window_meters,
            glass_area=design.glass_area,
            corner_count=design.corner_count,
            num_windows=0,
            num_doors=0,
            total_panel_area=0.0,
        )

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _profile_of(self, item):
        profile = getattr(item, "profile", None)
        if profile is None:
            logger.warning(f"Item {getattr(item, 'id', '')} has no profile; pricing at zero rates")
            return _ZERO_PROFILE, ["No profile selected; all rates are 0"]
        return profile, []

    def _profit_rate(self, item, area_unit: float) -> float:
        profile = getattr(item, "profile", None)
        if profile is None:
            return 0.0

        rate = profile.base_profit_rate
        threshold = self.rules.large_area_threshold_m2
        if self.rules.large_area_uplift_enabled and area_unit > threshold:
            rate += math.ceil(area_unit - threshold) * self.rules.large_area_uplift_per_m2
        return rate

    @staticmethod
    def _finish(
        result: QuotePricingResult,
        before_unit: float,
        profit_rate: float,
        area_unit: float,
        qty: int,
    ) -> None:
        profit_unit = before_unit * profit_rate
        total_unit = before_unit + profit_unit

        result.total_before_profit = before_unit * qty
        result.profit_rate = profit_rate
        result.profit_amount = profit_unit * qty
        result.total_price = total_unit * qty

        total_area = area_unit * qty
        result.m2_price = result.total_price / total_area if total_area > 0 else 0.0
        result.profit_percentage = (
            result.profit_amount / result.total_before_profit * 100
            if result.total_before_profit else 0.0
        )


def price_item(item, rules: Optional[PricingRules] = None) -> QuotePricingResult:
    """Price one item with default (or given) rules."""
    return ItemPricer(rules).price(item)


def _value(v) -> str:
    return str(getattr(v, "value", v))
