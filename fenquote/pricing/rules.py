"""
Pricing Rules - Engine constants that are not part of a profile.

Loaded from fenquote/rules/pricing_rules.yaml; built-in defaults apply when the
file is missing or unreadable.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent.parent / "rules" / "pricing_rules.yaml"


@dataclass(frozen=True)
class PricingRules:
    """Non-profile pricing constants."""
    # Legacy Tilt and Turn system: flat accessories per leaf
    tilt_turn_leaf_price: float = 3000.0

    # Mosquito net rate used for non-hinged systems
    default_net_type: str = "fixed"

    # Payment schedule (fractions of the discounted total)
    down_payment_share: float = 0.80
    supply_payment_share: float = 0.10
    completion_payment_share: float = 0.10

    # Display rounding
    currency_places: int = 2

    # Optional profit uplift for large single units
    large_area_uplift_enabled: bool = False
    large_area_threshold_m2: float = 4.0
    large_area_uplift_per_m2: float = 0.10

    def __post_init__(self):
        total = self.down_payment_share + self.supply_payment_share + self.completion_payment_share
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Payment shares must sum to 1.0, got {total:.4f}")


def load_pricing_rules(path: Optional[Path] = None) -> PricingRules:
    """
    Load pricing rules.

    Args:
        path: YAML file; defaults to fenquote/rules/pricing_rules.yaml

    Returns:
        PricingRules
    """
    if path is None and DEFAULT_RULES_PATH.exists():
        path = DEFAULT_RULES_PATH

    if path is None or not Path(path).exists():
        return PricingRules()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read pricing rules {path}: {e}; using defaults")
        return PricingRules()

    if not isinstance(data, dict):
        logger.warning(f"Pricing rules {path} must be a mapping; using defaults")
        return PricingRules()

    known = {f.name for f in fields(PricingRules)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Ignoring unknown pricing rule keys: {', '.join(unknown)}")

    return PricingRules(**{k: v for k, v in data.items() if k in known})
