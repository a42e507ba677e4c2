"""
Fenquote Quote Schema
Pydantic models for aluminum fenestration quotes.

The schema is the validation boundary of the engine:
- Strict enums for item types, systems, glass and net types
- Dimensions and quantities validated on construction
- Option flags normalized against the item's system/leaves
- Curtain-wall layout data only exists on the curtain-wall variant

Pricing never raises for a validated item; anything that can be wrong
about an item is rejected or normalized here.
"""

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class ItemType(str, Enum):
    """Quote line type."""
    WINDOW = "window"
    DOOR = "door"
    SKY_LIGHT = "sky_light"
    CURTAIN_WALL = "curtain_wall"


class SystemType(str, Enum):
    """Aluminum system. Values match the stored catalog spelling."""
    SLIDING = "Sliding"
    HINGED = "hinged"
    FIXED = "fixed"
    TILT_AND_TURN = "Tilt and Turn"  # legacy system, still on old quotes
    CURTAIN_WALL = "Curtain Wall"


class GlassType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    LAMINATED = "laminated"


class NetType(str, Enum):
    """Mosquito net variant (hinged systems only)."""
    FIXED = "fixed"
    PLISSE = "plisse"
    PANDA = "panda"


class UpperPanelType(str, Enum):
    HINGED = "hinged"
    FIXED = "fixed"


class PanelType(str, Enum):
    """Curtain-wall panel type."""
    STRUCTURE = "structure"
    WINDOW = "window"
    DOOR = "door"
    CORNER = "corner"
    MULLION = "mullion"


class PricingType(str, Enum):
    TOTALS = "totals"
    DETAILED = "detailed"


class ExportFormat(str, Enum):
    PDF = "pdf"
    PRINT = "print"
    EMAIL = "email"


class _CamelModel(BaseModel):
    """Accepts both the stored camelCase keys and snake_case names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# REFERENCE DATA
# =============================================================================

RATE_FIELDS = (
    "frame_price",
    "frame_price_3",
    "sach_price",
    "accessories_2_sach",
    "accessories_3_sach",
    "accessories_4_sach",
    "glass_price_single",
    "glass_price_double",
    "glass_price_triple",
    "glass_price_laminated",
    "arc_price",
    "mosquito_price_fixed",
    "mosquito_price_plisse",
    "net_price_panda",
    "kg_price",
    "base_profit_rate",
)


class Profile(BaseModel):
    """
    Price book entry for one aluminum system.

    Copied by value into a quote item at selection time, so a quote keeps
    the rates it was priced with even after the catalog changes.
    Every rate defaults to 0; an empty Profile() prices everything at 0.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str = ""
    brand: str = ""
    name: str = ""

    # Linear rates (per meter)
    frame_price: float = 0.0
    frame_price_3: float = 0.0  # 3-leaf frames
    sach_price: float = Field(
        default=0.0,
        validation_alias=AliasChoices("sach_price", "leaf_price"),
    )
    arc_price: float = 0.0
    mosquito_price_fixed: float = 0.0
    mosquito_price_plisse: float = 0.0
    net_price_panda: float = 0.0

    # Accessories (per unit, by leaf count; curtain walls reuse them)
    accessories_2_sach: float = Field(
        default=0.0,
        validation_alias=AliasChoices("accessories_2_sach", "accessories_2_leaves"),
    )
    accessories_3_sach: float = Field(
        default=0.0,
        validation_alias=AliasChoices("accessories_3_sach", "accessories_3_leaves"),
    )
    accessories_4_sach: float = Field(
        default=0.0,
        validation_alias=AliasChoices("accessories_4_sach", "accessories_4_leaves"),
    )

    # Glass (per m2)
    glass_price_single: float = 0.0
    glass_price_double: float = 0.0
    glass_price_triple: float = 0.0
    glass_price_laminated: float = 0.0

    # Raw material (per kg)
    kg_price: float = 0.0

    base_profit_rate: float = Field(default=0.0, ge=0.0)

    # Constraints (meters, 0 = unconstrained)
    max_height: float = 0.0
    max_width: float = 0.0

    @field_validator(*RATE_FIELDS, "max_height", "max_width", mode="before")
    @classmethod
    def coerce_rate(cls, v):
        if v is None or v == "":
            return 0.0
        return float(v)

    def glass_rate(self, glass_type: Union["GlassType", str, None]) -> float:
        """Per-m2 glass rate; unknown or missing types price as single."""
        key = str(getattr(glass_type, "value", glass_type) or "single").lower()
        return {
            "double": self.glass_price_double,
            "triple": self.glass_price_triple,
            "laminated": self.glass_price_laminated,
        }.get(key, self.glass_price_single)

    def net_rate(self, net_type: Union["NetType", str, None]) -> float:
        key = str(getattr(net_type, "value", net_type) or "fixed").lower()
        return {
            "plisse": self.mosquito_price_plisse,
            "panda": self.net_price_panda,
        }.get(key, self.mosquito_price_fixed)

    def accessories_for_leaves(self, leaves: int) -> float:
        return {
            2: self.accessories_2_sach,
            3: self.accessories_3_sach,
            4: self.accessories_4_sach,
        }.get(leaves, 0.0)

    def frame_rate_for_leaves(self, leaves: int) -> float:
        # Profiles without a 3-leaf rate use the standard frame rate
        if leaves == 3 and self.frame_price_3 > 0:
            return self.frame_price_3
        return self.frame_price


class Color(BaseModel):
    """Cosmetic finish. Carried through to display only, never priced."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    code: str = ""
    brand: str = ""
    color: str = ""
    finish: str = ""


# =============================================================================
# CURTAIN-WALL DESIGN DATA
# =============================================================================

class PanelRecord(_CamelModel):
    """Stored form of one curtain-wall panel."""
    id: str
    type: PanelType = PanelType.STRUCTURE
    col: int = Field(ge=0)
    row: int = Field(ge=0)
    col_span: int = Field(default=1, ge=1)
    row_span: int = Field(default=1, ge=1)
    width: float = Field(validation_alias=AliasChoices("width", "widthMeters"))
    height: float = Field(validation_alias=AliasChoices("height", "heightMeters"))
    left: float = 0.0
    top: float = 0.0
    merged_id: Optional[str] = None


class CurtainWallDesign(_CamelModel):
    """
    Layout of a curtain wall as produced by the grid designer.

    The stored aggregates are a cache for display; pricing recomputes them
    from `panels` whenever panels are present.
    """
    wall_width: float = Field(gt=0)
    wall_height: float = Field(gt=0)
    columns: int = Field(default=1, ge=1)
    rows: int = Field(default=1, ge=1)
    column_sizes: List[float] = Field(default_factory=list)
    row_sizes: List[float] = Field(default_factory=list)
    panels: List[PanelRecord] = Field(default_factory=list)

    frame_meters: float = 0.0
    window_meters: float = 0.0
    glass_area: float = 0.0
    corner_count: int = 0


# =============================================================================
# QUOTE ITEMS (tagged union on `type`)
# =============================================================================

class _QuoteItemBase(_CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    width: float = Field(gt=0, description="meters")
    height: float = Field(gt=0, description="meters")
    quantity: int = Field(default=1, ge=1)
    glass_type: GlassType = GlassType.SINGLE
    additional_cost: Optional[float] = Field(default=None, description="flat, per unit")
    profile: Optional[Profile] = None
    color: Optional[Color] = None


class SimpleItem(_QuoteItemBase):
    """Window, door or sky light priced from its own width/height."""
    type: Literal["window", "door", "sky_light"] = "window"
    system: SystemType = SystemType.SLIDING
    leaves: int = Field(default=1, ge=1)
    mosquito: bool = False
    net_type: Optional[NetType] = None
    arch: bool = False
    upper_panel_type: Optional[UpperPanelType] = None

    @field_validator("system")
    @classmethod
    def validate_system(cls, v):
        if v == SystemType.CURTAIN_WALL:
            raise ValueError("'Curtain Wall' system requires type 'curtain_wall'")
        return v

    @model_validator(mode="after")
    def normalize_options(self):
        """Drop option flags that do not apply to this system/leaf combination."""
        hinged = self.system == SystemType.HINGED
        if self.net_type is not None and not (self.mosquito and hinged):
            logger.warning(
                f"Item {self.id}: netType '{self.net_type.value}' needs mosquito on a "
                f"hinged system; cleared"
            )
            self.net_type = None
        elif self.mosquito and hinged and self.net_type is None:
            self.net_type = NetType.FIXED

        if self.upper_panel_type is not None and not (
            hinged and self.leaves == 2 and self.type == ItemType.WINDOW.value
        ):
            logger.warning(
                f"Item {self.id}: upperPanelType only applies to 2-leaf hinged windows; cleared"
            )
            self.upper_panel_type = None
        return self


class CurtainWallItem(_QuoteItemBase):
    """Curtain wall priced from its panel layout."""
    type: Literal["curtain_wall"] = "curtain_wall"
    system: SystemType = SystemType.CURTAIN_WALL
    glass_type: GlassType = GlassType.DOUBLE
    design_data: Optional[CurtainWallDesign] = None

    @field_validator("system")
    @classmethod
    def validate_system(cls, v):
        if v != SystemType.CURTAIN_WALL:
            raise ValueError("curtain_wall items use the 'Curtain Wall' system")
        return v


QuoteItem = Annotated[Union[SimpleItem, CurtainWallItem], Field(discriminator="type")]

_ITEM_ADAPTER = TypeAdapter(QuoteItem)


# =============================================================================
# QUOTE
# =============================================================================

class ContactInfo(_CamelModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    notes: str = ""


class QuoteSettings(_CamelModel):
    expiration_days: int = Field(default=30, ge=0)
    project_duration: int = Field(default=60, ge=0)
    discount_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    custom_notes: str = "Standard aluminum work installation with professional finishing."
    pricing_type: PricingType = PricingType.TOTALS
    export_format: ExportFormat = ExportFormat.PDF


class QuoteData(_CamelModel):
    """
    Complete quote as persisted by the application.
    The engine only reads `items` and `settings.discount_percentage`.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:9])
    name: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    items: List[QuoteItem] = Field(default_factory=list)
    settings: QuoteSettings = Field(default_factory=QuoteSettings)
    global_color: Optional[Color] = None

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True)


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def parse_item(data: Dict[str, Any]) -> Union[SimpleItem, CurtainWallItem]:
    """Validate a raw item dict into the matching item variant."""
    return _ITEM_ADAPTER.validate_python(data)


def create_item(
    item_type: str = "window",
    width: float = 1.2,
    height: float = 1.5,
    profile: Optional[Profile] = None,
    **kwargs
) -> Union[SimpleItem, CurtainWallItem]:
    """Factory with the defaults the quote editor starts a new line with."""
    if item_type == ItemType.CURTAIN_WALL.value:
        return CurtainWallItem(width=width, height=height, profile=profile, **kwargs)

    defaults = {"system": SystemType.SLIDING, "leaves": 2, "glass_type": GlassType.DOUBLE}
    defaults.update(kwargs)
    return SimpleItem(type=item_type, width=width, height=height, profile=profile, **defaults)
