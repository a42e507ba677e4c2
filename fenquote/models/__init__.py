# Models package
from .quote_schema import (
    ItemType,
    SystemType,
    GlassType,
    NetType,
    UpperPanelType,
    PanelType,
    PricingType,
    ExportFormat,
    Profile,
    Color,
    PanelRecord,
    CurtainWallDesign,
    SimpleItem,
    CurtainWallItem,
    QuoteItem,
    ContactInfo,
    QuoteSettings,
    QuoteData,
    parse_item,
    create_item,
)

__all__ = [
    "ItemType",
    "SystemType",
    "GlassType",
    "NetType",
    "UpperPanelType",
    "PanelType",
    "PricingType",
    "ExportFormat",
    "Profile",
    "Color",
    "PanelRecord",
    "CurtainWallDesign",
    "SimpleItem",
    "CurtainWallItem",
    "QuoteItem",
    "ContactInfo",
    "QuoteSettings",
    "QuoteData",
    "parse_item",
    "create_item",
]
