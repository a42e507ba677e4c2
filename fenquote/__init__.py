"""
Fenquote - Pricing & layout engine for aluminum fenestration quotes.

Windows, doors, sky lights and curtain walls are turned into priced line
items and quote totals (area, cost, profit, discount, payment schedule).

Modules:
- models: quote schema (items, profiles, settings)
- curtain_wall: panel grid model and its aggregate geometry
- pricing: per-item breakdown and quote aggregation
"""

__version__ = "1.0.0"
