"""
Pricing Engine - Cost breakdown per quote item and quote totals.

This module:
- Prices windows, doors and sky lights from geometry + profile + options
- Prices curtain walls from their panel grid aggregates
- Applies the profile's profit rate per item
- Aggregates items into quote totals with discount and payment schedule

Rates come only from the item's attached profile and the pricing rules
file; nothing rate-like is compiled into the engine.
"""

from .rules import PricingRules, load_pricing_rules
from .item_pricer import ItemPricer, QuotePricingResult, price_item
from .quote_totals import QuoteTotals, QuoteSummary, aggregate_quote, price_quote

__all__ = [
    "PricingRules",
    "load_pricing_rules",
    "ItemPricer",
    "QuotePricingResult",
    "price_item",
    "QuoteTotals",
    "QuoteSummary",
    "aggregate_quote",
    "price_quote",
    "run_pricing_engine",
]


def run_pricing_engine(quote_data, rules_path=None) -> dict:
    """
    Run the pricing engine on a stored quote.

    Args:
        quote_data: QuoteData or its stored dict form
        rules_path: Optional pricing rules YAML

    Returns:
        Dict with priced items and totals (display-rounded)
    """
    import logging
    from ..models.quote_schema import QuoteData

    logger = logging.getLogger(__name__)

    if not isinstance(quote_data, QuoteData):
        quote_data = QuoteData.model_validate(quote_data)

    rules = load_pricing_rules(rules_path)
    logger.info(f"Pricing quote {quote_data.id} ({len(quote_data.items)} items)")

    summary = price_quote(quote_data, rules)

    missing_profiles = [r.item_id for r in summary.items if not r.has_profile]
    if missing_profiles:
        logger.info(f"{len(missing_profiles)} item(s) priced without a profile: {', '.join(missing_profiles)}")

    logger.info(
        f"Quote {quote_data.id}: total {summary.totals.discounted_total:,.2f} "
        f"({summary.totals.total_area:.2f} m2)"
    )
    return summary.to_dict(rules.currency_places)
