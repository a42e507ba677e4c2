"""
Quote Totals - Fold priced items into quote-level figures.

The quote discount is taken entirely out of profit, never out of cost.
The payment schedule splits the discounted total 80/10/10; the last share
absorbs rounding so the three payments add back to the total.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..models.quote_schema import QuoteData
from .item_pricer import ItemPricer, QuotePricingResult
from .rules import PricingRules

logger = logging.getLogger(__name__)


@dataclass
class QuoteTotals:
    """Quote-level aggregates after discount."""
    item_count: int = 0
    total_area: float = 0.0
    total_before_profit: float = 0.0
    total_price: float = 0.0  # after profit, before discount
    gross_profit: float = 0.0
    gross_profit_percentage: float = 0.0

    discount_percentage: float = 0.0
    discount_amount: float = 0.0
    discounted_total: float = 0.0
    total_profit: float = 0.0  # net of discount
    profit_percentage: float = 0.0
    m2_price: float = 0.0

    down_payment: float = 0.0
    supply_payment: float = 0.0
    completion_payment: float = 0.0

    def to_dict(self, places: int = 2) -> dict:
        return {
            k: round(v, places) if isinstance(v, float) else v
            for k, v in self.__dict__.items()
        }


@dataclass
class QuoteSummary:
    """Priced items plus totals for one quote."""
    quote_id: str
    items: List[QuotePricingResult] = field(default_factory=list)
    totals: QuoteTotals = field(default_factory=QuoteTotals)

    def to_dict(self, places: int = 2) -> dict:
        return {
            "quote_id": self.quote_id,
            "items": [i.to_dict(places) for i in self.items],
            "totals": self.totals.to_dict(places),
        }


def aggregate_quote(
    results: Iterable[QuotePricingResult],
    discount_percentage: float = 0.0,
    rules: Optional[PricingRules] = None,
) -> QuoteTotals:
    """
    Sum priced items and apply the quote discount.

    Args:
        results: Priced items
        discount_percentage: Quote discount, 0-100
        rules: Payment schedule and rounding

    Returns:
        QuoteTotals
    """
    rules = rules or PricingRules()
    totals = QuoteTotals(discount_percentage=float(discount_percentage or 0))

    for r in results:
        totals.item_count += 1
        totals.total_area += r.area
        totals.total_before_profit += r.total_before_profit
        totals.gross_profit += r.profit_amount
        totals.total_price += r.total_price

    if totals.total_price:
        totals.gross_profit_percentage = totals.gross_profit / totals.total_price * 100

    totals.discount_amount = totals.total_price * totals.discount_percentage / 100
    totals.discounted_total = totals.total_price - totals.discount_amount
    totals.total_profit = totals.gross_profit - totals.discount_amount
    if totals.discounted_total > 0:
        totals.profit_percentage = totals.total_profit / totals.discounted_total * 100
    if totals.total_area > 0:
        totals.m2_price = totals.discounted_total / totals.total_area

    places = rules.currency_places
    totals.down_payment = round(totals.discounted_total * rules.down_payment_share, places)
    totals.supply_payment = round(totals.discounted_total * rules.supply_payment_share, places)
    totals.completion_payment = round(
        totals.discounted_total - totals.down_payment - totals.supply_payment, places
    )

    logger.debug(
        f"Quote totals: {totals.item_count} items, {totals.total_price:.2f} before discount, "
        f"{totals.discounted_total:.2f} after {totals.discount_percentage}%"
    )
    return totals


def price_quote(quote: QuoteData, rules: Optional[PricingRules] = None) -> QuoteSummary:
    """Price every item of a quote and aggregate with its discount."""
    pricer = ItemPricer(rules)
    results = pricer.price_all(quote.items)
    totals = aggregate_quote(results, quote.settings.discount_percentage, pricer.rules)
    return QuoteSummary(quote_id=quote.id, items=results, totals=totals)
