"""
Tier pricing for verified lead packages.
Minimum order is 25 leads.
"""
from typing import NamedTuple

MIN_ORDER = 25


class PriceTier(NamedTuple):
    min_qty: int
    price_per_case: int  # dollars
    name: str


# Highest tier first
PRICE_TIERS = (
    PriceTier(250, 200, "Scale"),
    PriceTier(100, 225, "Growth"),
    PriceTier(25, 250, "Starter"),
)


class PriceQuote(NamedTuple):
    tier_name: str
    price_per_case: int
    total_dollars: int
    total_cents: int


def get_price_tier(qty: int) -> PriceTier:
    for tier in PRICE_TIERS:
        if qty >= tier.min_qty:
            return tier
    return PRICE_TIERS[-1]


def calculate_order_price(qty: int) -> PriceQuote:
    tier = get_price_tier(qty)
    total_dollars = qty * tier.price_per_case
    return PriceQuote(
        tier_name=tier.name,
        price_per_case=tier.price_per_case,
        total_dollars=total_dollars,
        total_cents=total_dollars * 100,
    )
