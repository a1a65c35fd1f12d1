"""
Case value estimator - maps injury attributes to a settlement range.
Pure functions, no I/O.
"""
import logging
import math
from typing import Dict

from settlement_sam.schemas.quiz import EstimateRange

logger = logging.getLogger(__name__)

# Applied to both bounds when the claimant had surgery
SURGERY_MULTIPLIER = 5

# Wages at or above this read as "$50k+" in summaries
LOST_WAGES_MAX = 50_000

DEFAULT_INJURY_TYPE = "soft_tissue"

# Base ranges per injury type, before surgery and wages
INJURY_BASE_VALUES: Dict[str, Dict] = {
    "soft_tissue": {"low": 8_000, "high": 25_000, "label": "soft tissue (sprains & whiplash)"},
    "fracture": {"low": 20_000, "high": 75_000, "label": "broken bone / fracture"},
    "spinal": {"low": 50_000, "high": 200_000, "label": "spinal cord injury"},
    "tbi": {"low": 75_000, "high": 500_000, "label": "head injury / concussion / TBI"},
    "other": {"low": 8_000, "high": 25_000, "label": "injury"},
}


def _round(value: float) -> int:
    # Half-up, matching how the widget rounds
    return int(math.floor(value + 0.5))


def resolve_injury_type(injury_type: str) -> str:
    """Unknown injury keys fall back to the lowest bucket."""
    if injury_type in INJURY_BASE_VALUES:
        return injury_type
    logger.warning("Unknown injury type %r, using %s", injury_type, DEFAULT_INJURY_TYPE)
    return DEFAULT_INJURY_TYPE


def estimate(injury_type: str, surgery: bool, lost_wages: float) -> EstimateRange:
    """
    Settlement range in whole dollars.

    low  = base_low  * multiplier + wages
    high = base_high * multiplier + wages

    Surgery scales the pain-and-suffering component only; lost wages are
    economic damages added on top.
    """
    base = INJURY_BASE_VALUES[resolve_injury_type(injury_type)]
    multiplier = SURGERY_MULTIPLIER if surgery else 1
    wages = max(0, _round(lost_wages or 0))

    return EstimateRange(
        low=base["low"] * multiplier + wages,
        high=base["high"] * multiplier + wages,
    )


def format_currency(amount: float) -> str:
    """
    Compact dollar format.
    8000 -> "$8k", 1500000 -> "$1.5M", 500 -> "$500"
    """
    if amount >= 1_000_000:
        millions = amount / 1_000_000
        if millions == int(millions):
            return f"${int(millions)}M"
        return f"${millions:.1f}M"
    if amount >= 1_000:
        return f"${_round(amount / 1_000)}k"
    return f"${int(amount):,}"


def build_summary_text(injury_type: str, surgery: bool, lost_wages: float) -> str:
    """One-line plain-English explanation shown under the range."""
    label = INJURY_BASE_VALUES[resolve_injury_type(injury_type)]["label"]
    parts = [f"Based on a {label}"]

    if surgery:
        parts.append("with surgery")

    if lost_wages and lost_wages > 0:
        if lost_wages >= LOST_WAGES_MAX:
            wages_label = "$50k+ in lost income"
        else:
            wages_label = f"{format_currency(lost_wages)} in lost income"
        parts.append(f"and {wages_label}")

    return f"{' '.join(parts)}, here's what similar cases have settled for."
