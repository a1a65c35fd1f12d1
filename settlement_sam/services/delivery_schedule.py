"""
Delivery throttle schedules for purchased lead packages.

Modes:
    conservative  3-5 / day
    standard      5-7 / day
    aggressive    8-12 / day

Day one ramps at half rate. Each day gets a random +/-2 variation kept
inside the mode range, and no day exceeds what is left to deliver.
"""
import random
from datetime import date, timedelta
from typing import Dict, Optional, Mapping

THROTTLE_RANGES: Dict[str, Dict[str, int]] = {
    "conservative": {"min": 3, "max": 5},
    "standard": {"min": 5, "max": 7},
    "aggressive": {"min": 8, "max": 12},
}

DEFAULT_MODE = "standard"


def iso_date(day: date) -> str:
    return day.isoformat()


def generate_delivery_schedule(
    qty: int,
    start_date: date,
    mode: str = DEFAULT_MODE,
    rng: Optional[random.Random] = None
) -> Dict[str, int]:
    """
    Map ISO dates to daily targets. Targets sum to qty exactly.

    Args:
        qty: Leads in the package. Zero or less gives an empty schedule.
        start_date: First delivery day.
        mode: conservative, standard or aggressive.
        rng: Random source, seeded in tests.
    """
    if mode not in THROTTLE_RANGES:
        raise ValueError(f"Unknown throttle mode: {mode}")

    rng = rng or random.Random()
    low = THROTTLE_RANGES[mode]["min"]
    high = THROTTLE_RANGES[mode]["max"]

    schedule: Dict[str, int] = {}
    remaining = qty
    day = start_date
    first = True

    while remaining > 0:
        base = rng.randint(low, high)
        variation = rng.randint(-2, 2)
        target = max(low, min(high, base + variation))

        if first:
            target = max(1, target // 2)
            first = False

        target = min(target, remaining)
        schedule[iso_date(day)] = target
        remaining -= target
        day += timedelta(days=1)

    return schedule


def today_target(schedule: Mapping[str, int], today: date) -> int:
    """Today's target; days outside the schedule allow nothing."""
    return schedule.get(iso_date(today), 0)


def throttle_exceeded(schedule: Mapping[str, int], delivered_today: int, today: date) -> bool:
    return delivered_today >= today_target(schedule, today)
