import math
import random
from datetime import date

import pytest

from settlement_sam.services.delivery_schedule import (
    THROTTLE_RANGES,
    generate_delivery_schedule,
    today_target,
    throttle_exceeded,
)

START = date(2025, 3, 3)


@pytest.mark.parametrize("mode", sorted(THROTTLE_RANGES))
def test_schedule_properties_hold_across_seeds(mode):
    low, high = THROTTLE_RANGES[mode]["min"], THROTTLE_RANGES[mode]["max"]
    for seed in range(50):
        for qty in (1, 7, 25, 100, 251):
            schedule = generate_delivery_schedule(qty, START, mode, random.Random(seed))
            targets = list(schedule.values())

            assert sum(targets) == qty
            assert 1 <= targets[0] <= math.ceil(high / 2)
            for target in targets[1:-1]:
                assert low <= target <= high
            if len(targets) > 1:
                assert 1 <= targets[-1] <= high


def test_schedule_days_are_consecutive():
    schedule = generate_delivery_schedule(40, START, "standard", random.Random(1))
    days = [date.fromisoformat(d) for d in schedule]
    assert days[0] == START
    assert all((b - a).days == 1 for a, b in zip(days, days[1:]))


def test_same_seed_same_schedule():
    first = generate_delivery_schedule(60, START, "aggressive", random.Random(7))
    second = generate_delivery_schedule(60, START, "aggressive", random.Random(7))
    assert first == second


@pytest.mark.parametrize("qty", [0, -5])
def test_non_positive_quantity_gives_empty_schedule(qty):
    assert generate_delivery_schedule(qty, START) == {}


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        generate_delivery_schedule(10, START, "turbo")


def test_throttle_check():
    schedule = {"2025-03-03": 3, "2025-03-04": 6}
    assert today_target(schedule, date(2025, 3, 4)) == 6
    assert not throttle_exceeded(schedule, 2, date(2025, 3, 3))
    assert throttle_exceeded(schedule, 3, date(2025, 3, 3))


def test_day_outside_schedule_is_throttled():
    schedule = {"2025-03-03": 3}
    assert today_target(schedule, date(2025, 3, 10)) == 0
    assert throttle_exceeded(schedule, 0, date(2025, 3, 10))
