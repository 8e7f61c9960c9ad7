"""Bracketed basal metabolic rate and activity multipliers.

The BMR figures are population averages per age bracket, not an
equation-based estimate. 0 means "cannot estimate".
"""
from typing import Any

from runcal_agents.normalizer import normalize_activity_level, normalize_gender, to_number

# (min_age, max_age, kcal/day), inclusive bounds
BMR_TABLE = {
    "male": (
        (0, 17, 1350),
        (18, 29, 1530),
        (30, 49, 1500),
        (50, 69, 1400),
        (70, 120, 1280),
    ),
    "female": (
        (0, 17, 1250),
        (18, 29, 1210),
        (30, 49, 1170),
        (50, 69, 1110),
        (70, 120, 1010),
    ),
}

ACTIVITY_FACTORS = {"low": 1.2, "medium": 1.55, "high": 1.75}


def estimate_bmr(gender: Any, age: Any) -> int:
    sex = normalize_gender(gender)
    years = to_number(age)
    if not sex or not years:
        return 0

    brackets = BMR_TABLE[sex]
    for lo, hi, kcal in brackets:
        if lo <= years <= hi:
            return kcal
    # gaps between brackets and anything past the last one
    return brackets[-1][2]


def resolve_activity_factor(level: Any) -> float:
    return ACTIVITY_FACTORS[normalize_activity_level(level)]
