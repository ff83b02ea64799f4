"""Value tiers used to keep matched items at a comparable worth.

Each bracket includes its upper bound; the lower bound belongs to the
previous bracket. Values that fit no bracket (negative, NaN, infinite,
non-numeric) are "Unrated".
"""

import math

UNRATED = "Unrated"

# (label, exclusive lower bound, inclusive upper bound). None = unbounded.
VALUE_TIERS = [
    ("5 coins and below", None, 5.0),
    ("5-25 coins", 5.0, 25.0),
    ("25-50 coins", 25.0, 50.0),
    ("50-75 coins", 50.0, 75.0),
    ("75-100 coins", 75.0, 100.0),
    ("100-250 coins", 100.0, 250.0),
    ("250-500 coins", 250.0, 500.0),
    ("500+ coins", 500.0, None),
]


def _as_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def tier_of(value) -> str:
    """Return the tier label for the given value."""
    number = _as_number(value)
    if number is None:
        return UNRATED
    for label, _, upper in VALUE_TIERS:
        if upper is None or number <= upper:
            return label
    return UNRATED


def same_tier(a, b) -> bool:
    """Return True when both values fall into the same tier."""
    return tier_of(a) == tier_of(b)


def tier_table() -> list[dict]:
    """Tier table in the shape published to clients."""
    return [
        {"label": label, "min": 0.0 if lower is None else lower, "max": upper}
        for label, lower, upper in VALUE_TIERS
    ]
