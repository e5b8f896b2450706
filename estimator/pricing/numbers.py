# estimator/pricing/numbers.py
"""Guarded arithmetic shared by the pricing engine.

Every division in the engine goes through :func:`safe_div` so that a zero
denominator produces ``0.0`` rather than ``ZeroDivisionError``, NaN or
infinity. The worst outcome of bad input is a $0 line, never a crash.
"""

import math

MIN_MARGIN = 0.0
MAX_MARGIN = 99.0


def safe_div(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def clamp_margin(margin_percent: float | None) -> float:
    """Clamp a margin percentage to [0, 99] and return it as a fraction."""
    m = as_float(margin_percent)
    return min(max(m, MIN_MARGIN), MAX_MARGIN) / 100.0


def rate_for_margin(cost: float, margin_percent: float | None) -> float:
    """Sale rate that yields ``margin_percent`` on ``cost``: cost / (1 - m)."""
    return cost / (1.0 - clamp_margin(margin_percent))


def markup_percent(rate: float, cost: float) -> float:
    return safe_div(rate - cost, cost) * 100.0


def margin_percent(rate: float, cost: float) -> float:
    return safe_div(rate - cost, rate) * 100.0


def as_float(value, default: float = 0.0) -> float:
    """Coerce a stored numeric field; missing values fall back to ``default``.

    Raises ``ValueError`` for NaN and infinities.
    """
    if value is None or value == '':
        return default
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number
