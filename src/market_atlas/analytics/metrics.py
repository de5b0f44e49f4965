"""Guarded growth and share ratios. None of these return NaN or infinity."""

from __future__ import annotations

import math


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def compute_cagr(start_value: float, end_value: float, years: float) -> float:
    """
    Compound annual growth rate as a fraction.

    ``(end / start) ** (1 / years) - 1`` when both endpoints are positive and
    the span is positive; 0.0 otherwise.
    """
    if not _finite(start_value, end_value, years):
        return 0.0
    if start_value <= 0 or end_value <= 0 or years <= 0:
        return 0.0
    return (end_value / start_value) ** (1.0 / years) - 1.0


def compute_yoy(current: float, previous: float) -> float:
    """Year-over-year growth as a fraction; 0.0 unless previous > 0."""
    if not _finite(current, previous) or previous <= 0:
        return 0.0
    return (current - previous) / previous


def share_pct(part: float, total: float) -> float:
    """``part / total * 100``, or 0.0 for a non-positive total."""
    if not _finite(part, total) or total <= 0:
        return 0.0
    return part / total * 100.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def to_index(pct: float, divisor: float = 10.0, ceiling: float = 10.0) -> float:
    """Scale a percentage into the bounded [0, ceiling] display index."""
    if not math.isfinite(pct) or divisor <= 0:
        return 0.0
    return clamp(pct / divisor, 0.0, ceiling)
