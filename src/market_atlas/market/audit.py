"""Consistency checks over a generated record frame."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

MIN_SAMPLES_FOR_VARIANCE = 2


@dataclass
class RatioTracker:
    """Streaming mean/std of a ratio series (Welford update)."""

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def add(self, ratio: float) -> None:
        self.count += 1
        shift = ratio - self.mean
        self.mean += shift / self.count
        self.m2 += shift * (ratio - self.mean)

    def add_all(self, ratios: Iterable[float]) -> None:
        for ratio in ratios:
            self.add(float(ratio))

    @property
    def std_dev(self) -> float:
        if self.count < MIN_SAMPLES_FOR_VARIANCE:
            return 0.0
        return float(np.sqrt(self.m2 / (self.count - 1)))


class RecordAuditor:
    """
    Checks a generated record frame against the record invariants:
    revenue == price x volume (within rounding), market value inside the
    noise band around revenue, unique ascending record ids.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        audit_config = (config or {}).get("audit", {})
        self.noise_band = float(audit_config.get("value_noise_band", 0.10))
        # Price is rounded to cents before it is multiplied back by volume
        self.price_rounding = float(audit_config.get("price_rounding", 0.005))
        self.rounding = float(audit_config.get("rounding", 0.01))

        self.value_ratio_tracker = RatioTracker()

    def revenue_violations(self, frame: pd.DataFrame) -> pd.DataFrame:
        expected = frame["price"] * frame["volume_units"]
        tolerance = self.price_rounding * frame["volume_units"] + self.rounding
        return frame[(frame["revenue"] - expected).abs() > tolerance]

    def value_band_violations(self, frame: pd.DataFrame) -> pd.DataFrame:
        limit = self.noise_band * frame["revenue"] + self.rounding
        return frame[(frame["market_value_usd"] - frame["revenue"]).abs() > limit]

    def ids_are_sequential(self, frame: pd.DataFrame) -> bool:
        ids = frame["record_id"]
        return bool(ids.is_unique and ids.is_monotonic_increasing)

    def audit(self, frame: pd.DataFrame) -> dict[str, Any]:
        """Run every check and summarize the value/revenue ratio."""
        with_revenue = frame[frame["revenue"] > 0]
        ratios = with_revenue["market_value_usd"] / with_revenue["revenue"]
        self.value_ratio_tracker.add_all(ratios.to_numpy())

        revenue_bad = len(self.revenue_violations(frame))
        band_bad = len(self.value_band_violations(frame))
        sequential = self.ids_are_sequential(frame)

        return {
            "records": len(frame),
            "revenue_identity": {
                "violations": revenue_bad,
                "status": "OK" if revenue_bad == 0 else "BROKEN",
            },
            "value_noise": {
                "mean_ratio": self.value_ratio_tracker.mean,
                "std": self.value_ratio_tracker.std_dev,
                "band": self.noise_band,
                "violations": band_bad,
                "status": "OK" if band_bad == 0 else "DRIFT",
            },
            "record_ids": {"status": "OK" if sequential else "UNORDERED"},
        }
