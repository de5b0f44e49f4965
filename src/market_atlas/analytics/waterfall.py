"""Incremental-opportunity waterfall from yearly market totals."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

from market_atlas.analytics.aggregation import DEFAULT_VALUE_DIVISOR, evaluation_values

logger = logging.getLogger(__name__)

BASE = "base"
INCREMENT = "increment"
TOTAL = "total"


@dataclass
class WaterfallStep:
    year: str
    kind: str
    value: float
    running_total: float
    is_fallback: bool = False


@dataclass
class WaterfallResult:
    steps: list[WaterfallStep] = field(default_factory=list)
    total_incremental_opportunity: float = 0.0

    @property
    def used_fallback(self) -> bool:
        return any(step.is_fallback for step in self.steps)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class WaterfallCalculator:
    """
    Incremental-opportunity waterfall from a base year to a forecast horizon.

    Years without data fall back to the configured default increments, scaled
    by the ratio of the actual base to the default base, so a narrow filter
    still yields a proportionate chart.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        wf_config = config.get("waterfall", {})
        self.base_year = int(wf_config.get("base_year", 2024))
        self.end_year = int(wf_config.get("end_year", 2031))
        self.default_base_value = float(wf_config.get("default_base_value", 57159.0))
        self.default_increments = [
            float(v)
            for v in wf_config.get(
                "default_increments",
                [2638.4, 2850.4, 3055.6, 3231.0, 3432.9, 3674.2, 3885.1],
            )
        ]
        self.value_divisor = float(
            config.get("evaluation", {}).get("value_divisor", DEFAULT_VALUE_DIVISOR)
        )

        span = self.end_year - self.base_year
        if len(self.default_increments) < span:
            raise ValueError(
                f"Need {span} default increments for {self.base_year + 1}..{self.end_year}, "
                f"got {len(self.default_increments)}"
            )

    def yearly_totals(self, frame: pd.DataFrame) -> dict[int, float]:
        if frame.empty:
            return {}
        values = evaluation_values(frame, value_divisor=self.value_divisor)
        return {int(y): float(v) for y, v in values.groupby(frame["year"]).sum().items()}

    def compute(self, frame: pd.DataFrame) -> WaterfallResult:
        totals = self.yearly_totals(frame)

        base_value = totals.get(self.base_year, 0.0)
        base_is_fallback = base_value <= 0
        if base_is_fallback:
            base_value = self.default_base_value
        scale = base_value / self.default_base_value

        steps = [
            WaterfallStep(
                year=str(self.base_year),
                kind=BASE,
                value=base_value,
                running_total=base_value,
                is_fallback=base_is_fallback,
            )
        ]
        running = base_value
        total_increment = 0.0
        fallback_years = []

        for offset, year in enumerate(range(self.base_year + 1, self.end_year + 1)):
            current = totals.get(year, 0.0)
            previous = totals.get(year - 1, 0.0)
            if current > 0 and previous > 0:
                increment = current - previous
                is_fallback = False
            else:
                increment = self.default_increments[offset] * scale
                is_fallback = True
                fallback_years.append(year)

            running += increment
            total_increment += increment
            steps.append(
                WaterfallStep(
                    year=str(year),
                    kind=INCREMENT,
                    value=increment,
                    running_total=running,
                    is_fallback=is_fallback,
                )
            )

        steps.append(
            WaterfallStep(
                year=str(self.end_year + 1),
                kind=TOTAL,
                value=running,
                running_total=running,
            )
        )

        if fallback_years:
            logger.debug("Waterfall used default increments for years %s", fallback_years)

        return WaterfallResult(steps=steps, total_incremental_opportunity=total_increment)
