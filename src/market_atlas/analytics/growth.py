"""
Year-over-year and CAGR series, per segment member or per region.

The first year of every series reports 0 for both figures.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

from market_atlas.analytics.aggregation import DEFAULT_VALUE_DIVISOR, evaluation_values
from market_atlas.analytics.attractiveness import segment_entities
from market_atlas.analytics.filters import filter_segment
from market_atlas.analytics.metrics import compute_cagr, compute_yoy
from market_atlas.market.core import resolve_field

SERIES_LABELS = {
    "product_type": "By Product Type",
    "product_form": "By Product Form",
    "price_range": "By Price Range",
    "age_group": "By Age Group",
    "profession": "By Profession",
    "sales_channel": "By Sales Channel",
}


@dataclass
class GrowthSeries:
    """
    One YoY/CAGR chart. Segment series carry ``<key>_yoy`` / ``<key>_cagr``
    columns per segment key; region series carry plain ``yoy`` / ``cagr``.
    """

    label: str
    segment_keys: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def growth_rows(yearly: pd.Series, years: list[int]) -> list[tuple[int, float, float]]:
    """(year, yoy %, cagr-from-first-year %) for each year on the axis."""
    first_year = years[0]
    first_value = float(yearly.get(first_year, 0.0))
    rows = []
    for index, year in enumerate(years):
        current = float(yearly.get(year, 0.0))
        if index == 0:
            rows.append((year, 0.0, 0.0))
            continue
        previous = float(yearly.get(years[index - 1], 0.0))
        yoy = compute_yoy(current, previous) * 100.0
        cagr = compute_cagr(first_value, current, year - first_year) * 100.0
        rows.append((year, yoy, cagr))
    return rows


class GrowthCalculator:
    """Year-over-year and CAGR-to-date series by segment or by region."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.value_divisor = float(
            config.get("evaluation", {}).get("value_divisor", DEFAULT_VALUE_DIVISOR)
        )

    def compute(
        self,
        frame: pd.DataFrame,
        regions: Iterable[str] | None = None,
        segment_field: str | None = None,
        segment_values: Iterable[str] | None = None,
    ) -> list[GrowthSeries]:
        selected_regions = [r for r in (regions or []) if r]
        selected_values = [v for v in (segment_values or []) if v]
        subset = frame
        if selected_regions:
            subset = subset.loc[subset["region"].isin(selected_regions)]
        if segment_field:
            subset = filter_segment(subset, segment_field, selected_values)

        if subset.empty:
            return []
        values = evaluation_values(subset, value_divisor=self.value_divisor)

        if segment_field:
            return self._segment_series(subset, values, segment_field, selected_values)
        return self._region_series(subset, values, selected_regions)

    def _segment_series(
        self,
        subset: pd.DataFrame,
        values: pd.Series,
        segment_field: str,
        selected_values: list[str],
    ) -> list[GrowthSeries]:
        years = sorted(int(y) for y in subset["year"].unique())
        if len(years) < 2:
            return []

        column, members = segment_entities(subset, segment_field, selected_values)
        rows: list[dict[str, Any]] = [{"year": str(year)} for year in years]
        keys: list[str] = []
        for key, member_values in members.items():
            mask = subset[column].isin(member_values)
            if not mask.any():
                continue
            keys.append(key)
            yearly = values[mask].groupby(subset.loc[mask, "year"]).sum()
            for row, (_, yoy, cagr) in zip(rows, growth_rows(yearly, years)):
                row[f"{key}_yoy"] = yoy
                row[f"{key}_cagr"] = cagr

        label = SERIES_LABELS.get(resolve_field(segment_field), "By Segment")
        return [GrowthSeries(label=label, segment_keys=keys, rows=rows)]

    def _region_series(
        self, subset: pd.DataFrame, values: pd.Series, regions: list[str]
    ) -> list[GrowthSeries]:
        series = []
        for region in regions:
            mask = subset["region"] == region
            yearly = values[mask].groupby(subset.loc[mask, "year"]).sum()
            years = sorted(int(y) for y in yearly.index)
            if len(years) < 2:
                continue
            rows = [
                {"year": str(year), "yoy": yoy, "cagr": cagr}
                for year, yoy, cagr in growth_rows(yearly, years)
            ]
            series.append(GrowthSeries(label=region, rows=rows))
        return series
