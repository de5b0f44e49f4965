"""
Year x segment aggregation into chart-ready datasets.

Every dataset row carries every segment key on its axis; missing
(year, segment) pairs are filled with 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

from market_atlas.analytics.filters import distinct_values
from market_atlas.analytics.metrics import share_pct
from market_atlas.market.core import MarketEvaluation, resolve_field
from market_atlas.market.hierarchy import (
    expand_selection,
    find_node,
    get_product_hierarchy,
    is_parent,
    leaf_labels,
)

# marketValueUsd / 1000 is the "By Value" display unit
DEFAULT_VALUE_DIVISOR = 1000.0


@dataclass
class ChartDataset:
    """One row per year; each row maps every segment on the axis to a number."""

    years: list[int] = field(default_factory=list)
    segments: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    is_stacked: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def value(self, year: int, segment: str) -> float:
        for row in self.rows:
            if row["year"] == str(year):
                return float(row.get(segment, 0.0))
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RegionCountryShare:
    year: int
    region: str
    country: str
    value: float
    year_region: str


def evaluation_values(
    frame: pd.DataFrame,
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
) -> pd.Series:
    """The per-row figure being aggregated under an evaluation mode."""
    if evaluation == MarketEvaluation.BY_VOLUME:
        return frame["volume_units"].astype(float)
    return frame["market_value_usd"].astype(float) / value_divisor


def total_value(
    frame: pd.DataFrame,
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
) -> float:
    if frame.empty:
        return 0.0
    return float(evaluation_values(frame, evaluation, value_divisor).sum())


def _build_dataset(
    frame: pd.DataFrame,
    column: str,
    segments: Sequence[str],
    evaluation: MarketEvaluation,
    value_divisor: float,
    years: Sequence[int] | None = None,
    is_stacked: bool = False,
) -> ChartDataset:
    """Pivot to years x segments in the given segment order, zero-filled."""
    if years is None:
        years = sorted(int(y) for y in frame["year"].unique())
    years = list(years)
    segments = list(segments)

    if not years:
        return ChartDataset(years=[], segments=segments, rows=[], is_stacked=is_stacked)

    values = evaluation_values(frame, evaluation, value_divisor)
    if frame.empty:
        table = pd.DataFrame(0.0, index=years, columns=segments)
    else:
        grouped = values.groupby([frame["year"], frame[column]]).sum()
        table = grouped.unstack(fill_value=0.0).reindex(
            index=years, columns=segments, fill_value=0.0
        )
        table = table.fillna(0.0)

    rows = [
        {"year": str(year), **{seg: float(table.at[year, seg]) for seg in segments}}
        for year in years
    ]
    return ChartDataset(years=years, segments=segments, rows=rows, is_stacked=is_stacked)


def _segment_axis(
    frame: pd.DataFrame, column: str, explicit_segments: Iterable[str] | None
) -> list[str]:
    if explicit_segments:
        chosen = sorted({s for s in explicit_segments if s})
        if chosen:
            return chosen
    return distinct_values(frame, column)


def aggregate_grouped(
    frame: pd.DataFrame,
    segment_field: str,
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    explicit_segments: Iterable[str] | None = None,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
    years: Sequence[int] | None = None,
) -> ChartDataset:
    """
    Sum the evaluation figure per (year, segment).

    The segment axis is ``explicit_segments`` (sorted) when given, otherwise
    every distinct non-empty value in the frame (sorted).
    """
    column = resolve_field(segment_field)
    segments = _segment_axis(frame, column, explicit_segments)
    return _build_dataset(frame, column, segments, evaluation, value_divisor, years)


def aggregate_stacked_active(
    frame: pd.DataFrame,
    segment_field: str,
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    explicit_segments: Iterable[str] | None = None,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
    years: Sequence[int] | None = None,
) -> ChartDataset:
    """As ``aggregate_grouped``, dropping segments that are zero in every year."""
    dataset = aggregate_grouped(
        frame, segment_field, evaluation, explicit_segments, value_divisor, years
    )
    active = [
        seg for seg in dataset.segments
        if any(row[seg] != 0 for row in dataset.rows)
    ]
    dataset.rows = [
        {"year": row["year"], **{seg: row[seg] for seg in active}} for row in dataset.rows
    ]
    dataset.segments = active
    dataset.is_stacked = True
    return dataset


def aggregate_product_types(
    frame: pd.DataFrame,
    selected: Iterable[str] | None = None,
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
) -> ChartDataset:
    """
    Product-type chart with the parent/child special case.

    Exactly one main category and no sub category selected: a stacked dataset
    of that category's children present in the data. Otherwise grouped, with
    selected main categories replaced by their children; an empty selection
    shows every product type in the data.
    """
    hierarchy = get_product_hierarchy()
    present = set(distinct_values(frame, "product_type"))
    chosen = [s for s in (selected or []) if s]

    parents = [s for s in chosen if is_parent(s, hierarchy)]
    leaves = [s for s in chosen if s not in parents]

    if len(parents) == 1 and not leaves:
        children = [
            label for label in leaf_labels(find_node(parents[0], hierarchy)) if label in present
        ]
        if children:
            return _build_dataset(
                frame, "product_type", children, evaluation, value_divisor, is_stacked=True
            )

    if chosen:
        segments = sorted(v for v in expand_selection(chosen, hierarchy) if v in present)
    else:
        segments = sorted(present)
    return _build_dataset(frame, "product_type", segments, evaluation, value_divisor)


def region_country_breakdown(
    frame: pd.DataFrame,
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
) -> list[RegionCountryShare]:
    """
    Each country's share of its region's yearly total, in percent.

    Under ``BY_VOLUME`` the raw summed volume is reported instead. A zero
    region total yields 0% for every country in it.
    """
    if frame.empty:
        return []

    values = evaluation_values(frame, evaluation, value_divisor)
    sums = values.groupby([frame["year"], frame["region"], frame["country"]]).sum()
    region_totals = sums.groupby(level=[0, 1]).sum()

    shares: list[RegionCountryShare] = []
    for (year, region, country), country_value in sums.items():
        if evaluation == MarketEvaluation.BY_VOLUME:
            reported = float(country_value)
        else:
            reported = share_pct(float(country_value), float(region_totals[(year, region)]))
        shares.append(
            RegionCountryShare(
                year=int(year),
                region=region,
                country=country,
                value=reported,
                year_region=f"{year} - {region}",
            )
        )
    return shares


def channel_breakdown(
    frame: pd.DataFrame,
    channel_types: Iterable[str],
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE,
    value_divisor: float = DEFAULT_VALUE_DIVISOR,
) -> dict[str, ChartDataset]:
    """Stacked distribution-channel shares within each requested Offline/Online type."""
    years = sorted(int(y) for y in frame["year"].unique())
    breakdown: dict[str, ChartDataset] = {}
    for channel_type in channel_types:
        subset = frame.loc[frame["channel_type"] == channel_type]
        breakdown[channel_type] = aggregate_stacked_active(
            subset,
            "distribution_channel",
            evaluation,
            value_divisor=value_divisor,
            years=years,
        )
    return breakdown
