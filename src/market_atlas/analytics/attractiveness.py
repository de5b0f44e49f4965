"""
Market attractiveness bubbles: CAGR index vs market-share index, sized by
incremental opportunity over the forecast window.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

import pandas as pd

from market_atlas.analytics.aggregation import DEFAULT_VALUE_DIVISOR, evaluation_values
from market_atlas.analytics.filters import distinct_values, filter_segment, filter_year_range
from market_atlas.analytics.metrics import clamp, compute_cagr, share_pct, to_index
from market_atlas.layout.bubbles import (
    BubbleEntity,
    BubbleLayout,
    BubbleLayoutConfig,
    BubbleLayoutResolver,
)
from market_atlas.market.core import resolve_field
from market_atlas.market.hierarchy import hierarchy_for_field, segment_members

logger = logging.getLogger(__name__)

_INT32 = 2**32


def _to_int32(value: int) -> int:
    value %= _INT32
    return value - _INT32 if value >= 2**31 else value


def label_hash_opportunity(label: str, low: int = 250, high: int = 650) -> int:
    """
    Stable stand-in opportunity for an entity without real growth.

    A 32-bit string hash of the label picks a base in [low, low + 400) and a
    variation factor in [0.9, 1.3); the product is rounded and clamped to
    [low, high]. The same label always maps to the same value.
    """
    h = 0
    for char in label:
        h = _to_int32(h * 31 + ord(char))
    base = low + abs(h) % 400
    variation = 0.9 + (abs(h * 11) % 40) / 100
    return int(clamp(math.floor(base * variation + 0.5), low, high))


def segment_entities(
    frame: pd.DataFrame,
    segment_field: str | None = None,
    segment_values: Iterable[str] | None = None,
) -> tuple[str, dict[str, set[str]]]:
    """
    Grouping column and the entity -> record values mapping.

    Regions when no segment field is given. Taxonomy fields follow
    ``segment_members``; other fields show the selected values that occur in
    the frame, or every observed value when nothing is selected.
    """
    selected_values = [v for v in (segment_values or []) if v]
    if not segment_field:
        return "region", {r: {r} for r in distinct_values(frame, "region")}

    column = resolve_field(segment_field)
    hierarchy = hierarchy_for_field(column)
    if hierarchy is not None:
        return column, segment_members(selected_values, hierarchy)

    available = distinct_values(frame, column)
    shown = [v for v in selected_values if v in available] if selected_values else available
    return column, {v: {v} for v in shown}


class AttractivenessCalculator:
    """
    Builds bubble entities from records inside the forecast window.

    Entities are regions by default, or the members of a segment field when
    one is given (taxonomy fields use the hierarchy's parent/leaf rules).
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        resolver: BubbleLayoutResolver | None = None,
    ) -> None:
        config = config or {}
        attr_config = config.get("attractiveness", {})
        self.start_year = int(attr_config.get("start_year", 2025))
        self.end_year = int(attr_config.get("end_year", 2032))
        self.index_divisor = float(attr_config.get("index_divisor", 10.0))
        self.index_max = float(attr_config.get("index_max", 10.0))
        self.neutral_index = float(attr_config.get("neutral_index", 5.0))
        low, high = attr_config.get("hash_opportunity_range", [250, 650])
        self.hash_range = (int(low), int(high))
        self.region_defaults: dict[str, dict[str, float]] = attr_config.get(
            "region_defaults", {}
        )
        self.value_divisor = float(
            config.get("evaluation", {}).get("value_divisor", DEFAULT_VALUE_DIVISOR)
        )

        if resolver is None:
            resolver = BubbleLayoutResolver(BubbleLayoutConfig.from_config(config))
        self.resolver = resolver

    def subset(
        self,
        frame: pd.DataFrame,
        regions: Iterable[str] | None = None,
        segment_field: str | None = None,
        segment_values: Iterable[str] | None = None,
    ) -> pd.DataFrame:
        """Records inside the window, narrowed by region and segment selection."""
        subset = filter_year_range(frame, self.start_year, self.end_year)

        selected_regions = [r for r in (regions or []) if r]
        if selected_regions:
            subset = subset.loc[subset["region"].isin(selected_regions)]

        if segment_field:
            subset = filter_segment(subset, segment_field, segment_values or [])
        return subset

    def default_region_bubbles(self) -> list[BubbleEntity]:
        return [
            BubbleEntity(
                label=region,
                cagr_index=float(defaults["cagr"]),
                market_share_index=float(defaults["share"]),
                incremental_opportunity=float(defaults["opportunity"]),
                opportunity_is_synthetic=True,
                cagr_is_default=True,
                share_is_default=True,
            )
            for region, defaults in self.region_defaults.items()
        ]

    def _entity(
        self,
        label: str,
        yearly: pd.Series,
        grand_total: float,
        by_region: bool,
    ) -> BubbleEntity:
        start_value = float(yearly.get(self.start_year, 0.0))
        end_value = float(yearly.get(self.end_year, 0.0))
        span = self.end_year - self.start_year

        cagr_pct = compute_cagr(start_value, end_value, span) * 100.0
        market_share = share_pct(float(yearly.sum()), grand_total)
        cagr_index = to_index(cagr_pct, self.index_divisor, self.index_max)
        share_index = to_index(market_share, self.index_divisor, self.index_max)
        opportunity = end_value - start_value

        defaults = self.region_defaults.get(label) if by_region else None

        cagr_is_default = cagr_index <= 0
        if cagr_is_default:
            cagr_index = float(defaults["cagr"]) if defaults else self.neutral_index
        share_is_default = share_index <= 0
        if share_is_default:
            share_index = float(defaults["share"]) if defaults else self.neutral_index
        opportunity_is_synthetic = opportunity <= 0
        if opportunity_is_synthetic:
            if defaults:
                opportunity = float(defaults["opportunity"])
            else:
                opportunity = float(label_hash_opportunity(label, *self.hash_range))

        return BubbleEntity(
            label=label,
            cagr_index=cagr_index,
            market_share_index=share_index,
            incremental_opportunity=opportunity,
            opportunity_is_synthetic=opportunity_is_synthetic,
            cagr_is_default=cagr_is_default,
            share_is_default=share_is_default,
        )

    def entities(
        self,
        frame: pd.DataFrame,
        regions: Iterable[str] | None = None,
        segment_field: str | None = None,
        segment_values: Iterable[str] | None = None,
    ) -> list[BubbleEntity]:
        """Raw (pre-layout) bubble entities."""
        subset = self.subset(frame, regions, segment_field, segment_values)
        column, members = segment_entities(subset, segment_field, segment_values)
        by_region = not segment_field

        found: list[BubbleEntity] = []
        if not subset.empty:
            values = evaluation_values(subset, value_divisor=self.value_divisor)
            grand_total = float(values.sum())
            for label, member_values in members.items():
                mask = subset[column].isin(member_values)
                if not mask.any():
                    continue
                yearly = values[mask].groupby(subset.loc[mask, "year"]).sum()
                found.append(self._entity(label, yearly, grand_total, by_region))

        if not found and by_region:
            logger.debug("No regional data in %d..%d; using default bubbles",
                         self.start_year, self.end_year)
            return self.default_region_bubbles()
        return found

    def layout(
        self,
        frame: pd.DataFrame,
        regions: Iterable[str] | None = None,
        segment_field: str | None = None,
        segment_values: Iterable[str] | None = None,
    ) -> BubbleLayout:
        return self.resolver.layout(self.entities(frame, regions, segment_field, segment_values))

    def compute(
        self,
        frame: pd.DataFrame,
        regions: Iterable[str] | None = None,
        segment_field: str | None = None,
        segment_values: Iterable[str] | None = None,
    ) -> list[BubbleEntity]:
        """Bubble entities with decluttered positions."""
        return self.layout(frame, regions, segment_field, segment_values).entities
