"""
Dashboard facade: the single entry point presentation code talks to.

Wires the record store, hierarchy catalogs, filter/aggregation engine and
derived-metric calculators together behind one configuration.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from market_atlas.analytics.aggregation import (
    ChartDataset,
    aggregate_grouped,
    aggregate_product_types,
    aggregate_stacked_active,
    channel_breakdown,
    region_country_breakdown,
    total_value,
)
from market_atlas.analytics.attractiveness import AttractivenessCalculator
from market_atlas.analytics.filters import distinct_values, filter_records
from market_atlas.analytics.growth import GrowthCalculator, GrowthSeries
from market_atlas.analytics.waterfall import WaterfallCalculator, WaterfallResult
from market_atlas.config.loader import load_dashboard_config
from market_atlas.layout.bubbles import BubbleEntity
from market_atlas.market.core import MarketEvaluation, MarketRecord, as_frame, resolve_field
from market_atlas.market.hierarchy import (
    HierarchyNode,
    expand_selection,
    get_product_hierarchy,
    get_sales_channel_hierarchy,
    hierarchy_for_field,
)
from market_atlas.market.store import MarketDataStore

logger = logging.getLogger(__name__)

FILTER_FIELDS = [
    "year",
    "region",
    "country",
    "product_type",
    "product_form",
    "price_range",
    "age_group",
    "profession",
    "sales_channel",
]

# Flat segments charted as grouped bars and as stacked shares
SEGMENT_CHART_FIELDS = ["product_form", "price_range", "age_group", "profession"]

Data = pd.DataFrame | Sequence[MarketRecord] | None


def _evaluation(evaluation: MarketEvaluation | str) -> MarketEvaluation:
    if isinstance(evaluation, MarketEvaluation):
        return evaluation
    return MarketEvaluation(evaluation)


class MarketDashboard:
    def __init__(
        self,
        store: MarketDataStore | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.config = config if config is not None else load_dashboard_config()
        self.store = store if store is not None else MarketDataStore()

        self.value_divisor = float(
            self.config.get("evaluation", {}).get("value_divisor", 1000.0)
        )
        defaults = self.config.get("defaults", {})
        self.preferred_years = [int(y) for y in defaults.get("preferred_years", [2024, 2025])]
        self.options_per_filter = int(defaults.get("options_per_filter", 2))

        self.waterfall = WaterfallCalculator(self.config)
        self.attractiveness = AttractivenessCalculator(self.config)
        self.growth = GrowthCalculator(self.config)

    # --- Records ---

    def get_records(self) -> tuple[MarketRecord, ...]:
        return self.store.get()

    def get_frame(self) -> pd.DataFrame:
        return self.store.frame()

    def invalidate_cache(self) -> None:
        self.store.invalidate()

    def _frame(self, data: Data) -> pd.DataFrame:
        return self.get_frame() if data is None else as_frame(data)

    # --- Catalogs ---

    def get_product_hierarchy(self) -> tuple[HierarchyNode, ...]:
        return get_product_hierarchy()

    def get_sales_channel_hierarchy(self) -> tuple[HierarchyNode, ...]:
        return get_sales_channel_hierarchy()

    # --- Filtering ---

    def filter(self, criteria: Mapping[str, Any], data: Data = None) -> pd.DataFrame:
        return filter_records(self._frame(data), criteria)

    def filter_options(self, data: Data = None) -> dict[str, list[Any]]:
        """Sorted distinct values of every filterable field."""
        frame = self._frame(data)
        return {name: distinct_values(frame, name) for name in FILTER_FIELDS}

    def default_filters(self, data: Data = None) -> dict[str, list[Any]]:
        """
        Initial selection: the preferred years when all are present (else the
        last two observed years) and the first few options of every other field.
        """
        options = self.filter_options(data)
        years = options["year"]
        if years and all(y in years for y in self.preferred_years):
            chosen_years = list(self.preferred_years)
        else:
            chosen_years = years[-2:]

        selection: dict[str, list[Any]] = {"year": chosen_years}
        for name in FILTER_FIELDS:
            if name != "year":
                selection[name] = options[name][: self.options_per_filter]
        return selection

    def _overview_criteria(self, filters: Mapping[str, Any]) -> dict[str, list[Any]]:
        # A selected main category also admits the records of its sub categories
        criteria: dict[str, list[Any]] = {}
        for name, values in filters.items():
            selected = [v for v in (values or []) if v not in (None, "")]
            hierarchy = hierarchy_for_field(resolve_field(name))
            if hierarchy is not None and selected:
                selected = sorted(set(selected) | expand_selection(selected, hierarchy))
            criteria[name] = selected
        return criteria

    # --- Projections ---

    def aggregate_by_year_and_segment(
        self,
        data: Data,
        segment_field: str,
        evaluation: MarketEvaluation | str = MarketEvaluation.BY_VALUE,
        explicit_segments: Sequence[str] | None = None,
        stacked: bool = False,
    ) -> ChartDataset:
        frame = self._frame(data)
        evaluation = _evaluation(evaluation)
        if resolve_field(segment_field) == "product_type":
            # One selected main category switches to its stacked children
            return aggregate_product_types(
                frame, explicit_segments, evaluation, self.value_divisor
            )
        aggregate = aggregate_stacked_active if stacked else aggregate_grouped
        return aggregate(
            frame,
            segment_field,
            evaluation,
            explicit_segments,
            value_divisor=self.value_divisor,
        )

    def compute_waterfall(
        self,
        data: Data = None,
        regions: Sequence[str] | None = None,
        product_types: Sequence[str] | None = None,
    ) -> WaterfallResult:
        frame = filter_records(
            self._frame(data),
            {"region": list(regions or []), "product_type": list(product_types or [])},
        )
        return self.waterfall.compute(frame)

    def compute_attractiveness(
        self,
        data: Data = None,
        regions: Sequence[str] | None = None,
        segment_field: str | None = None,
        segment_values: Sequence[str] | None = None,
    ) -> list[BubbleEntity]:
        return self.attractiveness.compute(
            self._frame(data), regions, segment_field, segment_values
        )

    def compute_yoy_and_cagr(
        self,
        data: Data = None,
        regions: Sequence[str] | None = None,
        segment_field: str | None = None,
        segment_values: Sequence[str] | None = None,
    ) -> list[GrowthSeries]:
        return self.growth.compute(self._frame(data), regions, segment_field, segment_values)

    def kpi_total(
        self,
        filters: Mapping[str, Any] | None = None,
        evaluation: MarketEvaluation | str = MarketEvaluation.BY_VALUE,
    ) -> float:
        frame = filter_records(self.get_frame(), self._overview_criteria(filters or {}))
        return total_value(frame, _evaluation(evaluation), self.value_divisor)

    def build_overview(
        self,
        filters: Mapping[str, Any] | None = None,
        evaluation: MarketEvaluation | str = MarketEvaluation.BY_VALUE,
    ) -> dict[str, Any]:
        """Every Market Analysis chart for one filter selection."""
        evaluation = _evaluation(evaluation)
        filters = dict(filters) if filters is not None else self.default_filters()
        criteria = self._overview_criteria(filters)
        frame = filter_records(self.get_frame(), criteria)
        divisor = self.value_divisor

        charts: dict[str, Any] = {
            "product_type": aggregate_product_types(
                frame, filters.get("product_type"), evaluation, divisor
            ),
            "sales_channel": aggregate_stacked_active(
                frame,
                "sales_channel",
                evaluation,
                criteria.get("sales_channel"),
                divisor,
            ),
            "country": aggregate_grouped(
                frame, "country", evaluation, filters.get("country"), divisor
            ),
        }
        for name in SEGMENT_CHART_FIELDS:
            charts[name] = aggregate_grouped(frame, name, evaluation, filters.get(name), divisor)
            charts[f"{name}_share"] = aggregate_stacked_active(
                frame, name, evaluation, filters.get(name), divisor
            )

        channel_types = distinct_values(frame, "channel_type")
        logger.debug(
            "Overview built from %d records (%s)", len(frame), evaluation.value
        )
        return {
            "filters": filters,
            "evaluation": evaluation.value,
            "kpi_total": total_value(frame, evaluation, divisor),
            "charts": charts,
            "region_country_share": region_country_breakdown(frame, evaluation, divisor),
            "channel_breakdown": channel_breakdown(frame, channel_types, evaluation, divisor),
        }
