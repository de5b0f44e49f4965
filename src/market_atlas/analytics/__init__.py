"""Filtering, aggregation and derived-metric calculators over record frames."""

from market_atlas.analytics.aggregation import (
    ChartDataset,
    RegionCountryShare,
    aggregate_grouped,
    aggregate_product_types,
    aggregate_stacked_active,
    channel_breakdown,
    region_country_breakdown,
    total_value,
)
from market_atlas.analytics.attractiveness import (
    AttractivenessCalculator,
    label_hash_opportunity,
)
from market_atlas.analytics.filters import filter_records, filter_segment
from market_atlas.analytics.growth import GrowthCalculator, GrowthSeries
from market_atlas.analytics.metrics import compute_cagr, compute_yoy
from market_atlas.analytics.waterfall import (
    WaterfallCalculator,
    WaterfallResult,
    WaterfallStep,
)

__all__ = [
    "AttractivenessCalculator",
    "ChartDataset",
    "GrowthCalculator",
    "GrowthSeries",
    "RegionCountryShare",
    "WaterfallCalculator",
    "WaterfallResult",
    "WaterfallStep",
    "aggregate_grouped",
    "aggregate_product_types",
    "aggregate_stacked_active",
    "channel_breakdown",
    "compute_cagr",
    "compute_yoy",
    "filter_records",
    "filter_segment",
    "label_hash_opportunity",
    "region_country_breakdown",
    "total_value",
]
