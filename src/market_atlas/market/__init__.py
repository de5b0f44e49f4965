"""Market record model and taxonomy catalogs."""

from market_atlas.market.core import (
    ChannelType,
    MarketEvaluation,
    MarketRecord,
    PriceRange,
    records_to_frame,
)
from market_atlas.market.hierarchy import (
    HierarchyNode,
    expand_selection,
    get_product_hierarchy,
    get_sales_channel_hierarchy,
)

__all__ = [
    "ChannelType",
    "HierarchyNode",
    "MarketEvaluation",
    "MarketRecord",
    "PriceRange",
    "expand_selection",
    "get_product_hierarchy",
    "get_sales_channel_hierarchy",
    "records_to_frame",
]
