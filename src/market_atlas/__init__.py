"""Market Atlas: synthetic market dataset and chart-ready analytics."""

from market_atlas.dashboard import MarketDashboard
from market_atlas.market.core import MarketEvaluation, MarketRecord
from market_atlas.market.store import MarketDataStore

__all__ = ["MarketDashboard", "MarketDataStore", "MarketEvaluation", "MarketRecord"]
