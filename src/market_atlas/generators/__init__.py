"""Generators module for creating the synthetic market dataset."""

from market_atlas.generators.lcg import SeededRandom
from market_atlas.generators.records import FactorProfile, MarketRecordGenerator

__all__ = [
    "FactorProfile",
    "MarketRecordGenerator",
    "SeededRandom",
]
