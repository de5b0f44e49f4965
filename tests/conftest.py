"""Shared fixtures: the full generated dataset and a small record factory."""

import copy
import itertools
from collections.abc import Callable
from typing import Any

import pandas as pd
import pytest

from market_atlas.config.loader import load_dashboard_config, load_market_definition
from market_atlas.dashboard import MarketDashboard
from market_atlas.generators.records import MarketRecordGenerator
from market_atlas.market.core import MarketRecord, records_to_frame
from market_atlas.market.store import MarketDataStore


@pytest.fixture(scope="session")
def market_store() -> MarketDataStore:
    """Store over the full packaged market definition (generated once per session)."""
    store = MarketDataStore()
    store.get()
    return store


@pytest.fixture(scope="session")
def market_records(market_store: MarketDataStore) -> tuple[MarketRecord, ...]:
    return market_store.get()


@pytest.fixture(scope="session")
def market_frame(market_store: MarketDataStore) -> pd.DataFrame:
    return market_store.frame()


@pytest.fixture(scope="session")
def dashboard(market_store: MarketDataStore) -> MarketDashboard:
    return MarketDashboard(store=market_store)


@pytest.fixture
def dashboard_config() -> dict[str, Any]:
    return load_dashboard_config()


@pytest.fixture
def small_definition() -> dict[str, Any]:
    """One year and one region: 24 x 8 x 3 x 4 = 2304 records."""
    definition = copy.deepcopy(load_market_definition())
    definition["years"] = {"start": 2024, "count": 1}
    definition["regions"] = ["North India"]
    return definition


@pytest.fixture
def small_generator(small_definition: dict[str, Any]) -> MarketRecordGenerator:
    return MarketRecordGenerator(small_definition)


@pytest.fixture
def record_factory() -> Callable[..., MarketRecord]:
    """Build hand-specified records; unspecified fields get fixed defaults."""
    counter = itertools.count(100000)

    def _make(**overrides: Any) -> MarketRecord:
        fields: dict[str, Any] = {
            "record_id": next(counter),
            "year": 2024,
            "region": "North India",
            "country": "North India",
            "product_type": "Skin Care - Serums",
            "product_form": "Creams & Lotions",
            "price_range": "Mass",
            "age_group": "Gen Z (Ages 10-25)",
            "profession": "Students",
            "sales_channel": "Offline Retail - Supermarkets / Hypermarkets",
            "distribution_channel": "Retail Stores",
            "brand": "Brand A",
            "company": "Company A",
            "price": 10.0,
            "volume_units": 100,
            "qty": 100,
            "revenue": 1000.0,
            "market_value_usd": 1000.0,
            "value": 1000.0,
            "market_share_pct": 1.0,
            "cagr": 1.0,
            "yoy_growth": 1.0,
        }
        fields.update(overrides)
        if "market_value_usd" in overrides and "value" not in overrides:
            fields["value"] = overrides["market_value_usd"]
        return MarketRecord(**fields)

    return _make


@pytest.fixture
def frame_factory(record_factory: Callable[..., MarketRecord]) -> Callable[..., pd.DataFrame]:
    """Frame from a list of override dicts, one record each."""

    def _make(*rows: dict[str, Any]) -> pd.DataFrame:
        return records_to_frame([record_factory(**row) for row in rows])

    return _make
