"""Tests for YoY / CAGR growth series."""

import pandas as pd
import pytest

from market_atlas.analytics.aggregation import evaluation_values
from market_atlas.analytics.filters import filter_records
from market_atlas.analytics.growth import GrowthCalculator, growth_rows


@pytest.fixture
def calculator(dashboard_config) -> GrowthCalculator:
    return GrowthCalculator(dashboard_config)


class TestSegmentSeries:
    def test_product_type_without_selection(self, calculator, market_frame) -> None:
        (series,) = calculator.compute(market_frame, segment_field="product_type")
        assert series.label == "By Product Type"
        assert series.segment_keys == [
            "Skin Care",
            "Hair Care",
            "Body Care",
            "Cosmetic & Beauty Enhancers",
            "Cosmetology Kits",
        ]
        assert len(series.rows) == 15
        first = series.rows[0]
        assert first["year"] == "2021"
        assert first["Skin Care_yoy"] == 0.0
        assert first["Skin Care_cagr"] == 0.0

    def test_main_category_includes_own_records(self, calculator, frame_factory) -> None:
        frame = frame_factory(
            {"year": 2024, "product_type": "Skin Care"},
            {"year": 2025, "product_type": "Skin Care"},
            {"year": 2025, "product_type": "Skin Care - Serums"},
        )
        (series,) = calculator.compute(frame, segment_field="product_type")
        assert series.segment_keys == ["Skin Care"]
        assert series.rows[1]["Skin Care_yoy"] == pytest.approx(100.0)
        assert series.rows[1]["Skin Care_cagr"] == pytest.approx(100.0)

    def test_every_row_has_every_key(self, calculator, market_frame) -> None:
        (series,) = calculator.compute(
            market_frame, segment_field="price_range", segment_values=["Mass", "Luxury"]
        )
        assert series.label == "By Price Range"
        assert series.segment_keys == ["Mass", "Luxury"]
        for row in series.rows:
            assert set(row) == {"year", "Mass_yoy", "Mass_cagr", "Luxury_yoy", "Luxury_cagr"}

    def test_sales_channel_label(self, calculator, market_frame) -> None:
        (series,) = calculator.compute(
            market_frame, segment_field="salesChannel", segment_values=["Others"]
        )
        assert series.label == "By Sales Channel"
        assert series.segment_keys == ["Others - Direct Selling, MLM Networks, etc."]

    def test_single_year_gives_no_series(self, calculator, market_frame) -> None:
        only_2024 = filter_records(market_frame, {"year": [2024]})
        assert calculator.compute(only_2024, segment_field="product_form") == []


class TestRegionSeries:
    def test_one_series_per_selected_region(self, calculator, market_frame) -> None:
        series = calculator.compute(market_frame, regions=["North India", "West India"])
        assert [s.label for s in series] == ["North India", "West India"]
        assert all(s.segment_keys == [] for s in series)
        assert set(series[0].rows[1]) == {"year", "yoy", "cagr"}

    def test_values_match_yearly_totals(self, calculator, market_frame) -> None:
        (series,) = calculator.compute(market_frame, regions=["East India"])
        east = market_frame[market_frame["region"] == "East India"]
        totals = evaluation_values(east).groupby(east["year"]).sum()
        expected_yoy = (totals[2022] - totals[2021]) / totals[2021] * 100
        expected_cagr = ((totals[2025] / totals[2021]) ** (1 / 4) - 1) * 100
        assert series.rows[1]["yoy"] == pytest.approx(expected_yoy)
        assert series.rows[4]["cagr"] == pytest.approx(expected_cagr)

    def test_no_regions_no_series(self, calculator, market_frame) -> None:
        assert calculator.compute(market_frame) == []

    def test_region_with_one_year_skipped(self, calculator, frame_factory) -> None:
        frame = frame_factory(
            {"year": 2024, "region": "North India"},
            {"year": 2024, "region": "South India"},
            {"year": 2025, "region": "South India"},
        )
        series = calculator.compute(frame, regions=["North India", "South India"])
        assert [s.label for s in series] == ["South India"]


class TestGrowthRows:
    def test_zero_previous_year(self) -> None:
        yearly = pd.Series({2021: 0.0, 2022: 50.0, 2023: 100.0})
        rows = growth_rows(yearly, [2021, 2022, 2023])
        assert rows[1] == (2022, 0.0, 0.0)
        assert rows[2][1] == pytest.approx(100.0)
        # CAGR from a zero first year stays 0
        assert rows[2][2] == 0.0
