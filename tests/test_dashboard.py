"""
Tests for the dashboard facade.

Verifies that:
- Default filters pick the preferred years and the first options per field
- The overview carries every chart for one selection
- Derived-metric entry points narrow the cached dataset before computing
"""

import pytest

from market_atlas.analytics.aggregation import total_value
from market_atlas.analytics.filters import filter_records
from market_atlas.dashboard import FILTER_FIELDS, SEGMENT_CHART_FIELDS, MarketDashboard
from market_atlas.market.core import MarketEvaluation
from market_atlas.market.hierarchy import expand_selection, get_sales_channel_hierarchy
from market_atlas.market.store import MarketDataStore


class TestFilterOptions:
    def test_options_sorted_per_field(self, dashboard) -> None:
        options = dashboard.filter_options()
        assert set(options) == set(FILTER_FIELDS)
        for values in options.values():
            assert values == sorted(values)
        assert options["year"][0] == 2021
        assert len(options["product_type"]) == 24

    def test_default_filters(self, dashboard) -> None:
        defaults = dashboard.default_filters()
        assert defaults["year"] == [2024, 2025]
        for name in FILTER_FIELDS:
            if name != "year":
                assert len(defaults[name]) == 2

    def test_default_years_fall_back_to_latest(self, dashboard, frame_factory) -> None:
        frame = frame_factory({"year": 2019}, {"year": 2020}, {"year": 2021})
        assert dashboard.default_filters(frame)["year"] == [2020, 2021]


class TestOverview:
    def test_chart_keys(self, dashboard) -> None:
        overview = dashboard.build_overview({"year": [2024], "region": ["North India"]})
        charts = overview["charts"]
        expected = {"product_type", "sales_channel", "country"}
        for name in SEGMENT_CHART_FIELDS:
            expected |= {name, f"{name}_share"}
        assert set(charts) == expected
        assert overview["evaluation"] == "By Value"
        assert set(overview["channel_breakdown"]) == {"Offline", "Online"}
        assert charts["product_type"].years == [2024]

    def test_kpi_matches_filtered_total(self, dashboard, market_frame) -> None:
        filters = {"year": [2025], "price_range": ["Luxury"]}
        expected = total_value(filter_records(market_frame, filters))
        assert dashboard.kpi_total(filters) == pytest.approx(expected)

    def test_parent_selection_admits_children(self, dashboard, market_frame) -> None:
        filters = {"year": [2024], "product_type": ["Skin Care"]}
        overview = dashboard.build_overview(filters)
        assert overview["charts"]["product_type"].is_stacked
        # Records carrying the parent label itself plus all six sub categories
        subset = filter_records(market_frame, {"year": [2024]})
        skin = subset[subset["product_type"].str.startswith("Skin Care")]
        assert overview["kpi_total"] == pytest.approx(total_value(skin))

    def test_sales_channel_chart_matches_kpi(self, dashboard) -> None:
        overview = dashboard.build_overview({"year": [2024], "sales_channel": ["Offline Retail"]})
        chart = overview["charts"]["sales_channel"]
        assert chart.is_stacked
        # The parent's own records plus all six offline leaves
        assert chart.segments == sorted(
            {"Offline Retail"}
            | expand_selection(["Offline Retail"], get_sales_channel_hierarchy())
        )
        charted = sum(v for row in chart.rows for k, v in row.items() if k != "year")
        assert charted == pytest.approx(overview["kpi_total"])

    def test_volume_evaluation_by_name(self, dashboard, market_frame) -> None:
        filters = {"year": [2030]}
        total = dashboard.kpi_total(filters, "By Volume")
        subset = filter_records(market_frame, filters)
        assert total == pytest.approx(total_value(subset, MarketEvaluation.BY_VOLUME))

    def test_stacked_projection(self, dashboard, frame_factory) -> None:
        frame = frame_factory({"price_range": "Mass"})
        dataset = dashboard.aggregate_by_year_and_segment(
            frame, "priceRange", explicit_segments=["Mass", "Luxury"], stacked=True
        )
        assert dataset.segments == ["Mass"]
        assert dataset.rows == [{"year": "2024", "Mass": 1.0}]


class TestDerivedMetrics:
    def test_waterfall_for_region(self, dashboard) -> None:
        result = dashboard.compute_waterfall(regions=["North India"])
        assert len(result.steps) == 9
        assert result.steps[0].year == "2024"
        assert not result.used_fallback

    def test_attractiveness_by_region(self, dashboard) -> None:
        bubbles = dashboard.compute_attractiveness(regions=["East India", "West India"])
        assert sorted(b.label for b in bubbles) == ["East India", "West India"]

    def test_growth_series_per_region(self, dashboard) -> None:
        series = dashboard.compute_yoy_and_cagr(regions=["South India"])
        assert [s.label for s in series] == ["South India"]
        assert len(series[0].rows) == 15


class TestCacheLifecycle:
    def test_invalidate_regenerates_same_records(self, small_generator) -> None:
        board = MarketDashboard(store=MarketDataStore(small_generator))
        first = board.get_records()
        board.invalidate_cache()
        assert not board.store.is_loaded
        assert board.get_records() == first


class TestProductTypeProjection:
    def test_single_parent_gives_stacked_children(self, dashboard, market_frame) -> None:
        frame_2024 = filter_records(market_frame, {"year": [2024]})
        dataset = dashboard.aggregate_by_year_and_segment(
            frame_2024, "productType", explicit_segments=["Skin Care"]
        )
        assert dataset.is_stacked
        assert len(dataset.segments) == 6
        assert "Skin Care" not in dataset.segments
        assert all(s.startswith("Skin Care - ") for s in dataset.segments)

    def test_mixed_selection_is_grouped(self, dashboard, market_frame) -> None:
        frame_2024 = filter_records(market_frame, {"year": [2024]})
        dataset = dashboard.aggregate_by_year_and_segment(
            frame_2024, "product_type", explicit_segments=["Skin Care", "Hair Care - Shampoos"]
        )
        assert not dataset.is_stacked
        assert "Skin Care" not in dataset.segments
        assert "Hair Care - Shampoos" in dataset.segments
