"""Tests for market attractiveness bubble entities."""

import pytest

from market_atlas.analytics.attractiveness import (
    AttractivenessCalculator,
    label_hash_opportunity,
    segment_entities,
)
from market_atlas.market.core import records_to_frame
from market_atlas.market.hierarchy import get_product_hierarchy, top_level_labels


@pytest.fixture
def calculator(dashboard_config) -> AttractivenessCalculator:
    return AttractivenessCalculator(dashboard_config)


class TestLabelHash:
    def test_known_value(self) -> None:
        # h = 65; base = 315; variation = 0.9 + 35/100
        assert label_hash_opportunity("A") == 394

    def test_stable_and_bounded(self) -> None:
        labels = ["Skin Care - Serums", "Students", "Mass", "Offline Retail", ""]
        for label in labels:
            value = label_hash_opportunity(label)
            assert value == label_hash_opportunity(label)
            assert 250 <= value <= 650

    def test_long_labels_wrap_to_32_bits(self) -> None:
        value = label_hash_opportunity("Cosmetology Kits - Seasonal Wellness Kits " * 4)
        assert 250 <= value <= 650


class TestRegionEntities:
    def test_one_entity_per_region(self, calculator, market_frame) -> None:
        entities = calculator.entities(market_frame)
        assert sorted(e.label for e in entities) == [
            "East India",
            "North India",
            "South India",
            "West India",
        ]
        for entity in entities:
            assert 0.0 < entity.cagr_index <= 10.0
            assert 0.0 < entity.market_share_index <= 10.0
            assert entity.incremental_opportunity > 0
            assert not entity.opportunity_is_synthetic

    def test_share_indices_partition_the_total(self, calculator, market_frame) -> None:
        entities = calculator.entities(market_frame)
        # Shares sum to 100%, so indices (share / 10) sum to 10
        assert sum(e.market_share_index for e in entities) == pytest.approx(10.0)

    def test_region_filter(self, calculator, market_frame) -> None:
        entities = calculator.entities(market_frame, regions=["South India"])
        assert [e.label for e in entities] == ["South India"]
        assert entities[0].market_share_index == pytest.approx(10.0)

    def test_window_excludes_other_years(self, calculator, frame_factory) -> None:
        frame = frame_factory({"year": 2021}, {"year": 2033})
        bubbles = calculator.entities(frame)
        # Nothing inside 2025..2032: the five default regional bubbles
        assert len(bubbles) == 5
        assert all(b.opportunity_is_synthetic for b in bubbles)


class TestDefaults:
    def test_empty_input_gives_default_bubbles(self, calculator) -> None:
        bubbles = calculator.compute(records_to_frame([]))
        assert {b.label: b.incremental_opportunity for b in bubbles} == {
            "North India": 490.0,
            "South India": 560.0,
            "East India": 300.0,
            "West India": 420.0,
            "Central India": 380.0,
        }
        assert all(b.cagr_is_default and b.share_is_default for b in bubbles)
        for bubble in bubbles:
            assert 0.0 <= bubble.cagr_index <= 10.0
            assert 0.0 <= bubble.market_share_index <= 10.0

    def test_region_without_growth_uses_region_defaults(self, calculator, frame_factory) -> None:
        frame = frame_factory({"year": 2025, "region": "North India"})
        (entity,) = calculator.entities(frame)
        assert entity.cagr_index == 5.0
        assert entity.cagr_is_default
        assert entity.market_share_index == pytest.approx(10.0)
        assert not entity.share_is_default
        assert entity.incremental_opportunity == 490.0
        assert entity.opportunity_is_synthetic

    def test_segment_without_growth_uses_neutral_and_hash(self, calculator, frame_factory) -> None:
        frame = frame_factory({"year": 2025, "profession": "Students"})
        (entity,) = calculator.entities(frame, segment_field="profession")
        assert entity.label == "Students"
        assert entity.cagr_index == 5.0
        assert entity.incremental_opportunity == label_hash_opportunity("Students")
        assert entity.opportunity_is_synthetic

    def test_segment_grouping_has_no_default_bubbles(self, calculator) -> None:
        assert calculator.entities(records_to_frame([]), segment_field="profession") == []


class TestSegmentEntities:
    def test_product_type_no_selection_uses_main_categories(
        self, calculator, market_frame
    ) -> None:
        entities = calculator.entities(market_frame, segment_field="product_type")
        assert [e.label for e in entities] == top_level_labels(get_product_hierarchy())

    def test_selected_parent_expands_to_children(self, calculator, market_frame) -> None:
        entities = calculator.entities(
            market_frame, segment_field="productType", segment_values=["Skin Care"]
        )
        assert len(entities) == 6
        assert all(e.label.startswith("Skin Care - ") for e in entities)

    def test_flat_segment_selection_limited_to_present(self, market_frame) -> None:
        column, members = segment_entities(
            market_frame, "price_range", ["Luxury", "Not A Tier"]
        )
        assert column == "price_range"
        assert members == {"Luxury": {"Luxury"}}

    def test_compute_resolves_layout(self, calculator, market_frame) -> None:
        raw = calculator.entities(market_frame, segment_field="age_group")
        resolved = calculator.compute(market_frame, segment_field="age_group")
        assert [e.label for e in resolved] == [e.label for e in raw]
        assert [e.incremental_opportunity for e in resolved] == [
            e.incremental_opportunity for e in raw
        ]
        layout = calculator.layout(market_frame, segment_field="age_group")
        assert layout.entities == resolved
