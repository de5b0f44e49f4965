import numpy as np
import pytest

from market_atlas.analytics.filters import (
    distinct_values,
    filter_records,
    filter_segment,
    filter_year_range,
)


@pytest.fixture
def sample_frame(frame_factory):
    return frame_factory(
        {"year": 2023, "region": "North India", "product_type": "Skin Care - Serums"},
        {"year": 2024, "region": "North India", "product_type": "Skin Care - Sunscreen"},
        {"year": 2024, "region": "South India", "product_type": "Hair Care - Shampoos"},
        {"year": 2025, "region": "West India", "product_type": "Skin Care"},
    )


class TestFilterRecords:
    def test_empty_criteria_match_everything(self, sample_frame) -> None:
        assert len(filter_records(sample_frame, {})) == 4
        assert len(filter_records(sample_frame, {"region": [], "year": None})) == 4

    def test_year_strings_are_coerced(self, sample_frame) -> None:
        result = filter_records(sample_frame, {"year": ["2024"]})
        assert list(result["year"]) == [2024, 2024]

    def test_criteria_are_anded(self, sample_frame) -> None:
        result = filter_records(sample_frame, {"year": [2024], "region": ["North India"]})
        assert list(result["product_type"]) == ["Skin Care - Sunscreen"]

    def test_numpy_scalar_values(self, sample_frame) -> None:
        year = sample_frame["year"].iloc[1]
        assert isinstance(year, np.integer)
        assert list(filter_records(sample_frame, {"year": year})["year"]) == [2024, 2024]
        assert len(filter_records(sample_frame, {"year": np.array([2023, 2025])})) == 2
        assert len(filter_records(sample_frame, {"region": "West India"})) == 1

    def test_camel_case_alias(self, sample_frame) -> None:
        result = filter_records(sample_frame, {"productType": ["Hair Care - Shampoos"]})
        assert len(result) == 1

    def test_membership_is_exact(self, sample_frame) -> None:
        # The parent value matches only records carrying the parent itself
        result = filter_records(sample_frame, {"product_type": ["Skin Care"]})
        assert list(result["year"]) == [2025]

    def test_unknown_field_raises(self, sample_frame) -> None:
        with pytest.raises(KeyError, match="bladeMaterial"):
            filter_records(sample_frame, {"bladeMaterial": ["Steel"]})

    def test_accepts_record_sequence(self, record_factory) -> None:
        records = [record_factory(year=2024), record_factory(year=2025)]
        assert len(filter_records(records, {"year": [2025]})) == 1

    def test_original_order_preserved(self, sample_frame) -> None:
        result = filter_records(sample_frame, {"region": ["West India", "North India"]})
        assert list(result["year"]) == [2023, 2024, 2025]


class TestFilterHelpers:
    def test_filter_segment_expands_parent(self, sample_frame) -> None:
        result = filter_segment(sample_frame, "product_type", ["Skin Care"])
        assert set(result["product_type"]) == {"Skin Care - Serums", "Skin Care - Sunscreen"}

    def test_filter_segment_empty_selection(self, sample_frame) -> None:
        assert len(filter_segment(sample_frame, "product_type", [])) == 4

    def test_filter_year_range_inclusive(self, sample_frame) -> None:
        assert list(filter_year_range(sample_frame, 2024, 2025)["year"]) == [2024, 2024, 2025]

    def test_distinct_values_sorted(self, sample_frame) -> None:
        assert distinct_values(sample_frame, "region") == [
            "North India",
            "South India",
            "West India",
        ]
