"""Record filtering by field membership, taxonomy selection and year range."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd

from market_atlas.market.core import MarketRecord, as_frame, resolve_field
from market_atlas.market.hierarchy import expand_selection, hierarchy_for_field

NUMERIC_FIELDS = {"year", "record_id"}


def _as_values(values: Any) -> list[Any]:
    if values is None:
        return []
    # Scalars, numpy scalars included, stand for a one-value selection
    if isinstance(values, (str, bytes, np.generic)) or not isinstance(values, Iterable):
        return [values]
    return [v for v in values if v is not None and v != ""]


def filter_records(
    data: pd.DataFrame | Sequence[MarketRecord],
    criteria: Mapping[str, Any],
) -> pd.DataFrame:
    """
    AND-combine one membership test per non-empty criterion.

    Args:
        data: Record frame (or record sequence)
        criteria: Field name (snake_case or camelCase) -> accepted values.
            Empty or missing value lists match everything.

    Returns:
        The matching rows, original order preserved.

    Raises:
        KeyError: If a criterion names an unknown field
    """
    frame = as_frame(data)
    mask = pd.Series(True, index=frame.index)

    for field, raw_values in criteria.items():
        values = _as_values(raw_values)
        column = resolve_field(field)
        if not values:
            continue
        if column in NUMERIC_FIELDS:
            # Years may arrive as strings from UI state
            wanted: set[Any] = {int(v) for v in values}
        else:
            wanted = {str(v) for v in values}
        mask &= frame[column].isin(wanted)

    return frame.loc[mask]


def filter_segment(
    frame: pd.DataFrame, field: str, selected: Iterable[str]
) -> pd.DataFrame:
    """
    Keep rows whose ``field`` is in the selection, expanding selected
    taxonomy branches to their leaves for hierarchical fields.
    """
    selected_values = [s for s in selected if s]
    if not selected_values:
        return frame
    column = resolve_field(field)
    hierarchy = hierarchy_for_field(column)
    if hierarchy is not None:
        accepted = expand_selection(selected_values, hierarchy)
    else:
        accepted = set(selected_values)
    return frame.loc[frame[column].isin(accepted)]


def filter_year_range(frame: pd.DataFrame, start_year: int, end_year: int) -> pd.DataFrame:
    """Inclusive year bounds."""
    return frame.loc[frame["year"].between(start_year, end_year)]


def distinct_values(frame: pd.DataFrame, field: str) -> list[Any]:
    """Sorted distinct non-empty values of a field."""
    column = resolve_field(field)
    values = [v for v in frame[column].dropna().unique().tolist() if v != ""]
    return sorted(values)
