"""Market record type, categorical enums and the record frame conversion."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, fields
from typing import Any

import numpy as np
import pandas as pd

OFFLINE_MARKER = "Offline"


class PriceRange(enum.Enum):
    MASS = "Mass"
    PREMIUM = "Premium"
    LUXURY = "Luxury"


class ChannelType(enum.Enum):
    OFFLINE = "Offline"
    ONLINE = "Online"

    @classmethod
    def for_sales_channel(cls, sales_channel: str) -> ChannelType:
        return cls.OFFLINE if OFFLINE_MARKER in sales_channel else cls.ONLINE


class MarketEvaluation(enum.Enum):
    BY_VALUE = "By Value"  # market_value_usd scaled to the display unit
    BY_VOLUME = "By Volume"  # raw volume_units


@dataclass(frozen=True)
class MarketRecord:
    """
    One synthetic market observation: a point in the categorical cross-product
    with its derived price/volume/value figures.
    """

    record_id: int
    year: int
    region: str
    country: str
    product_type: str
    product_form: str
    price_range: str
    age_group: str
    profession: str
    sales_channel: str
    distribution_channel: str
    brand: str
    company: str

    # Financials
    price: float
    volume_units: int
    qty: int
    revenue: float
    market_value_usd: float
    value: float

    # Reported growth/share figures
    market_share_pct: float
    cagr: float
    yoy_growth: float

    @property
    def channel_type(self) -> str:
        """Offline/Online bucket of the sales channel."""
        return ChannelType.for_sales_channel(self.sales_channel).value

    def to_camel_dict(self) -> dict[str, Any]:
        """Render with the camelCase field names used by presentation consumers."""
        return {CAMEL_FIELD_NAMES[name]: getattr(self, name) for name in RECORD_FIELDS}


RECORD_FIELDS: list[str] = [f.name for f in fields(MarketRecord)]

CAMEL_FIELD_NAMES: dict[str, str] = {
    "record_id": "recordId",
    "year": "year",
    "region": "region",
    "country": "country",
    "product_type": "productType",
    "product_form": "productForm",
    "price_range": "priceRange",
    "age_group": "ageGroup",
    "profession": "profession",
    "sales_channel": "salesChannel",
    "distribution_channel": "distributionChannel",
    "brand": "brand",
    "company": "company",
    "price": "price",
    "volume_units": "volumeUnits",
    "qty": "qty",
    "revenue": "revenue",
    "market_value_usd": "marketValueUsd",
    "value": "value",
    "market_share_pct": "marketSharePct",
    "cagr": "cagr",
    "yoy_growth": "yoyGrowth",
    "channel_type": "channelType",
}

# camelCase -> column name, for callers speaking the presentation contract
FIELD_ALIASES: dict[str, str] = {camel: name for name, camel in CAMEL_FIELD_NAMES.items()}

INT_FIELDS = {"record_id", "year", "volume_units", "qty"}
FLOAT_FIELDS = {
    "price",
    "revenue",
    "market_value_usd",
    "value",
    "market_share_pct",
    "cagr",
    "yoy_growth",
}

FRAME_COLUMNS: list[str] = [*RECORD_FIELDS, "channel_type"]


def _empty_frame() -> pd.DataFrame:
    columns: dict[str, pd.Series] = {}
    for name in FRAME_COLUMNS:
        if name in INT_FIELDS:
            dtype: Any = "int64"
        elif name in FLOAT_FIELDS:
            dtype = "float64"
        else:
            dtype = "object"
        columns[name] = pd.Series(dtype=dtype)
    return pd.DataFrame(columns)


def records_to_frame(records: Sequence[MarketRecord]) -> pd.DataFrame:
    """
    Convert records to a DataFrame with one column per field plus channel_type.

    An empty sequence yields an empty frame that still carries every column,
    so downstream groupbys see a valid (zero-row) input.
    """
    if len(records) == 0:
        return _empty_frame()

    frame = pd.DataFrame.from_records(
        [vars(r) for r in records], columns=RECORD_FIELDS
    )
    offline = frame["sales_channel"].str.contains(OFFLINE_MARKER, regex=False)
    frame["channel_type"] = np.where(
        offline, ChannelType.OFFLINE.value, ChannelType.ONLINE.value
    )
    return frame


def as_frame(data: pd.DataFrame | Sequence[MarketRecord]) -> pd.DataFrame:
    """Accept either a record frame or a record sequence."""
    if isinstance(data, pd.DataFrame):
        return data
    return records_to_frame(data)


def resolve_field(name: str) -> str:
    """Map a camelCase contract name to its column; column names pass through."""
    column = FIELD_ALIASES.get(name, name)
    if column not in FRAME_COLUMNS:
        raise KeyError(
            f"Unknown record field '{name}'. Valid fields: {FRAME_COLUMNS}"
        )
    return column
