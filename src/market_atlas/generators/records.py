"""Generator for the synthetic market record set."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from market_atlas.config.loader import load_market_definition
from market_atlas.generators.lcg import SeededRandom
from market_atlas.market.core import ChannelType, MarketRecord
from market_atlas.market.hierarchy import (
    flat_labels,
    get_product_hierarchy,
    get_sales_channel_hierarchy,
    node_index,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactorProfile:
    """Multiplicative adjustments keyed by one categorical dimension."""

    price: float = 1.0
    volume: float = 1.0
    cagr: float = 1.0
    market_share: float = 1.0


NEUTRAL_PROFILE = FactorProfile()


def _profiles(table: dict[str, dict[str, float]]) -> dict[str, FactorProfile]:
    return {key: FactorProfile(**factors) for key, factors in table.items()}


class MarketRecordGenerator:
    """
    Enumerates year x region x country x product type x form x price range x
    age group and draws the remaining dimensions and figures from a seeded LCG.

    Every call to ``generate`` restarts the LCG, so a generator (or any other
    generator built from the same definition and seed) always yields the same
    sequence of records.
    """

    def __init__(self, definition: dict[str, Any] | None = None, seed: int | None = None) -> None:
        self.definition = definition if definition is not None else load_market_definition()
        self.seed = seed if seed is not None else int(self.definition.get("seed", 42))
        self.rng = SeededRandom(self.seed)
        self._load_dimensions()
        self._load_profiles()

    def _load_dimensions(self) -> None:
        """Load the categorical axes from the definition and the catalogs."""
        years_cfg = self.definition.get("years", {})
        start = int(years_cfg.get("start", 2021))
        self.years: list[int] = list(range(start, start + int(years_cfg.get("count", 15))))

        growth = self.definition.get("growth", {})
        self.base_year = int(growth.get("base_year", start))
        self.price_growth_rate = float(growth.get("price_rate", 0.02))
        self.volume_growth_rate = float(growth.get("volume_rate", 0.05))

        self.record_id_start = int(self.definition.get("record_id_start", 100000))

        self.regions: list[str] = self.definition.get("regions", [])
        self.country_map: dict[str, list[str]] = self.definition.get("country_map", {})
        self.product_forms: list[str] = self.definition.get("product_forms", [])
        self.price_ranges: list[str] = self.definition.get("price_ranges", [])
        self.age_groups: list[str] = self.definition.get("age_groups", [])
        self.professions: list[str] = self.definition.get("professions", [])
        self.offline_channels: list[str] = self.definition.get("offline_channels", [])
        self.online_channels: list[str] = self.definition.get("online_channels", [])
        self.brands: list[str] = self.definition.get("brands", [])
        self.companies: list[str] = self.definition.get("companies", [])

        # Taxonomy-encoded dimensions come from the catalogs
        product_hierarchy = get_product_hierarchy()
        self.product_types = flat_labels(product_hierarchy)
        self.sales_channels = flat_labels(get_sales_channel_hierarchy())
        self._family_by_product = {
            label: node.path[0] for label, node in node_index(product_hierarchy).items()
        }

        # [offset, scale] pairs: draw -> offset + draw * scale
        draws = self.definition.get("draws", {})
        self.base_price_draw = tuple(draws.get("base_price", [10, 90]))
        self.base_volume_draw = tuple(draws.get("base_volume", [100, 900]))
        self.value_noise_draw = tuple(draws.get("value_noise", [0.9, 0.2]))
        self.base_share_draw = tuple(draws.get("base_share", [1, 24]))
        self.base_cagr_draw = tuple(draws.get("base_cagr", [-2, 12]))
        self.yoy_growth_draw = tuple(draws.get("yoy_growth", [-5, 20]))
        self.qty_factor_draw = tuple(draws.get("qty_factor", [0.8, 0.4]))

    def _load_profiles(self) -> None:
        """Load multiplier tables from the definition."""
        multipliers = self.definition.get("multipliers", {})
        self.family_profiles = _profiles(multipliers.get("product_family", {}))
        self.form_profiles = _profiles(multipliers.get("product_form", {}))
        self.age_profiles = _profiles(multipliers.get("age_group", {}))
        self.channel_profiles = _profiles(multipliers.get("channel_type", {}))
        self.region_profiles = _profiles(multipliers.get("region", {}))
        self.price_range_multipliers: dict[str, float] = multipliers.get("price_range", {})

        # Brand tiers cycle through base, base+step, base+2*step, ...
        tiers = self.definition.get("brand_tiers", {})
        base = float(tiers.get("base", 0.8))
        step = float(tiers.get("step", 0.4))
        cycle = int(tiers.get("cycle", 3))
        self.brand_multipliers = {
            brand: base + (idx % cycle) * step for idx, brand in enumerate(self.brands)
        }

    def family_profile(self, product_type: str) -> FactorProfile:
        family = self._family_by_product.get(product_type)
        if family is None:
            return NEUTRAL_PROFILE
        return self.family_profiles.get(family, NEUTRAL_PROFILE)

    @property
    def expected_count(self) -> int:
        """Number of records one generate() call produces."""
        n_locations = sum(len(self.country_map.get(r) or [r]) for r in self.regions)
        return (
            len(self.years)
            * n_locations
            * len(self.product_types)
            * len(self.product_forms)
            * len(self.price_ranges)
            * len(self.age_groups)
        )

    def generate(self) -> list[MarketRecord]:
        """Generate the full record set from a freshly reset LCG."""
        self.rng.reset()
        rng = self.rng
        records: list[MarketRecord] = []
        record_id = self.record_id_start

        for year in self.years:
            elapsed = year - self.base_year
            price_growth = 1 + elapsed * self.price_growth_rate
            volume_growth = 1 + elapsed * self.volume_growth_rate

            for region in self.regions:
                region_f = self.region_profiles.get(region, NEUTRAL_PROFILE)
                # Regions without a country breakdown report under their own name
                countries = self.country_map.get(region) or [region]

                for country in countries:
                    for product_type in self.product_types:
                        family_f = self.family_profile(product_type)

                        for product_form in self.product_forms:
                            form_f = self.form_profiles.get(product_form, NEUTRAL_PROFILE)

                            for price_range in self.price_ranges:
                                tier = self.price_range_multipliers.get(price_range, 1.0)

                                for age_group in self.age_groups:
                                    age_f = self.age_profiles.get(age_group, NEUTRAL_PROFILE)

                                    # One profession and channel per combination, not a cross-product
                                    profession = rng.choice(self.professions)
                                    sales_channel = rng.choice(self.sales_channels)
                                    channel_type = ChannelType.for_sales_channel(sales_channel)
                                    channel_f = self.channel_profiles.get(
                                        channel_type.value, NEUTRAL_PROFILE
                                    )
                                    if channel_type == ChannelType.OFFLINE:
                                        distribution_channel = rng.choice(self.offline_channels)
                                    else:
                                        distribution_channel = rng.choice(self.online_channels)

                                    brand = rng.choice(self.brands)
                                    brand_mult = self.brand_multipliers.get(brand, 1.0)
                                    company = rng.choice(self.companies)

                                    base_price = rng.scaled(*self.base_price_draw)
                                    price = (
                                        base_price
                                        * family_f.price
                                        * form_f.price
                                        * brand_mult
                                        * tier
                                        * price_growth
                                    )

                                    base_volume = rng.scaled(*self.base_volume_draw)
                                    volume_units = math.floor(
                                        base_volume
                                        * region_f.volume
                                        * family_f.volume
                                        * form_f.volume
                                        * age_f.volume
                                        * channel_f.volume
                                        * volume_growth
                                    )

                                    revenue = price * volume_units
                                    market_value = revenue * rng.scaled(*self.value_noise_draw)
                                    market_share = (
                                        rng.scaled(*self.base_share_draw)
                                        * region_f.market_share
                                        * brand_mult
                                    )
                                    cagr = rng.scaled(*self.base_cagr_draw) * family_f.cagr
                                    yoy_growth = rng.scaled(*self.yoy_growth_draw)
                                    qty = math.floor(volume_units * rng.scaled(*self.qty_factor_draw))

                                    records.append(
                                        MarketRecord(
                                            record_id=record_id,
                                            year=year,
                                            region=region,
                                            country=country,
                                            product_type=product_type,
                                            product_form=product_form,
                                            price_range=price_range,
                                            age_group=age_group,
                                            profession=profession,
                                            sales_channel=sales_channel,
                                            distribution_channel=distribution_channel,
                                            brand=brand,
                                            company=company,
                                            price=round(price, 2),
                                            volume_units=volume_units,
                                            qty=qty,
                                            revenue=round(revenue, 2),
                                            market_value_usd=round(market_value, 2),
                                            value=round(market_value, 2),
                                            market_share_pct=round(market_share, 2),
                                            cagr=round(cagr, 2),
                                            yoy_growth=round(yoy_growth, 2),
                                        )
                                    )
                                    record_id += 1

        logger.debug("Generated %d market records (seed=%d)", len(records), self.seed)
        return records
