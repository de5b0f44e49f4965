"""Lazily generated, explicitly invalidated record cache."""

import logging

import pandas as pd

from market_atlas.generators.records import MarketRecordGenerator
from market_atlas.market.core import MarketRecord, records_to_frame

logger = logging.getLogger(__name__)


class MarketDataStore:
    """
    Owns the generated record set for the hosting application.

    Lifecycle: generated lazily on the first read, dropped by ``invalidate``,
    regenerated on the next read. Regeneration restarts the generator's seed,
    so every cache lifetime sees the same records.
    """

    def __init__(self, generator: MarketRecordGenerator | None = None) -> None:
        self.generator = generator if generator is not None else MarketRecordGenerator()
        self._records: tuple[MarketRecord, ...] | None = None
        self._frame: pd.DataFrame | None = None
        self.generation_count = 0

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def get(self) -> tuple[MarketRecord, ...]:
        """Return the cached records, generating them on first access."""
        if self._records is None:
            try:
                self._records = tuple(self.generator.generate())
            except Exception:
                # A failed generation surfaces as an empty dataset, never an error
                logger.exception("Market record generation failed; serving an empty dataset")
                self._records = ()
            self.generation_count += 1
            logger.info("Market data cache loaded with %d records", len(self._records))
        return self._records

    def frame(self) -> pd.DataFrame:
        """DataFrame view of the cached records, built once per cache lifetime."""
        if self._frame is None:
            self._frame = records_to_frame(self.get())
        return self._frame

    def invalidate(self) -> None:
        """Drop the cache. Safe to call when nothing is cached."""
        if self._records is not None:
            logger.debug("Invalidating market data cache")
        self._records = None
        self._frame = None
