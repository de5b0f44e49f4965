"""Record export to CSV or Parquet, using the camelCase record contract."""

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from market_atlas.market.core import (
    CAMEL_FIELD_NAMES,
    FLOAT_FIELDS,
    INT_FIELDS,
    RECORD_FIELDS,
    MarketRecord,
)
from market_atlas.writers.base import BaseWriter

RECORDS_BASENAME = "market_records"


def _record_schema() -> pa.Schema:
    columns = []
    for name in RECORD_FIELDS:
        if name in INT_FIELDS:
            dtype = pa.int64()
        elif name in FLOAT_FIELDS:
            dtype = pa.float64()
        else:
            dtype = pa.string()
        columns.append((CAMEL_FIELD_NAMES[name], dtype))
    return pa.schema(columns)


RECORD_SCHEMA = _record_schema()


class RecordWriter(BaseWriter):
    """Writes generated market records to ``market_records.{csv,parquet}``."""

    def __init__(self, output_dir: str | Path, batch_size: int = 10000) -> None:
        super().__init__(output_dir)
        self.batch_size = batch_size

    def write(self, data: Any, destination: str) -> Path:
        fmt = Path(destination).suffix.lstrip(".") or "csv"
        return self.write_records(data, fmt)

    def write_records(self, records: Sequence[MarketRecord], fmt: str = "csv") -> Path:
        if fmt == "csv":
            return self._write_csv(records)
        if fmt == "parquet":
            return self._write_parquet(records)
        raise ValueError(f"Unsupported record format '{fmt}' (expected csv or parquet)")

    def _write_csv(self, records: Sequence[MarketRecord]) -> Path:
        filepath = self.output_dir / f"{RECORDS_BASENAME}.csv"
        fieldnames = [CAMEL_FIELD_NAMES[name] for name in RECORD_FIELDS]
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for record in records:
                writer.writerow(record.to_camel_dict())
        return filepath

    def _write_parquet(self, records: Sequence[MarketRecord]) -> Path:
        filepath = self.output_dir / f"{RECORDS_BASENAME}.parquet"
        # One row group per batch keeps the dict buffer bounded
        with pq.ParquetWriter(filepath, RECORD_SCHEMA) as writer:
            for start in range(0, len(records), self.batch_size):
                chunk = [r.to_camel_dict() for r in records[start : start + self.batch_size]]
                writer.write_table(pa.Table.from_pylist(chunk, schema=RECORD_SCHEMA))
            if len(records) == 0:
                writer.write_table(RECORD_SCHEMA.empty_table())
        return filepath
