"""JSON export of chart datasets and derived series."""

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from market_atlas.writers.base import BaseWriter


def to_jsonable(payload: Any) -> Any:
    """Recursively convert dataclasses and containers to plain JSON types."""
    if is_dataclass(payload) and not isinstance(payload, type):
        return to_jsonable(asdict(payload))
    if isinstance(payload, dict):
        return {str(k): to_jsonable(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [to_jsonable(v) for v in payload]
    return payload


class ChartWriter(BaseWriter):
    """Writes one ``<name>.json`` file per chart payload."""

    def write(self, data: Any, destination: str) -> Path:
        return self.write_charts(Path(destination).stem, data)

    def write_charts(self, name: str, payload: Any) -> Path:
        filepath = self.output_dir / f"{name}.json"
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(to_jsonable(payload), f, indent=2)
        return filepath
