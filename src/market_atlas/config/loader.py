import json
from pathlib import Path
from typing import Any

CONFIG_DIR = Path(__file__).parent

MARKET_DEFINITION_FILE = "market_definition.json"
DASHBOARD_CONFIG_FILE = "dashboard_config.json"


def _load_json_dict(path: str | None, packaged_name: str) -> dict[str, Any]:
    final_path = CONFIG_DIR / packaged_name if path is None else Path(path)
    with open(final_path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise TypeError(f"Config {final_path} must hold a JSON object, got {type(data).__name__}")
    return data


def load_market_definition(definition_path: str | None = None) -> dict[str, Any]:
    """
    Loads the market definition: dimension values, draw ranges, multiplier
    tables and the generator seed. Defaults to the packaged market_definition.json.
    """
    return _load_json_dict(definition_path, MARKET_DEFINITION_FILE)


def load_dashboard_config(config_path: str | None = None) -> dict[str, Any]:
    """
    Loads the dashboard runtime configuration (evaluation unit, default
    filters, waterfall, attractiveness and bubble layout settings).
    """
    return _load_json_dict(config_path, DASHBOARD_CONFIG_FILE)
