"""Configuration loading for market definitions and dashboard parameters."""

from market_atlas.config.loader import load_dashboard_config, load_market_definition

__all__ = ["load_dashboard_config", "load_market_definition"]
