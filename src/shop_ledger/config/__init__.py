"""Configuration module for the shop ledger."""

from shop_ledger.config.keywords import KeywordConfig, load_keyword_config
from shop_ledger.config.logging import configure_logging, money_as_string
from shop_ledger.config.settings import FlatSettings, get_settings

__all__ = [
    "FlatSettings",
    "get_settings",
    "configure_logging",
    "money_as_string",
    "KeywordConfig",
    "load_keyword_config",
]
