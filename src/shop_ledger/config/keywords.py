"""Keyword configuration for transaction classification."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from shop_ledger.config.settings import get_settings
from shop_ledger.models import TransactionCategory

# Only these three categories are keyword driven; the two "other" buckets
# come from the transaction type flag.
KEYWORD_CATEGORIES = (
    TransactionCategory.ORDER_PAYMENT,
    TransactionCategory.SHIPPING,
    TransactionCategory.ADVERTISING,
)

DEFAULT_KEYWORDS: dict[TransactionCategory, tuple[str, ...]] = {
    TransactionCategory.ORDER_PAYMENT: (
        "دفعة من طلب",
        "تحصيل من الطلب",
        "تحصيل من طلب",
        "دفعة طلب",
        "تحصيل",
        "سداد",
        "عربون",
        "دفعة",
        "order payment",
        "collection",
        "deposit",
        "settlement",
    ),
    TransactionCategory.SHIPPING: (
        "شحن",
        "shipping",
        "delivery",
    ),
    TransactionCategory.ADVERTISING: (
        "إعلان",
        "اعلان",
        "دعاية",
        "تسويق",
        "advertising",
        "marketing",
    ),
}

# Serials generated by checkout/transfer screens rather than typed from an order
DEFAULT_SYNTHETIC_PREFIXES: tuple[str, ...] = (
    "MANUAL-",
    "TRANSFER-",
    "EXP-",
    "PROFIT-",
    "MISC-",
)

DEFAULT_LABELS: dict[TransactionCategory, str] = {
    TransactionCategory.ORDER_PAYMENT: "تحصيل طلب",
    TransactionCategory.SHIPPING: "شحن",
    TransactionCategory.ADVERTISING: "إعلانات",
    TransactionCategory.OTHER_INCOME: "إيرادات أخرى",
    TransactionCategory.OTHER_EXPENSE: "مصروفات أخرى",
}


@dataclass(frozen=True)
class KeywordConfig:
    """Keyword lists, synthetic serial prefixes and badge labels."""

    keywords: Mapping[TransactionCategory, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_KEYWORDS)
    )
    synthetic_prefixes: tuple[str, ...] = DEFAULT_SYNTHETIC_PREFIXES
    labels: Mapping[TransactionCategory, str] = field(
        default_factory=lambda: dict(DEFAULT_LABELS)
    )

    def keywords_for(self, category: TransactionCategory) -> tuple[str, ...]:
        return tuple(self.keywords.get(category, ()))

    def label_for(self, category: TransactionCategory) -> str:
        return self.labels.get(category) or DEFAULT_LABELS[category]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: str = "keywords") -> KeywordConfig:
        """Build a config from a parsed mapping, falling back to defaults per key."""
        keywords = dict(DEFAULT_KEYWORDS)
        raw_keywords = data.get("keywords")
        if raw_keywords is not None:
            if not isinstance(raw_keywords, dict):
                raise ValueError(f"{source}: keywords must be a mapping")
            for key, values in raw_keywords.items():
                category = _parse_category(key, source)
                if category not in KEYWORD_CATEGORIES:
                    raise ValueError(
                        f"{source}: {category.value} is not keyword driven"
                    )
                keywords[category] = _parse_terms(values, f"{source}: keywords.{key}")

        prefixes = DEFAULT_SYNTHETIC_PREFIXES
        raw_prefixes = data.get("synthetic_serial_prefixes")
        if raw_prefixes is not None:
            prefixes = _parse_terms(raw_prefixes, f"{source}: synthetic_serial_prefixes")

        labels = dict(DEFAULT_LABELS)
        raw_labels = data.get("labels")
        if raw_labels is not None:
            if not isinstance(raw_labels, dict):
                raise ValueError(f"{source}: labels must be a mapping")
            for key, value in raw_labels.items():
                if not isinstance(value, str) or not value.strip():
                    raise ValueError(f"{source}: labels.{key} must be a non-empty string")
                labels[_parse_category(key, source)] = value.strip()

        return cls(keywords=keywords, synthetic_prefixes=prefixes, labels=labels)

    @classmethod
    def from_yaml(cls, path: str | Path) -> KeywordConfig:
        """Load a config from a YAML file."""
        path = Path(path)
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path.name}: must be a mapping")
        return cls.from_mapping(data, source=path.name)


def _parse_category(key: Any, source: str) -> TransactionCategory:
    try:
        return TransactionCategory(str(key).strip().lower())
    except ValueError as exc:
        valid = [category.value for category in TransactionCategory]
        raise ValueError(f"{source}: unknown category {key!r}. Valid: {valid}") from exc


def _parse_terms(values: Any, source: str) -> tuple[str, ...]:
    if not isinstance(values, list):
        raise ValueError(f"{source} must be a list")
    terms: list[str] = []
    for idx, value in enumerate(values):
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{source}[{idx}] must be a non-empty string")
        terms.append(value.strip())
    return tuple(terms)


@lru_cache
def load_keyword_config(path: str | None = None) -> KeywordConfig:
    """Load keyword config from path, or from settings, or use the defaults."""
    if path is None:
        path = get_settings().keywords_file
    if not path:
        return KeywordConfig()
    return KeywordConfig.from_yaml(path)
