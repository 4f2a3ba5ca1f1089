"""Duplicate removal and category filtering for listing responses."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Sequence

from storefront.logic.slugs import normalize_slug

if TYPE_CHECKING:
    from storefront.catalog.models import RawProduct

logger = logging.getLogger(__name__)


class FilterStrategy(str, Enum):
    CATEGORY_ID = "category_id"
    KEYWORDS = "keywords"


@dataclass(slots=True)
class FilterRules:
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


def strategy_from_env() -> FilterStrategy:
    value = os.environ.get("CATEGORY_FILTER_STRATEGY", FilterStrategy.CATEGORY_ID.value)
    try:
        return FilterStrategy(value.strip().lower())
    except ValueError:
        logger.warning("Unknown CATEGORY_FILTER_STRATEGY %r; trusting category ids", value)
        return FilterStrategy.CATEGORY_ID


def dedupe(products: Iterable[RawProduct]) -> list[RawProduct]:
    seen: set[int] = set()
    unique: list[RawProduct] = []
    for product in products:
        if product.id in seen:
            logger.debug("Dropping duplicate product %s (%s)", product.id, product.slug)
            continue
        seen.add(product.id)
        unique.append(product)
    return unique


def prefer_with_attributes(records: Sequence[RawProduct]) -> RawProduct:
    """Pick the record to serve when one slug maps to several listings."""
    for record in records:
        if record.attributes:
            return record
    return records[0]


def matches_keywords(product: RawProduct, include: Sequence[str], exclude: Sequence[str]) -> bool:
    labels = [product.name, *(c.name for c in product.categories), *(c.slug for c in product.categories)]
    haystack = " ".join(normalize_slug(label) for label in labels if label)
    if any(normalize_slug(word) in haystack for word in exclude if normalize_slug(word)):
        return False
    return any(normalize_slug(word) in haystack for word in include if normalize_slug(word))


def apply_filter(
    products: Iterable[RawProduct],
    strategy: FilterStrategy,
    *,
    category_id: int | None = None,
    rules: FilterRules | None = None,
) -> list[RawProduct]:
    items = list(products)
    if strategy is FilterStrategy.KEYWORDS:
        rules = rules or FilterRules()
        if not rules.include:
            logger.warning("Keyword filtering requested without inclusion keywords; nothing retained")
        return [p for p in items if matches_keywords(p, rules.include, rules.exclude)]
    if category_id is None:
        return items
    return [p for p in items if not p.categories or any(c.id == category_id for c in p.categories)]
