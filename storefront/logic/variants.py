"""Colour/size availability from variation records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import product as cartesian
from typing import Sequence

from storefront.catalog.models import RawProduct, Variation
from storefront.logic.attributes import AttributeKind, attribute_kinds, classify_name, find_attribute
from storefront.logic.slugs import normalize_slug

logger = logging.getLogger(__name__)

Pair = tuple[str | None, str | None]


@dataclass(slots=True)
class VariantResolution:
    availability: set[Pair] = field(default_factory=set)
    variation_index: dict[str, list[Variation]] = field(default_factory=dict)
    has_variations: bool = False
    color_terms: list[str] = field(default_factory=list)
    size_terms: list[str] = field(default_factory=list)

    def is_available(self, color: str | None, size: str | None = None) -> bool:
        if not self.has_variations:
            return True
        color_slug = normalize_slug(color) or None
        size_slug = normalize_slug(size) or None
        if size_slug is None:
            return any(pair[0] == color_slug for pair in self.availability)
        return (color_slug, size_slug) in self.availability

    def sizes_for(self, color: str | None) -> list[str]:
        if not self.has_variations:
            return list(self.size_terms)
        color_slug = normalize_slug(color) or None
        available = {size for pair_color, size in self.availability if pair_color == color_slug and size}
        ordered = [size for size in self.size_terms if size in available]
        return ordered + sorted(available.difference(ordered))

    def variation_for(self, color: str | None) -> Variation | None:
        matches = self.variation_index.get(normalize_slug(color))
        return matches[0] if matches else None


def variation_pair(variation: Variation, kinds: dict[str, AttributeKind]) -> Pair:
    color: str | None = None
    size: str | None = None
    for attr in variation.attributes:
        key = normalize_slug(attr.name.replace("_", "-"))
        kind = kinds.get(key) or classify_name(attr.name)
        value = normalize_slug(attr.value) or None
        if kind is AttributeKind.COLOR and color is None:
            color = value
        elif kind is AttributeKind.SIZE and size is None:
            size = value
    return color, size


def resolve_variants(product: RawProduct, variations: Sequence[Variation] | None = None) -> VariantResolution:
    """Build the (colour, size) availability index for ``product``.

    Simple products, and variable products whose variations could not be
    loaded, report every combination as available.
    """
    color_attr = find_attribute(product.attributes, AttributeKind.COLOR)
    size_attr = find_attribute(product.attributes, AttributeKind.SIZE)
    color_terms = _term_slugs(color_attr)
    size_terms = _term_slugs(size_attr)
    resolution = VariantResolution(color_terms=color_terms, size_terms=size_terms)

    if not variations:
        resolution.availability = set(cartesian(color_terms or [None], size_terms or [None]))
        resolution.availability.discard((None, None))
        return resolution

    resolution.has_variations = True
    kinds = attribute_kinds(product.attributes)
    for variation in variations:
        pair = variation_pair(variation, kinds)
        if pair == (None, None):
            continue
        if pair in resolution.availability:
            logger.debug("Duplicate variation %s for %s on product %s", variation.id, pair, product.id)
            continue
        resolution.availability.add(pair)
        if pair[0]:
            resolution.variation_index.setdefault(pair[0], []).append(variation)
    return resolution


def _term_slugs(attribute) -> list[str]:
    if attribute is None:
        return []
    slugs: list[str] = []
    for term in attribute.terms:
        slug = normalize_slug(term.slug) or normalize_slug(term.name)
        if slug and slug not in slugs:
            slugs.append(slug)
    return slugs
