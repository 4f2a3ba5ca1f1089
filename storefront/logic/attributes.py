"""Attribute classification for colour and size selectors."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from storefront.catalog.models import Attribute
from storefront.logic.slugs import normalize_slug

COLOR_KEYWORDS = ("color", "colour")
SIZE_KEYWORDS = ("talla", "size", "tamano", "numero")


class AttributeKind(str, Enum):
    COLOR = "color"
    SIZE = "size"
    OTHER = "other"


def is_number(text: str | None) -> bool:
    if text is None or not str(text).strip():
        return False
    try:
        float(str(text).replace(",", "."))
    except ValueError:
        return False
    return True


def classify_name(name: str | None) -> AttributeKind:
    """Classify by attribute name alone (``pa_`` taxonomy slugs included)."""
    slug = normalize_slug((name or "").replace("_", "-"))
    if any(keyword in slug for keyword in COLOR_KEYWORDS):
        return AttributeKind.COLOR
    if any(keyword in slug for keyword in SIZE_KEYWORDS):
        return AttributeKind.SIZE
    return AttributeKind.OTHER


def classify_attribute(attribute: Attribute) -> AttributeKind:
    kind = classify_name(attribute.name)
    if kind is AttributeKind.OTHER and attribute.slug:
        kind = classify_name(attribute.slug)
    if kind is not AttributeKind.OTHER:
        return kind
    # numeric shoe sizes are often published under a generic attribute name
    if attribute.terms and all(is_number(term.name) for term in attribute.terms):
        return AttributeKind.SIZE
    return AttributeKind.OTHER


def find_attribute(attributes: Iterable[Attribute], kind: AttributeKind) -> Attribute | None:
    for attribute in attributes:
        if classify_attribute(attribute) is kind:
            return attribute
    return None


def attribute_kinds(attributes: Iterable[Attribute]) -> dict[str, AttributeKind]:
    """Map every known spelling of an attribute name to its kind."""
    kinds: dict[str, AttributeKind] = {}
    for attribute in attributes:
        kind = classify_attribute(attribute)
        for label in (attribute.name, attribute.slug):
            key = normalize_slug((label or "").replace("_", "-"))
            if key:
                kinds.setdefault(key, kind)
    return kinds
