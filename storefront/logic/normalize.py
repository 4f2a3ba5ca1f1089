"""Transform raw catalog records into the product shape served to the UI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from storefront.catalog.errors import MalformedRecordError, warn_malformed
from storefront.catalog.models import Category, Image, RawProduct, Term, Variation, VariationAttribute
from storefront.logic.attributes import AttributeKind, classify_attribute
from storefront.logic.images import PLACEHOLDER_IMAGE, guess_hover_image, images_for_color
from storefront.logic.pricing import DisplayPrice, PricingConfig, display_prices
from storefront.logic.slugs import normalize_slug
from storefront.logic.variants import VariantResolution, resolve_variants

logger = logging.getLogger(__name__)


class ColorImageMap:
    """Images per colour, reconciled on first selection and then memoized."""

    def __init__(
        self,
        product: RawProduct,
        defaults: Sequence[Image],
        variation_images: Mapping[str, Sequence[Image]] | None = None,
    ) -> None:
        self._product = product
        self._defaults = list(defaults)
        self._variation_images = {normalize_slug(k): list(v) for k, v in (variation_images or {}).items()}
        self._resolved: dict[str, list[Image]] = {}

    @property
    def explicit(self) -> dict[str, list[Image]]:
        return dict(self._variation_images)

    def get(self, color_slug: str | None) -> list[Image]:
        if not color_slug:
            return list(self._defaults)
        slug = normalize_slug(color_slug)
        if slug not in self._resolved:
            images = images_for_color(self._product, slug, self._variation_images)
            self._resolved[slug] = images or list(self._defaults)
        return list(self._resolved[slug])

    def __contains__(self, color_slug: object) -> bool:
        return isinstance(color_slug, str) and normalize_slug(color_slug) in self._resolved


@dataclass(slots=True)
class NormalizedAttribute:
    id: int | None
    name: str
    slug: str
    kind: AttributeKind
    terms: list[Term] = field(default_factory=list)


@dataclass(slots=True)
class NormalizedProduct:
    id: int
    name: str
    slug: str
    type: str
    price: DisplayPrice
    attributes: list[NormalizedAttribute]
    images: list[Image]
    availability: VariantResolution
    color_images: ColorImageMap
    categories: list[Category] = field(default_factory=list)
    variations: list[Variation] = field(default_factory=list)
    permalink: str | None = None
    description: str = ""
    short_description: str = ""

    @property
    def color_attribute(self) -> NormalizedAttribute | None:
        return next((a for a in self.attributes if a.kind is AttributeKind.COLOR), None)

    @property
    def size_attribute(self) -> NormalizedAttribute | None:
        return next((a for a in self.attributes if a.kind is AttributeKind.SIZE), None)

    @property
    def hover_image(self) -> Image | None:
        return guess_hover_image(self.images)

    def images_for(self, color_slug: str | None) -> list[Image]:
        return self.color_images.get(color_slug)

    def is_available(self, color: str | None, size: str | None = None) -> bool:
        return self.availability.is_available(color, size)

    def to_dict(self) -> dict[str, Any]:
        hover = self.hover_image
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "type": self.type,
            "permalink": self.permalink,
            "description": self.description,
            "short_description": self.short_description,
            "prices": self.price.to_dict(),
            "images": [image.to_dict() for image in self.images],
            "hover_image": hover.to_dict() if hover else None,
            "attributes": [
                {
                    "id": attr.id,
                    "name": attr.name,
                    "slug": attr.slug,
                    "kind": attr.kind.value,
                    "terms": [{"id": t.id, "name": t.name, "slug": t.slug} for t in attr.terms],
                }
                for attr in self.attributes
            ],
            "categories": [{"id": c.id, "name": c.name, "slug": c.slug} for c in self.categories],
            "variations": [
                {
                    "id": v.id,
                    "attributes": [{"name": a.name, "value": a.value} for a in v.attributes],
                    "price": v.price,
                    "stock_status": v.stock_status,
                }
                for v in self.variations
            ],
            "availability": sorted(
                [list(pair) for pair in self.availability.availability],
                key=lambda pair: (pair[0] or "", pair[1] or ""),
            ),
            "variation_images_map": {
                color: [image.to_dict() for image in images] for color, images in self.color_images.explicit.items()
            },
        }


def normalize_product(
    raw: RawProduct,
    variations: Sequence[Variation] | None = None,
    *,
    variation_images: Mapping[str, Sequence[Image]] | None = None,
    pricing: PricingConfig | None = None,
) -> NormalizedProduct:
    if variations is None:
        variations = raw.variations
    if raw.is_variable and raw.variation_ids and not variations:
        logger.info("Variations for product %s unavailable; treating every combination as available", raw.id)

    attributes = [_normalize_attribute(attr) for attr in raw.attributes]
    if not attributes:
        logger.debug("Product %s has no attributes", raw.id)

    images = list(raw.images)
    if not images:
        warn_malformed("Product %s has no images; using placeholder", raw.id)
        images = [PLACEHOLDER_IMAGE]

    return NormalizedProduct(
        id=raw.id,
        name=raw.name or raw.slug,
        slug=raw.slug or normalize_slug(raw.name),
        type=raw.type,
        price=display_prices(raw.prices, pricing),
        attributes=attributes,
        images=images,
        availability=resolve_variants(raw, variations),
        color_images=ColorImageMap(raw, images, variation_images),
        categories=list(raw.categories),
        variations=[_normalize_variation(v) for v in variations],
        permalink=raw.permalink,
        description=raw.description,
        short_description=raw.short_description,
    )


def normalize_many(
    raws: Iterable[RawProduct],
    *,
    pricing: PricingConfig | None = None,
) -> list[NormalizedProduct]:
    products: list[NormalizedProduct] = []
    for raw in raws:
        try:
            products.append(normalize_product(raw, pricing=pricing))
        except (MalformedRecordError, TypeError, ValueError) as exc:
            logger.warning("Skipping product %s: %s", getattr(raw, "id", "?"), exc)
    return products


def _normalize_attribute(attribute) -> NormalizedAttribute:
    terms: list[Term] = []
    for term in attribute.terms:
        slug = normalize_slug(term.slug) or normalize_slug(term.name)
        if not slug:
            continue
        terms.append(Term(id=term.id, name=term.name, slug=slug))
    return NormalizedAttribute(
        id=attribute.id,
        name=attribute.name,
        slug=normalize_slug(attribute.slug.replace("_", "-")) if attribute.slug else normalize_slug(attribute.name),
        kind=classify_attribute(attribute),
        terms=terms,
    )


def _normalize_variation(variation: Variation) -> Variation:
    return Variation(
        id=variation.id,
        attributes=[VariationAttribute(name=a.name, value=normalize_slug(a.value)) for a in variation.attributes],
        price=variation.price,
        stock_status=variation.stock_status,
        image=variation.image,
    )
