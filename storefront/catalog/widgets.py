"""Merchandising widgets built on top of the catalog service."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any

from storefront.catalog.errors import CatalogError, NotFoundError
from storefront.catalog.models import Review
from storefront.catalog.service import CatalogService
from storefront.logic.images import webp_variant
from storefront.logic.normalize import NormalizedProduct

logger = logging.getLogger(__name__)

REVIEW_SAMPLE_SIZE = 10
LOOK_PRODUCT_FIELDS = ("look_producto_1", "look_producto_2")


@dataclass(slots=True)
class FeaturedLook:
    id: int
    title: str
    description: str
    image: str | None
    products: list[NormalizedProduct] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "look_titulo": self.title,
            "look_descripcion": self.description,
            "look_imagen": self.image,
            "products": [optimize_payload(product.to_dict()) for product in self.products],
        }


async def load_reviews(service: CatalogService) -> list[Review]:
    """Unique reviews with product slugs and webp thumbnails filled in."""
    reviews = await service.client.fetch_reviews()
    unique: dict[int, Review] = {}
    for review in reviews:
        unique.setdefault(review.id, review)
    return list(await asyncio.gather(*(_enrich_review(service, review) for review in unique.values())))


def sample_reviews(reviews: list[Review], k: int = REVIEW_SAMPLE_SIZE, *, rng: random.Random | None = None) -> list[Review]:
    rng = rng or random.Random()
    if len(reviews) <= k:
        shuffled = list(reviews)
        rng.shuffle(shuffled)
        return shuffled
    return rng.sample(reviews, k)


async def _enrich_review(service: CatalogService, review: Review) -> Review:
    if (not review.product_slug or review.product_image is None) and review.product_id:
        try:
            product = await service.client.fetch_product(review.product_id)
        except CatalogError as exc:
            logger.warning("Could not load product %s for review %s: %s", review.product_id, review.id, exc)
        else:
            review.product_slug = review.product_slug or product.slug
            if review.product_image is None and product.images:
                review.product_image = product.images[0]
    if review.product_image is not None:
        review.product_image = replace(review.product_image, src=webp_variant(review.product_image.src))
    return review


async def load_featured_look(service: CatalogService) -> FeaturedLook:
    look = await service.client.fetch_featured_look()
    if not look:
        raise NotFoundError("No look of the week published")
    fields = look.get("custom_fields") or {}
    product_ids = [fields.get(name) for name in LOOK_PRODUCT_FIELDS if fields.get(name)]

    async def load(product_id: Any) -> NormalizedProduct | None:
        try:
            return await service.get_product_by_id(int(product_id))
        except (CatalogError, TypeError, ValueError) as exc:
            logger.warning("Skipping look product %s: %s", product_id, exc)
            return None

    products = await asyncio.gather(*(load(pid) for pid in product_ids))
    media = (look.get("_embedded") or {}).get("wp:featuredmedia") or [{}]
    return FeaturedLook(
        id=int(look.get("id") or 0),
        title=fields.get("look_titulo") or (look.get("title") or {}).get("rendered", ""),
        description=fields.get("look_descripcion") or (look.get("content") or {}).get("rendered", ""),
        image=fields.get("look_imagen") or media[0].get("source_url"),
        products=[product for product in products if product is not None],
    )


def optimize_payload(data: Any) -> Any:
    """Point every upload ``src`` in a serialized payload at its webp variant."""
    if isinstance(data, list):
        return [optimize_payload(item) for item in data]
    if isinstance(data, dict):
        return {
            key: webp_variant(value) if key == "src" and isinstance(value, str) else optimize_payload(value)
            for key, value in data.items()
        }
    return data
