"""Catalog operations exposed to the storefront."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Sequence

from storefront.catalog import load_filter_rules
from storefront.catalog.client import WooCommerceClient
from storefront.catalog.errors import CatalogError
from storefront.catalog.models import Image, RawProduct, Variation
from storefront.logic.dedupe import FilterRules, FilterStrategy, apply_filter, dedupe, strategy_from_env
from storefront.logic.normalize import NormalizedProduct, normalize_many, normalize_product
from storefront.logic.pricing import PricingConfig
from storefront.logic.variants import resolve_variants

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = int(os.environ.get("HOME_PAGE_SIZE", 15))


class CatalogService:
    def __init__(
        self,
        client: WooCommerceClient,
        *,
        filter_strategy: FilterStrategy | None = None,
        filter_rules: FilterRules | None = None,
        pricing: PricingConfig | None = None,
    ) -> None:
        self.client = client
        self.filter_strategy = filter_strategy or strategy_from_env()
        self.filter_rules = filter_rules
        self.pricing = pricing or PricingConfig.from_env()

    async def close(self) -> None:
        await self.client.close()

    async def get_product(self, slug: str) -> NormalizedProduct:
        raw = await self.client.fetch_product_by_slug(slug)
        return await self._normalize_with_variations(raw)

    async def get_product_by_id(self, product_id: int) -> NormalizedProduct:
        raw = await self.client.fetch_product(product_id)
        return await self._normalize_with_variations(raw)

    async def list_products(
        self, category_id: int, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> list[NormalizedProduct]:
        if self.filter_strategy is FilterStrategy.KEYWORDS:
            raws = await self.client.fetch_products(page=page, page_size=page_size)
            rules = self.filter_rules or load_filter_rules()
        else:
            raws = await self.client.fetch_products_by_category(category_id, page=page, page_size=page_size)
            rules = None
        unique = dedupe(raws)
        kept = apply_filter(unique, self.filter_strategy, category_id=category_id, rules=rules)
        logger.info("Listing category %s page %s: %s fetched, %s kept", category_id, page, len(raws), len(kept))
        return normalize_many(kept, pricing=self.pricing)

    def select_color(self, product: NormalizedProduct, color_slug: str | None) -> list[Image]:
        return product.images_for(color_slug)

    async def fetch_variation_images(
        self, product: RawProduct, variations: Sequence[Variation]
    ) -> dict[str, list[Image]]:
        """Look up each colour's first variation concurrently and collect its gallery."""
        resolution = resolve_variants(product, variations)
        colors = [color for color in resolution.color_terms if resolution.variation_for(color)]

        async def lookup(color: str) -> tuple[str, list[Image]]:
            variation = resolution.variation_for(color)
            fallback = [variation.image] if variation.image else []
            try:
                detail = await self.client.fetch_product(variation.id)
            except CatalogError as exc:
                logger.warning("Image lookup for variation %s (%s) failed: %s", variation.id, color, exc)
                return color, fallback
            return color, detail.images or fallback

        results = await asyncio.gather(*(lookup(color) for color in colors))
        return {color: images for color, images in results if images}

    async def _normalize_with_variations(self, raw: RawProduct) -> NormalizedProduct:
        variations: list[Variation] = list(raw.variations)
        variation_images: dict[str, list[Image]] = {}
        if raw.is_variable and (raw.variation_ids or raw.variations):
            try:
                variations = await self.client.fetch_variations(raw.id)
            except CatalogError as exc:
                logger.warning("Variations for product %s unavailable: %s", raw.id, exc)
            variation_images = await self.fetch_variation_images(raw, variations)
        return normalize_product(raw, variations, variation_images=variation_images, pricing=self.pricing)
