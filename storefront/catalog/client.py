"""WooCommerce REST client."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Sequence
from typing import Any

import httpx

from storefront.catalog.cache import MemoryCache, ResponseCache, cache_key
from storefront.catalog.errors import MalformedRecordError, NotFoundError, UpstreamError, UpstreamUnavailable
from storefront.catalog.models import RawProduct, Review, Variation
from storefront.logic.dedupe import dedupe, prefer_with_attributes

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://winstonandharrystore.com/wp-json/wc/v3"
DEFAULT_TIMEOUT = float(os.environ.get("CATALOG_TIMEOUT", 10.0))
VARIATIONS_PER_PAGE = 100

SlugPolicy = Callable[[Sequence[RawProduct]], RawProduct]


class WooCommerceClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        consumer_key: str | None = None,
        consumer_secret: str | None = None,
        concurrency: int = 5,
        timeout: float = DEFAULT_TIMEOUT,
        session: httpx.AsyncClient | None = None,
        cache: ResponseCache | None = None,
        slug_policy: SlugPolicy = prefer_with_attributes,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._credentials = (
            {"consumer_key": consumer_key, "consumer_secret": consumer_secret}
            if consumer_key and consumer_secret
            else {}
        )
        self._timeout = timeout
        self._session = session or httpx.AsyncClient(
            timeout=timeout, headers={"Accept": "application/json", "User-Agent": "StorefrontCatalog/1.0"}
        )
        self._semaphore = asyncio.Semaphore(concurrency)
        self._cache = cache if cache is not None else MemoryCache()
        self._slug_policy = slug_policy

    @property
    def api_root(self) -> str:
        """``.../wp-json`` root shared by the wc and wp namespaces."""
        marker = "/wp-json"
        if marker in self.base_url:
            return self.base_url[: self.base_url.index(marker) + len(marker)]
        return self.base_url

    async def close(self) -> None:
        await self._session.aclose()

    async def fetch_product_by_slug(self, slug: str) -> RawProduct:
        payload = await self._get_json("product_by_slug", "/products", {"slug": slug})
        records = dedupe(self._parse_products(payload))
        if not records:
            raise NotFoundError(f"No product with slug {slug!r}")
        if len(records) > 1:
            logger.info("Slug %s matched %s records; applying selection policy", slug, len(records))
        return self._slug_policy(records)

    async def fetch_product(self, product_id: int) -> RawProduct:
        try:
            payload = await self._get_json("product", f"/products/{product_id}")
        except UpstreamError as exc:
            if exc.status_code == 404:
                raise NotFoundError(f"No product with id {product_id}") from exc
            raise
        return RawProduct.from_payload(payload)

    async def fetch_products_by_category(
        self, category_id: int, page: int = 1, page_size: int = 100
    ) -> list[RawProduct]:
        params = {"category": category_id, "per_page": page_size, "page": page, "status": "publish"}
        payload = await self._get_json("products_by_category", "/products", params)
        return self._parse_products(payload)

    async def fetch_products(self, page: int = 1, page_size: int = 24) -> list[RawProduct]:
        params = {"per_page": page_size, "page": page, "status": "publish"}
        payload = await self._get_json("products", "/products", params)
        return self._parse_products(payload)

    async def fetch_variations(self, product_id: int) -> list[Variation]:
        payload = await self._get_json(
            "variations", f"/products/{product_id}/variations", {"per_page": VARIATIONS_PER_PAGE}
        )
        variations: list[Variation] = []
        for item in _as_list(payload):
            try:
                variations.append(Variation.from_payload(item))
            except MalformedRecordError as exc:
                logger.warning("Skipping variation of product %s: %s", product_id, exc)
        return variations

    async def fetch_reviews(self, per_page: int = 100) -> list[Review]:
        payload = await self._get_json("reviews", "/products/reviews", {"per_page": per_page})
        reviews: list[Review] = []
        for item in _as_list(payload):
            try:
                reviews.append(Review.from_payload(item))
            except (MalformedRecordError, TypeError, ValueError) as exc:
                logger.warning("Skipping review: %s", exc)
        return reviews

    async def fetch_featured_look(self) -> dict[str, Any] | None:
        url = f"{self.api_root}/wp/v2/look-semana"
        payload = await self._get_json("featured_look", url, {"per_page": 1, "_embed": 1}, absolute=True)
        looks = _as_list(payload)
        return looks[0] if looks else None

    def _parse_products(self, payload: Any) -> list[RawProduct]:
        products: list[RawProduct] = []
        for item in _as_list(payload):
            try:
                products.append(RawProduct.from_payload(item))
            except (MalformedRecordError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed product record: %s", exc)
        return products

    async def _get_json(
        self,
        operation: str,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        absolute: bool = False,
    ) -> Any:
        params = dict(params or {})
        key = cache_key(operation, path=path, **params)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached
        url = path if absolute else f"{self.base_url}{path}"
        try:
            async with self._semaphore:
                response = await self._session.get(url, params={**params, **self._credentials}, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(f"Timed out fetching {path}") from exc
        except httpx.TransportError as exc:
            raise UpstreamUnavailable(f"Could not reach upstream for {path}: {exc}") from exc
        if not response.is_success:
            logger.warning("Upstream %s returned %s", path, response.status_code)
            raise UpstreamError(response.status_code, f"{operation} failed with HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(response.status_code, f"{operation} returned invalid JSON") from exc
        self._cache.set(key, data)
        return data


def create_client_from_env(**overrides: Any) -> WooCommerceClient:
    """Create a client using the WC_* and CATALOG_* environment variables."""
    options: dict[str, Any] = {
        "base_url": os.environ.get("WC_BASE_URL", DEFAULT_BASE_URL),
        "consumer_key": os.environ.get("WC_CONSUMER_KEY"),
        "consumer_secret": os.environ.get("WC_CONSUMER_SECRET"),
        "concurrency": int(os.environ.get("CATALOG_CONCURRENCY", 5)),
        "timeout": float(os.environ.get("CATALOG_TIMEOUT", DEFAULT_TIMEOUT)),
        "cache": MemoryCache(ttl=float(os.environ.get("CATALOG_CACHE_TTL", 60 * 60))),
    }
    options.update(overrides)
    return WooCommerceClient(**options)


def _as_list(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if payload in (None, ""):
        return []
    return [payload]
