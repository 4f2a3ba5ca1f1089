"""Cache warming job."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx
from dotenv import load_dotenv

from storefront.catalog.client import WooCommerceClient, create_client_from_env
from storefront.utils.dates import timestamp
from storefront.utils.retry import retry_async

logger = logging.getLogger(__name__)

CRITICAL_ROUTES = ("/", "/lista-de-deseos", "/api/products")
CHUNK_SIZE = 50
CHUNK_PAUSE = 0.1


@dataclass(slots=True)
class WarmCacheReport:
    success: bool
    total_links: int
    products: int
    failures: list[str] = field(default_factory=list)
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_urls(origin: str, slugs: list[str]) -> list[str]:
    base = origin.rstrip("/")
    return [f"{base}{route}" for route in CRITICAL_ROUTES] + [f"{base}/productos/{slug}" for slug in slugs]


async def run_warm_cache(
    origin: str | None = None,
    *,
    limit: int = 24,
    client: WooCommerceClient | None = None,
    session: httpx.AsyncClient | None = None,
) -> WarmCacheReport:
    load_dotenv()
    origin = origin or os.environ.get("STOREFRONT_ORIGIN", "http://localhost:4321")
    owns_client = client is None
    client = client or create_client_from_env()
    owns_session = session is None
    session = session or httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    try:
        products = await retry_async(client.fetch_products)(page=1, page_size=limit)
        slugs = list(dict.fromkeys(product.slug for product in products if product.slug))
        urls = build_urls(origin, slugs)
        logger.info("Warming %s links for %s products", len(urls), len(slugs))
        failures: list[str] = []
        for start in range(0, len(urls), CHUNK_SIZE):
            chunk = urls[start:start + CHUNK_SIZE]
            results = await asyncio.gather(*(session.head(url) for url in chunk), return_exceptions=True)
            for url, result in zip(chunk, results):
                if isinstance(result, Exception):
                    logger.warning("Warming %s failed: %s", url, result)
                    failures.append(url)
                elif result.status_code >= 400:
                    logger.warning("Warming %s returned %s", url, result.status_code)
                    failures.append(url)
            await asyncio.sleep(CHUNK_PAUSE)
    finally:
        if owns_session:
            await session.aclose()
        if owns_client:
            await client.close()
    return WarmCacheReport(
        success=True,
        total_links=len(urls),
        products=len(slugs),
        failures=failures,
        timestamp=timestamp(),
    )


if __name__ == "__main__":
    print(asyncio.run(run_warm_cache()).to_dict())
