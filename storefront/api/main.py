"""FastAPI application serving normalized catalog data to the storefront."""

from __future__ import annotations

import functools
import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront.catalog.client import create_client_from_env
from storefront.catalog.errors import NotFoundError, UpstreamError, UpstreamUnavailable
from storefront.catalog.service import DEFAULT_PAGE_SIZE, CatalogService
from storefront.catalog.widgets import load_featured_look, load_reviews, sample_reviews
from storefront.jobs.warm_cache import run_warm_cache
from storefront.utils.urls import is_valid_token

logger = logging.getLogger(__name__)

CATALOG_CACHE_CONTROL = "public, s-maxage=86400, stale-while-revalidate=604800"
REVIEWS_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"
NO_STORE = "no-store, no-cache, must-revalidate, proxy-revalidate"
HOME_CATEGORY_ID = int(os.environ.get("HOME_CATEGORY_ID", 63))

app = FastAPI(title="Storefront Catalog API")


class ImageModel(BaseModel):
    src: str
    id: int | None = None
    alt: str = ""
    name: str | None = None
    verified: bool = True


class ColorImagesResponse(BaseModel):
    slug: str
    color: str | None
    images: list[ImageModel]


class WarmCacheResponse(BaseModel):
    success: bool
    total_links: int
    products: int
    failures: list[str]
    timestamp: str


@functools.lru_cache(maxsize=1)
def get_service() -> CatalogService:
    load_dotenv()
    return CatalogService(create_client_from_env())


def _json(content: Any, *, cache_control: str = CATALOG_CACHE_CONTROL, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        content,
        status_code=status_code,
        headers={"Cache-Control": cache_control, "Access-Control-Allow-Origin": "*"},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _json({"error": "Not found", "detail": str(exc)}, cache_control=NO_STORE, status_code=404)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.warning("Upstream error on %s: %s", request.url.path, exc)
    return _json(
        {"error": "Upstream error", "upstream_status": exc.status_code, "retryable": True},
        cache_control=NO_STORE,
        status_code=502,
    )


@app.exception_handler(UpstreamUnavailable)
async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
    logger.warning("Upstream unavailable on %s: %s", request.url.path, exc)
    return _json({"error": "Upstream unavailable", "retryable": True}, cache_control=NO_STORE, status_code=503)


@app.get("/products")
async def products(
    slug: str | None = None,
    page: int = Query(1, ge=1),
    category: int = Query(HOME_CATEGORY_ID),
    service: CatalogService = Depends(get_service),
) -> JSONResponse:
    if slug:
        product = await service.get_product(slug)
        return _json(product.to_dict())
    items = await service.list_products(category, page=page, page_size=DEFAULT_PAGE_SIZE)
    return _json([item.to_dict() for item in items])


@app.get("/products/{slug}/images", response_model=ColorImagesResponse)
async def color_images(
    slug: str,
    color: str | None = None,
    service: CatalogService = Depends(get_service),
) -> ColorImagesResponse:
    product = await service.get_product(slug)
    images = service.select_color(product, color)
    return ColorImagesResponse(
        slug=product.slug,
        color=color,
        images=[ImageModel(**image.to_dict()) for image in images],
    )


@app.get("/reviews")
async def reviews(service: CatalogService = Depends(get_service)) -> JSONResponse:
    items = sample_reviews(await load_reviews(service))
    return _json([review.to_dict() for review in items], cache_control=REVIEWS_CACHE_CONTROL)


@app.get("/look-of-the-week")
async def look_of_the_week(service: CatalogService = Depends(get_service)) -> JSONResponse:
    look = await load_featured_look(service)
    return _json(look.to_dict(), cache_control=NO_STORE)


@app.get("/warm-cache", response_model=WarmCacheResponse)
async def warm_cache(
    request: Request,
    token: str | None = None,
    service: CatalogService = Depends(get_service),
) -> WarmCacheResponse:
    if not is_valid_token(token, "warm-cache"):
        raise HTTPException(status_code=403, detail="Invalid token")
    origin = os.environ.get("STOREFRONT_ORIGIN") or str(request.base_url).rstrip("/")
    report = await run_warm_cache(origin, client=service.client)
    return WarmCacheResponse(**report.to_dict())
