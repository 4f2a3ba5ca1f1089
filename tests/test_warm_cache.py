import httpx
import pytest
import respx

from conftest import BASE_URL, load_fixture
from storefront.catalog.cache import NullCache
from storefront.catalog.client import WooCommerceClient
from storefront.jobs import warm_cache
from storefront.jobs.warm_cache import build_urls, run_warm_cache

ORIGIN = "https://tienda.test"


def test_build_urls():
    urls = build_urls(f"{ORIGIN}/", ["bogota", "armenia"])
    assert urls == [
        f"{ORIGIN}/",
        f"{ORIGIN}/lista-de-deseos",
        f"{ORIGIN}/api/products",
        f"{ORIGIN}/productos/bogota",
        f"{ORIGIN}/productos/armenia",
    ]


@pytest.mark.asyncio
async def test_run_warm_cache_reports_failures(monkeypatch):
    monkeypatch.setattr(warm_cache, "CHUNK_SIZE", 2)
    monkeypatch.setattr(warm_cache, "CHUNK_PAUSE", 0)
    async with respx.mock(assert_all_called=True) as router:
        products = router.get(f"{BASE_URL}/products").mock(
            return_value=httpx.Response(200, json=load_fixture("woocommerce/category_63.json"))
        )
        router.head(f"{ORIGIN}/productos/armenia").mock(return_value=httpx.Response(500))
        router.head(f"{ORIGIN}/lista-de-deseos").mock(side_effect=httpx.ConnectError("down"))
        heads = router.head(url__startswith=ORIGIN).mock(return_value=httpx.Response(200))
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        async with httpx.AsyncClient() as session:
            with pytest.warns(UserWarning):
                report = await run_warm_cache(ORIGIN, limit=24, client=client, session=session)
        await client.close()

    assert products.calls.last.request.url.params["per_page"] == "24"
    assert report.success
    assert report.products == 3
    assert report.total_links == 6
    assert sorted(report.failures) == [f"{ORIGIN}/lista-de-deseos", f"{ORIGIN}/productos/armenia"]
    assert heads.call_count == 4
    assert report.timestamp


def test_celery_beat_schedules_warm_cache():
    from storefront.jobs.celery_app import celery_app, run_warm_cache_task

    entry = celery_app.conf.beat_schedule["warm-cache"]
    assert entry["task"] == run_warm_cache_task.name
    assert "storefront.jobs.warm_cache" in celery_app.conf.include
