import httpx
import pytest
import respx

from conftest import BASE_URL, load_fixture
from storefront.catalog.cache import MemoryCache, NullCache
from storefront.catalog.client import WooCommerceClient, create_client_from_env
from storefront.catalog.errors import NotFoundError, UpstreamError, UpstreamUnavailable


@pytest.mark.asyncio
async def test_duplicate_slug_prefers_record_with_attributes():
    async with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/products").mock(
            return_value=httpx.Response(200, json=load_fixture("woocommerce/bogota_by_slug.json"))
        )
        client = WooCommerceClient(BASE_URL, consumer_key="ck_test", consumer_secret="cs_test", cache=NullCache())
        product = await client.fetch_product_by_slug("bogota")
        await client.close()
    assert product.id == 102
    assert len(product.attributes) == 3
    params = route.calls.last.request.url.params
    assert params["slug"] == "bogota"
    assert params["consumer_key"] == "ck_test"
    assert params["consumer_secret"] == "cs_test"


@pytest.mark.asyncio
async def test_missing_slug_raises_not_found():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/products").mock(return_value=httpx.Response(200, json=[]))
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        with pytest.raises(NotFoundError):
            await client.fetch_product_by_slug("no-existe")
        await client.close()


@pytest.mark.asyncio
async def test_responses_are_cached_until_ttl(clock):
    async with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/products/102").mock(
            return_value=httpx.Response(200, json=load_fixture("woocommerce/product_102.json"))
        )
        client = WooCommerceClient(BASE_URL, cache=MemoryCache(ttl=3600, clock=clock))
        first = await client.fetch_product(102)
        second = await client.fetch_product(102)
        assert route.call_count == 1
        assert first == second
        clock.advance(3600)
        await client.fetch_product(102)
        assert route.call_count == 2
        await client.close()


@pytest.mark.asyncio
async def test_missing_product_id_raises_not_found():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/products/555").mock(
            return_value=httpx.Response(404, json={"code": "woocommerce_rest_product_invalid_id"})
        )
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        with pytest.raises(NotFoundError):
            await client.fetch_product(555)
        await client.close()


@pytest.mark.asyncio
async def test_server_error_surfaces_status():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/products").mock(return_value=httpx.Response(500, text="boom"))
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        with pytest.raises(UpstreamError) as excinfo:
            await client.fetch_products_by_category(63)
        await client.close()
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_errors_are_not_cached(clock):
    async with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/products").mock(
            side_effect=[httpx.Response(500), httpx.Response(200, json=[])]
        )
        client = WooCommerceClient(BASE_URL, cache=MemoryCache(ttl=3600, clock=clock))
        with pytest.raises(UpstreamError):
            await client.fetch_products()
        assert await client.fetch_products() == []
        assert route.call_count == 2
        await client.close()


@pytest.mark.asyncio
async def test_timeout_raises_unavailable():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/products/1/variations").mock(side_effect=httpx.ConnectTimeout("slow"))
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        with pytest.raises(UpstreamUnavailable):
            await client.fetch_variations(1)
        await client.close()


@pytest.mark.asyncio
async def test_invalid_json_is_an_upstream_error():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/products/reviews").mock(return_value=httpx.Response(200, text="<html>"))
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        with pytest.raises(UpstreamError):
            await client.fetch_reviews()
        await client.close()


@pytest.mark.asyncio
async def test_category_listing_skips_records_without_id():
    async with respx.mock(assert_all_called=True) as router:
        route = router.get(f"{BASE_URL}/products").mock(
            return_value=httpx.Response(200, json=load_fixture("woocommerce/category_63.json"))
        )
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        with pytest.warns(UserWarning):
            products = await client.fetch_products_by_category(63, page=2, page_size=15)
        await client.close()
    assert [p.id for p in products] == [102, 102, 103, 104]
    params = route.calls.last.request.url.params
    assert params["category"] == "63"
    assert params["page"] == "2"
    assert params["per_page"] == "15"
    assert params["status"] == "publish"


@pytest.mark.asyncio
async def test_variations_and_reviews_are_parsed():
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{BASE_URL}/products/102/variations").mock(
            return_value=httpx.Response(200, json=load_fixture("woocommerce/bogota_variations.json"))
        )
        router.get(f"{BASE_URL}/products/reviews").mock(
            return_value=httpx.Response(200, json=load_fixture("woocommerce/reviews.json"))
        )
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        variations = await client.fetch_variations(102)
        reviews = await client.fetch_reviews()
        await client.close()
    assert [v.id for v in variations] == [201, 202, 203]
    assert variations[0].attributes[0].value == "Negro"
    assert variations[1].image is None
    assert not variations[2].in_stock
    assert [r.id for r in reviews] == [1, 1, 2]


@pytest.mark.asyncio
async def test_featured_look_uses_wp_namespace():
    async with respx.mock(assert_all_called=True) as router:
        router.get("https://shop.test/wp-json/wp/v2/look-semana").mock(
            return_value=httpx.Response(200, json=load_fixture("wp/look_semana.json"))
        )
        client = WooCommerceClient(BASE_URL, cache=NullCache())
        look = await client.fetch_featured_look()
        await client.close()
    assert look["id"] == 77


def test_create_client_from_env(monkeypatch):
    monkeypatch.setenv("WC_BASE_URL", "https://other.test/wp-json/wc/v3/")
    monkeypatch.setenv("CATALOG_CACHE_TTL", "60")
    client = create_client_from_env()
    assert client.base_url == "https://other.test/wp-json/wc/v3"
    assert client.api_root == "https://other.test/wp-json"
    assert client._cache.ttl == 60
