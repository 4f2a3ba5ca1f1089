from storefront.catalog.models import RawPrices
from storefront.logic.pricing import PricingConfig, discount_percentage, display_prices, is_sale, to_major_units


def test_sale_detection():
    assert is_sale(80, 100)
    assert discount_percentage(80, 100) == 20
    assert not is_sale(80, 0)
    assert discount_percentage(80, 0) == 0
    assert not is_sale(80, None)
    assert not is_sale(100, 100)


def test_discount_rounds_half_up():
    assert discount_percentage(87.5, 100) == 13
    assert discount_percentage(84.375, 100) == 16


def test_to_major_units():
    assert to_major_units(12500, 2) == 125.0
    assert to_major_units(825000, 0) == 825000.0
    assert to_major_units(None, 0) is None


def test_display_prices_store_api_minor_units(pricing):
    raw = RawPrices(price="8000", regular_price="10000", minor_units=True, currency_code="USD", currency_minor_unit=2)
    price = display_prices(raw, pricing)
    assert price.price == 80.0
    assert price.regular_price == 100.0
    assert price.is_sale
    assert price.discount_percentage == 20
    assert price.currency.code == "USD"
    assert price.currency.minor_unit == 2


def test_display_prices_adds_tax_for_taxable_v3_prices(pricing):
    raw = RawPrices(price="693277.3109", regular_price="693277.3109", tax_status="taxable")
    price = display_prices(raw, pricing)
    assert price.price == 825000
    assert not price.is_sale
    assert price.discount_percentage == 0
    assert price.currency.code == "COP"
    assert price.currency.prefix == "$"


def test_zero_regular_price_is_not_a_sale(pricing):
    price = display_prices(RawPrices(price="80", regular_price="0"), pricing)
    assert price.price == 80
    assert not price.is_sale
    assert price.discount_percentage == 0


def test_hot_badge_threshold():
    price = display_prices(RawPrices(price="50", regular_price="100"), PricingConfig(tax_rate=0))
    assert price.discount_percentage == 50
    assert price.is_hot


def test_missing_prices_are_tolerated(pricing):
    price = display_prices(RawPrices(), pricing)
    assert price.price is None
    assert not price.is_sale
