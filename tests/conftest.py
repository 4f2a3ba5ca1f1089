import copy
import json
from pathlib import Path

import pytest

from storefront.catalog.models import RawProduct
from storefront.logic.pricing import PricingConfig

FIXTURES = Path(__file__).parent / "fixtures" / "http"
BASE_URL = "https://shop.test/wp-json/wc/v3"
UPLOADS = "https://shop.test/wp-content/uploads/2024/05"


def load_fixture(path: str):
    return json.loads((FIXTURES / path).read_text())


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def fixture_json():
    return load_fixture


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def pricing():
    return PricingConfig(tax_rate=0.19, currency_code="COP", currency_symbol="$", currency_minor_unit=0)


@pytest.fixture()
def bogota_payload():
    return copy.deepcopy(load_fixture("woocommerce/bogota_by_slug.json")[1])


@pytest.fixture()
def make_raw():
    def factory(**overrides) -> RawProduct:
        payload = {
            "id": 1,
            "name": "Zapato",
            "slug": "zapato",
            "type": "variable",
            "price": "100",
            "regular_price": "100",
            "tax_status": "none",
            "images": [{"id": 1, "src": f"{UPLOADS}/zapato-Negro-1.jpg", "alt": ""}],
            "attributes": [
                {"id": 1, "name": "Color", "slug": "pa_color", "options": ["Negro", "Vino"]},
                {"id": 2, "name": "Talla", "slug": "pa_talla", "options": ["40", "41"]},
            ],
            "categories": [{"id": 63, "name": "Calzado", "slug": "calzado"}],
            "variations": [],
        }
        payload.update(overrides)
        return RawProduct.from_payload(payload)

    return factory
