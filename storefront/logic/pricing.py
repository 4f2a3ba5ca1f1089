"""Display price computation."""

from __future__ import annotations

import math
import os
from dataclasses import asdict, dataclass
from typing import Any

from storefront.catalog.models import RawPrices

HOT_DISCOUNT_THRESHOLD = int(os.environ.get("HOT_DISCOUNT_THRESHOLD", 40))


@dataclass(slots=True)
class PricingConfig:
    tax_rate: float = 0.19
    currency_code: str = "COP"
    currency_symbol: str = "$"
    currency_minor_unit: int = 0

    @classmethod
    def from_env(cls) -> PricingConfig:
        return cls(
            tax_rate=float(os.environ.get("CATALOG_TAX_RATE", 0.19)),
            currency_code=os.environ.get("CATALOG_CURRENCY_CODE", "COP"),
            currency_symbol=os.environ.get("CATALOG_CURRENCY_SYMBOL", "$"),
            currency_minor_unit=int(os.environ.get("CATALOG_CURRENCY_MINOR_UNIT", 0)),
        )


@dataclass(slots=True)
class Currency:
    code: str
    symbol: str
    prefix: str
    minor_unit: int


@dataclass(slots=True)
class DisplayPrice:
    price: float | None
    regular_price: float | None
    sale_price: float | None
    is_sale: bool
    discount_percentage: int
    is_hot: bool
    currency: Currency

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def to_minor_units(value: Any, *, exponent: int, multiplier: float = 1.0) -> int | None:
    if value in (None, ""):
        return None
    try:
        return round(float(value) * multiplier * 10**exponent)
    except (TypeError, ValueError):
        return None


def to_major_units(amount: int | None, exponent: int) -> float | None:
    if amount is None:
        return None
    if exponent <= 0:
        return float(amount)
    return amount / 10**exponent


def discount_percentage(price: float | None, regular_price: float | None) -> int:
    if not regular_price or regular_price <= 0 or price is None or price >= regular_price:
        return 0
    return math.floor((regular_price - price) / regular_price * 100 + 0.5)


def is_sale(price: float | None, regular_price: float | None) -> bool:
    if not regular_price or regular_price <= 0 or price is None:
        return False
    return regular_price > price


def display_prices(raw: RawPrices, config: PricingConfig | None = None) -> DisplayPrice:
    config = config or PricingConfig.from_env()
    exponent = raw.currency_minor_unit if raw.currency_minor_unit is not None else config.currency_minor_unit
    if raw.minor_units:
        price, regular, sale = (to_minor_units(v, exponent=0) for v in (raw.price, raw.regular_price, raw.sale_price))
    else:
        # wc/v3 reports tax-exclusive prices
        multiplier = 1 + config.tax_rate if raw.tax_status == "taxable" else 1.0
        price, regular, sale = (
            to_minor_units(v, exponent=exponent, multiplier=multiplier)
            for v in (raw.price, raw.regular_price, raw.sale_price)
        )
    current = to_major_units(price, exponent)
    regular_major = to_major_units(regular, exponent)
    percentage = discount_percentage(current, regular_major) if is_sale(current, regular_major) else 0
    symbol = raw.currency_symbol or config.currency_symbol
    return DisplayPrice(
        price=current,
        regular_price=regular_major,
        sale_price=to_major_units(sale, exponent),
        is_sale=is_sale(current, regular_major),
        discount_percentage=percentage,
        is_hot=percentage >= HOT_DISCOUNT_THRESHOLD,
        currency=Currency(
            code=raw.currency_code or config.currency_code,
            symbol=symbol,
            prefix=raw.currency_prefix or symbol,
            minor_unit=exponent,
        ),
    )
