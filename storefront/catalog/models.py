"""Catalog data models parsed from WooCommerce payloads."""

from __future__ import annotations

import posixpath
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping
from urllib.parse import unquote, urlsplit

from storefront.catalog.errors import MalformedRecordError, warn_malformed


@dataclass(slots=True)
class Image:
    src: str
    id: int | None = None
    alt: str = ""
    name: str | None = None
    verified: bool = True

    @property
    def filename(self) -> str:
        return unquote(posixpath.basename(urlsplit(self.src).path))

    @property
    def provisional(self) -> bool:
        return not self.verified

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], *, default_alt: str = "") -> Image | None:
        src = data.get("src") or data.get("source_url") or ""
        if not src:
            return None
        return cls(
            src=src,
            id=data.get("id"),
            alt=data.get("alt") or default_alt,
            name=data.get("name"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Term:
    id: int | None
    name: str
    slug: str


@dataclass(slots=True)
class Attribute:
    id: int | None
    name: str
    slug: str
    terms: list[Term] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> Attribute:
        if data.get("terms"):
            terms = [
                Term(id=term.get("id"), name=term.get("name", ""), slug=term.get("slug") or term.get("name", ""))
                for term in data["terms"]
                if isinstance(term, Mapping)
            ]
        else:
            # wc/v3 only lists option names on the parent product
            terms = [Term(id=idx, name=option, slug=option) for idx, option in enumerate(data.get("options") or [])]
        return cls(id=data.get("id"), name=data.get("name", ""), slug=data.get("slug") or "", terms=terms)


@dataclass(slots=True)
class Category:
    id: int | None
    name: str
    slug: str


@dataclass(slots=True)
class VariationAttribute:
    name: str
    value: str


@dataclass(slots=True)
class Variation:
    id: int
    attributes: list[VariationAttribute] = field(default_factory=list)
    price: str | None = None
    stock_status: str = "instock"
    image: Image | None = None

    @property
    def in_stock(self) -> bool:
        return self.stock_status != "outofstock"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> Variation:
        variation_id = _record_id(data, "Variation")
        attributes = [
            VariationAttribute(
                name=attr.get("name") or attr.get("attribute") or "",
                value=attr.get("option") or attr.get("value") or "",
            )
            for attr in data.get("attributes") or []
            if isinstance(attr, Mapping)
        ]
        image = None
        if isinstance(data.get("image"), Mapping):
            image = Image.from_payload(data["image"])
        return cls(
            id=variation_id,
            attributes=attributes,
            price=_as_text(data.get("price")),
            stock_status=data.get("stock_status") or "instock",
            image=image,
        )


@dataclass(slots=True)
class RawPrices:
    """Prices exactly as the platform reports them.

    wc/v3 returns tax-exclusive amounts in major units, the Store API returns
    tax-inclusive amounts already expressed in minor units.
    """

    price: str | None = None
    regular_price: str | None = None
    sale_price: str | None = None
    tax_status: str = "none"
    minor_units: bool = False
    currency_code: str | None = None
    currency_symbol: str | None = None
    currency_prefix: str | None = None
    currency_minor_unit: int | None = None


@dataclass(slots=True)
class RawProduct:
    id: int
    slug: str
    name: str
    type: str = "simple"
    prices: RawPrices = field(default_factory=RawPrices)
    attributes: list[Attribute] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    variation_ids: list[int] = field(default_factory=list)
    variations: list[Variation] = field(default_factory=list)
    permalink: str | None = None
    description: str = ""
    short_description: str = ""

    @property
    def is_variable(self) -> bool:
        return self.type == "variable"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> RawProduct:
        product_id = _record_id(data, "Product record")
        name = data.get("name") or ""
        slug = data.get("slug") or ""
        if not name or not slug:
            warn_malformed("Product %s is missing its name or slug", product_id)

        attributes_data = data.get("attributes")
        if not isinstance(attributes_data, list):
            warn_malformed("Product %s has no attribute list", product_id)
            attributes_data = []
        images_data = data.get("images")
        if not isinstance(images_data, list):
            warn_malformed("Product %s has no image list", product_id)
            images_data = []

        images = [
            img
            for img in (Image.from_payload(item, default_alt=name) for item in images_data if isinstance(item, Mapping))
            if img
        ]
        variation_ids, variations = _parse_variations(data.get("variations"))
        return cls(
            id=product_id,
            slug=slug,
            name=name,
            type=data.get("type") or "simple",
            prices=_parse_prices(data),
            attributes=[Attribute.from_payload(attr) for attr in attributes_data if isinstance(attr, Mapping)],
            images=images,
            categories=[
                Category(id=cat.get("id"), name=cat.get("name", ""), slug=cat.get("slug", ""))
                for cat in data.get("categories") or []
                if isinstance(cat, Mapping)
            ],
            variation_ids=variation_ids,
            variations=variations,
            permalink=data.get("permalink"),
            description=data.get("description") or "",
            short_description=data.get("short_description") or "",
        )


@dataclass(slots=True)
class Review:
    id: int
    product_id: int | None
    product_name: str
    reviewer: str
    review: str
    rating: int
    date_created: str | None = None
    product_slug: str | None = None
    product_image: Image | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> Review:
        review_id = _record_id(data, "Review")
        image = None
        if isinstance(data.get("product_image"), Mapping):
            image = Image.from_payload(data["product_image"], default_alt=data.get("product_name") or "")
        return cls(
            id=review_id,
            product_id=data.get("product_id"),
            product_name=data.get("product_name") or "",
            reviewer=data.get("reviewer") or "",
            review=data.get("review") or "",
            rating=int(data.get("rating") or 0),
            date_created=data.get("date_created"),
            product_slug=data.get("product_slug"),
            product_image=image,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _parse_variations(value: Any) -> tuple[list[int], list[Variation]]:
    ids: list[int] = []
    variations: list[Variation] = []
    for item in value or []:
        if isinstance(item, Mapping):
            try:
                variation = Variation.from_payload(item)
            except MalformedRecordError:
                warn_malformed("Skipping embedded variation without id")
                continue
            variations.append(variation)
            ids.append(variation.id)
        else:
            try:
                ids.append(int(item))
            except (TypeError, ValueError):
                warn_malformed("Skipping invalid variation id %r", item)
    return ids, variations


def _parse_prices(data: Mapping[str, Any]) -> RawPrices:
    store_prices = data.get("prices")
    if isinstance(store_prices, Mapping):
        return RawPrices(
            price=_as_text(store_prices.get("price")),
            regular_price=_as_text(store_prices.get("regular_price")),
            sale_price=_as_text(store_prices.get("sale_price")),
            minor_units=True,
            currency_code=store_prices.get("currency_code"),
            currency_symbol=store_prices.get("currency_symbol"),
            currency_prefix=store_prices.get("currency_prefix"),
            currency_minor_unit=store_prices.get("currency_minor_unit"),
        )
    return RawPrices(
        price=_as_text(data.get("price")),
        regular_price=_as_text(data.get("regular_price")),
        sale_price=_as_text(data.get("sale_price")),
        tax_status=data.get("tax_status") or "none",
    )


def _as_text(value: Any) -> str | None:
    if value in (None, ""):
        return None
    return str(value)


def _record_id(data: Any, kind: str) -> int:
    if not isinstance(data, Mapping) or data.get("id") is None:
        raise MalformedRecordError(f"{kind} without id")
    try:
        return int(data["id"])
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(f"{kind} has an invalid id {data['id']!r}") from exc
