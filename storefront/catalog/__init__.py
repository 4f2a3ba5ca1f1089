"""Catalog access helpers."""

from __future__ import annotations

import pathlib

import yaml

from storefront.logic.dedupe import FilterRules

FILTERS_PATH = pathlib.Path(__file__).with_name("filters.yml")


def load_filter_rules(path: pathlib.Path | None = None) -> FilterRules:
    data = yaml.safe_load((path or FILTERS_PATH).read_text()) or {}
    return FilterRules(
        include=[str(word) for word in data.get("include") or []],
        exclude=[str(word) for word in data.get("exclude") or []],
    )
