"""Per-colour image reconciliation.

The platform rarely exposes per-colour galleries through its public API.
Colours are told apart on the media server by filename convention, so the
chain below falls back from explicit variation imagery, to image metadata,
to rewriting the colour token inside the first filename, and finally to the
product's default gallery. Synthesized images are returned with
``verified=False`` and must be confirmed by a successful load before they
replace a real image.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import replace
from typing import Mapping, Sequence
from urllib.parse import urlsplit, urlunsplit

from storefront.catalog.models import Attribute, Image, RawProduct
from storefront.logic.attributes import AttributeKind, find_attribute
from storefront.logic.slugs import matches_slug, normalize_slug, strip_accents

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = Image(
    src="https://via.placeholder.com/300x400?text=Sin+Imagen",
    alt="Sin imagen",
    name="placeholder",
)
UPLOADS_MARKER = "wp-content/uploads"
EDIT_SUFFIX_RE = re.compile(r"-e\d+(?=\.(?:jpe?g|png)$)", re.IGNORECASE)
NUMERIC_SUFFIX_RE = re.compile(r"^(?P<stem>.*-)(?P<number>\d+)$")


def strip_edit_suffix(url: str) -> str:
    """Drop WordPress' ``-e1700000000`` editing suffix from the filename."""
    return _rewrite_filename(url, lambda filename: EDIT_SUFFIX_RE.sub("", filename))


def webp_variant(url: str) -> str:
    if UPLOADS_MARKER not in url or url.lower().endswith(".webp"):
        return url
    return f"{strip_edit_suffix(url)}.webp"


def images_for_color(
    product: RawProduct,
    color_slug: str | None,
    variation_images: Mapping[str, Sequence[Image]] | None = None,
) -> list[Image]:
    defaults = list(product.images)
    if not color_slug:
        return defaults
    slug = normalize_slug(color_slug)
    if not slug:
        return defaults
    color_attr = find_attribute(product.attributes, AttributeKind.COLOR)
    display_name = _display_name(color_attr, slug)

    explicit = list((variation_images or {}).get(slug) or [])
    if explicit:
        return explicit

    matched = [image for image in defaults if _mentions_color(image, slug, display_name)]
    if matched:
        return matched

    guessed = _mutate_first_filename(product, color_attr, slug, display_name)
    if guessed:
        logger.debug("Guessed %s for colour %s of product %s", guessed.src, slug, product.id)
        return [guessed]
    return defaults


def guess_hover_image(images: Sequence[Image]) -> Image | None:
    """Second gallery image, guessed from the first filename when missing."""
    if not images:
        return None
    if len(images) > 1:
        return images[1]
    first = images[0]
    if first == PLACEHOLDER_IMAGE:
        return None

    def bump(filename: str) -> str:
        stem, ext = posixpath.splitext(EDIT_SUFFIX_RE.sub("", filename))
        match = NUMERIC_SUFFIX_RE.match(stem)
        if match:
            return f"{match.group('stem')}{int(match.group('number')) + 1}{ext}"
        return f"{stem}-2{ext}"

    src = _rewrite_filename(first.src, bump)
    if src == first.src:
        return None
    return Image(src=src, alt=first.alt, name=posixpath.basename(urlsplit(src).path), verified=False)


def settle_images(candidates: Sequence[Image], fallback: Sequence[Image], *, loaded: bool) -> list[Image]:
    """Resolve provisional images once the browser reports the load outcome."""
    if not any(image.provisional for image in candidates):
        return list(candidates)
    if loaded:
        return [replace(image, verified=True) for image in candidates]
    return list(fallback)


def _display_name(color_attr: Attribute | None, slug: str) -> str:
    if color_attr is not None:
        for term in color_attr.terms:
            if matches_slug(term.slug, slug) or matches_slug(term.name, slug):
                return term.name
    return slug.replace("-", " ")


def _tokens(*values: str) -> set[str]:
    tokens: set[str] = set()
    for value in values:
        base = strip_accents(value.lower()).strip()
        if not base:
            continue
        for sep in ("-", "_"):
            tokens.add(re.sub(r"[\s_-]+", sep, base))
    return tokens


def _mentions_color(image: Image, slug: str, display_name: str) -> bool:
    haystack = strip_accents(" ".join([image.src, image.alt or "", image.name or "", image.filename]).lower())
    return any(token in haystack for token in _tokens(slug, display_name))


def _mutate_first_filename(
    product: RawProduct,
    color_attr: Attribute | None,
    slug: str,
    display_name: str,
) -> Image | None:
    if not product.images or color_attr is None:
        return None
    first = product.images[0]
    filename = posixpath.basename(urlsplit(first.src).path)
    folded, positions = _fold_with_positions(filename)

    others = [term for term in color_attr.terms if normalize_slug(term.slug or term.name) != slug]
    candidates = sorted(
        {token for term in others for token in _tokens(term.name, term.slug)},
        key=len,
        reverse=True,
    )
    for token in candidates:
        index = folded.find(token)
        if index < 0:
            continue
        start, end = positions[index], positions[index + len(token) - 1] + 1
        original = filename[start:end]
        target = _match_case(original, re.sub(r"\s+", "-", strip_accents(display_name).strip()))
        mutated = EDIT_SUFFIX_RE.sub("", filename[:start] + target + filename[end:])
        src = _rewrite_filename(first.src, lambda _: mutated)
        return Image(src=src, alt=f"{product.name} {display_name}".strip(), name=mutated, verified=False)
    return None


def _fold_with_positions(text: str) -> tuple[str, list[int]]:
    """Accent-free lowercase copy of ``text`` plus, per folded char, its source index."""
    folded: list[str] = []
    positions: list[int] = []
    for index, ch in enumerate(text):
        for part in strip_accents(ch).lower():
            folded.append(part)
            positions.append(index)
    return "".join(folded), positions


def _match_case(original: str, replacement: str) -> str:
    letters = [ch for ch in original if ch.isalpha()]
    if len(letters) > 1 and all(ch.isupper() for ch in letters):
        return replacement.upper()
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement.lower()


def _rewrite_filename(url: str, rewrite) -> str:
    parts = urlsplit(url)
    directory, filename = posixpath.split(parts.path)
    new_filename = rewrite(filename)
    if new_filename == filename:
        return url
    return urlunsplit(parts._replace(path=posixpath.join(directory, new_filename)))
