"""Catalog error taxonomy."""

from __future__ import annotations

import logging
import warnings

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for failures talking to the commerce platform."""


class NotFoundError(CatalogError):
    pass


class UpstreamError(CatalogError):
    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Upstream returned HTTP {status_code}")


class UpstreamUnavailable(CatalogError):
    pass


class MalformedRecordError(CatalogError, ValueError):
    """Raised when a record cannot be turned into a product at all."""


class MalformedDataWarning(UserWarning):
    """A record is missing a field and a safe default was substituted."""


def warn_malformed(message: str, *args: object) -> None:
    text = message % args if args else message
    logger.warning(text)
    warnings.warn(text, MalformedDataWarning, stacklevel=2)
