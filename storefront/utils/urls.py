"""Signed token utilities for operator endpoints."""

from __future__ import annotations

import os

from itsdangerous import BadSignature, URLSafeTimedSerializer

DEFAULT_EXPIRY = int(os.environ.get("SIGNED_TOKEN_EXPIRY", 60 * 60 * 24 * 30))


def _serializer() -> URLSafeTimedSerializer:
    secret = os.environ.get("SIGNING_SECRET", "change-me")
    return URLSafeTimedSerializer(secret_key=secret)


def generate_token(payload: dict[str, object], purpose: str) -> str:
    serializer = _serializer()
    return serializer.dumps(payload, salt=purpose)


def load_token(token: str, purpose: str, max_age: int = DEFAULT_EXPIRY) -> dict[str, object]:
    serializer = _serializer()
    data = serializer.loads(token, max_age=max_age, salt=purpose)
    if not isinstance(data, dict):  # pragma: no cover
        raise BadSignature("Invalid token payload")
    return data


def is_valid_token(token: str | None, purpose: str) -> bool:
    if not token:
        return False
    try:
        load_token(token, purpose)
    except BadSignature:
        return False
    return True
