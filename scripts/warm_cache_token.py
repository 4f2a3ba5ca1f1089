"""Generate a signed token for the /warm-cache endpoint."""

from __future__ import annotations

from dotenv import load_dotenv

from storefront.utils.dates import timestamp
from storefront.utils.urls import generate_token


def main() -> None:
    load_dotenv()
    token = generate_token({"issued_at": timestamp()}, "warm-cache")
    print(f"/warm-cache?token={token}")


if __name__ == "__main__":
    main()
