"""Print the normalized representation of a product."""

from __future__ import annotations

import asyncio
import json
import sys

from dotenv import load_dotenv

from storefront.catalog.client import create_client_from_env
from storefront.catalog.service import CatalogService


async def main(slug: str, color: str | None = None) -> None:
    load_dotenv()
    service = CatalogService(create_client_from_env())
    try:
        product = await service.get_product(slug)
    finally:
        await service.close()
    print(json.dumps(product.to_dict(), indent=2, ensure_ascii=False))
    if color:
        images = service.select_color(product, color)
        print(json.dumps([image.to_dict() for image in images], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        raise SystemExit("usage: inspect_product.py SLUG [COLOR]")
    asyncio.run(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
