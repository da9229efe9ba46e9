#!/usr/bin/env python3
"""
Catalog seeding script

Loads products and combos from a JSON file into the database used by db.py.

Usage:
    python tools/seed_catalog.py tools/sample_catalog.json

JSON format (camelCase, same keys as the API):
    {
      "products": [
        {"id": "banh-mi", "name": "Bánh mì", "category": "Đồ ăn", "price": 25000}
      ],
      "combos": [
        {"name": "Combo no bụng", "price": 60000, "priority": 10,
         "categoryRequirements": [{"category": "Đồ ăn", "quantity": 2},
                                  {"category": "Đồ uống", "quantity": 1}]}
      ]
    }

Existing products (same id) are skipped, so the script can be re-run.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import create_db_and_tables, get_db_session, session_commit
from models.combo import ComboDTO
from models.product import ProductDTO
from repositories.combo import ComboRepository
from repositories.product import ProductRepository


async def seed_catalog(data: dict, session: Session | AsyncSession) -> tuple[int, int]:
    """
    Insert products and combos from parsed JSON.

    Returns:
        (products added, combos added)
    """
    products_added = 0
    for raw_product in data.get("products", []):
        product = ProductDTO.model_validate(raw_product)
        if product.id and await ProductRepository.get_by_id(product.id, session):
            logging.info(f"Product {product.id} already exists, skipping")
            continue
        await ProductRepository.add(product, session)
        products_added += 1

    combos_added = 0
    for raw_combo in data.get("combos", []):
        combo = ComboDTO.model_validate(raw_combo)
        if combo.id and await ComboRepository.get_by_id(combo.id, session):
            logging.info(f"Combo {combo.id} already exists, skipping")
            continue
        await ComboRepository.add(combo, session)
        combos_added += 1

    return products_added, combos_added


async def main(catalog_path: Path):
    with open(catalog_path, "r", encoding="UTF-8") as f:
        data = json.load(f)

    await create_db_and_tables()
    async with get_db_session() as session:
        products_added, combos_added = await seed_catalog(data, session)
        await session_commit(session)

    print(f"✓ Seeded {products_added} products and {combos_added} combos from {catalog_path}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python tools/seed_catalog.py <catalog.json>", file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(Path(sys.argv[1])))
