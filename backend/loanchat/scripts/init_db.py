"""
Initialize database schema, optionally seeding products.

Run ONCE when:
- first local setup
- new environment deployment

Usage:
    python -m loanchat.scripts.init_db
    python -m loanchat.scripts.init_db --seed data/products.yaml
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import yaml

from loanchat.config import Config
from loanchat.database.db.session import create_db_engine, create_session_factory, init_schema
from loanchat.database.product_repository import ProductRepository
from loanchat.logging_setup import setup_logging
from loanchat.model.product import Product

logger = logging.getLogger(__name__)


def load_products(path: Path) -> List[Product]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if isinstance(data, dict):
        data = data.get("products", [])
    return [Product.model_validate(item) for item in data]


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create tables and seed loan products")
    parser.add_argument("--database-url", default=Config.database_url)
    parser.add_argument("--seed", type=Path, help="YAML file with a list of products")
    args = parser.parse_args(argv)

    setup_logging()

    logger.info("🔧 Initializing database schema...")
    engine = create_db_engine(args.database_url)
    init_schema(engine)
    logger.info("✅ Database schema initialized.")

    if args.seed:
        products = load_products(args.seed)
        repo = ProductRepository(create_session_factory(engine))
        count = repo.save_many(products)
        logger.info(f"📦 Seeded {count} products from {args.seed}")


if __name__ == "__main__":
    main()
