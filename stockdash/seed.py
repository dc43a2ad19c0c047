from __future__ import annotations

import logging

from sqlalchemy import delete

from stockdash.config import configure_logging
from stockdash.database import Base, SessionLocal, engine
from stockdash.models import Product

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {"code": "ELEC-1001", "description": "27-inch Monitor", "available": 42, "in_transit": 0, "minimum_level": 15},
    {"code": "ELEC-1002", "description": "Wireless Keyboard", "available": 4, "in_transit": 5, "minimum_level": 12},
    {"code": "ELEC-1003", "description": "USB-C Dock", "available": 0, "in_transit": 0, "minimum_level": 10},
    {"code": "OFF-2001", "description": "Notebook Pack", "available": 50, "in_transit": 10, "minimum_level": 40},
    {"code": "OFF-2002", "description": "Ballpoint Pen Box", "available": 22, "in_transit": 0, "minimum_level": 30},
    {"code": "OFF-2003", "description": "Heavy Duty Stapler", "available": 8, "in_transit": 0, "minimum_level": 5},
    {"code": "CLN-3001", "description": "Disinfectant Wipes", "available": 0, "in_transit": 0, "minimum_level": 5},
    {"code": "CLN-3002", "description": "Paper Towels", "available": 5, "in_transit": 2, "minimum_level": 5},
]


def run_seed() -> None:
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        db.execute(delete(Product))
        db.add_all([Product(**row) for row in DEMO_PRODUCTS])
        db.commit()

    logger.info("Seeded %d demo products", len(DEMO_PRODUCTS))


if __name__ == "__main__":
    configure_logging()
    run_seed()
    print(f"Seed complete. {len(DEMO_PRODUCTS)} demo products loaded.")
