from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from stockdash.models import Product
from stockdash.schemas import ProductRead
from stockdash.services.classifier import STATUS_ORDER, StockStatus, classify

logger = logging.getLogger(__name__)


def annotate_product(product: Product) -> ProductRead:
    result = classify(product.available, product.in_transit, product.minimum_level)
    return ProductRead(
        id=product.id,
        code=product.code,
        description=product.description,
        available=product.available,
        in_transit=product.in_transit,
        minimum_level=product.minimum_level,
        total_stock=result.total_stock,
        status=result.status,
        suggested_order_qty=result.suggested_order_qty,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def annotate_products(products: Iterable[Product]) -> list[ProductRead]:
    return [annotate_product(product) for product in products]


def build_product_query(q: str | None) -> Select[tuple[Product]]:
    stmt = select(Product)

    if q and q.strip():
        text = q.strip()
        stmt = stmt.where(
            Product.code.icontains(text, autoescape=True) | Product.description.icontains(text, autoescape=True)
        )

    return stmt.order_by(Product.code.asc())


def filter_by_status(rows: list[ProductRead], status_filter: StockStatus | None) -> list[ProductRead]:
    if status_filter is None:
        return rows
    return [row for row in rows if row.status == status_filter]


def count_by_status(rows: Iterable[ProductRead]) -> dict[StockStatus, int]:
    counts = Counter(row.status for row in rows)
    return {status: counts.get(status, 0) for status in STATUS_ORDER}


def list_products(db: Session, q: str | None = None, status_filter: StockStatus | None = None) -> list[ProductRead]:
    """Annotated products matching ``q``, optionally narrowed to one status.

    Status is derived per row, so that filter runs after classification
    rather than in SQL.
    """
    rows = annotate_products(db.scalars(build_product_query(q)).all())
    return filter_by_status(rows, status_filter)


def update_minimum_level(db: Session, product: Product, minimum_level: int) -> ProductRead:
    previous = product.minimum_level
    product.minimum_level = minimum_level

    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info("Minimum level for %s changed from %d to %d", product.code, previous, minimum_level)
    return annotate_product(product)
