from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from stockdash.config import configure_logging, ensure_config
from stockdash.database import Base, engine, get_db
from stockdash.models import Product
from stockdash.schemas import (
    DashboardResponse,
    MinimumLevelUpdate,
    ProductImportRequest,
    ProductImportResponse,
    ProductListResponse,
    ProductRead,
)
from stockdash.services.catalog import (
    annotate_product,
    count_by_status,
    list_products as query_products,
    update_minimum_level as apply_minimum_level,
)
from stockdash.services.classifier import StockStatus
from stockdash.services.dashboard import LOWEST_STOCK_LIMIT, PURCHASE_SUGGESTION_LIMIT, build_dashboard
from stockdash.services.importer import ImportValidationError, import_products

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_config()
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("Stock dashboard started")
    yield


app = FastAPI(
    title="Stock Dashboard",
    version="1.0.0",
    description="Stock levels import, status dashboard and purchase suggestions.",
    lifespan=lifespan,
)


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/products/import", response_model=ProductImportResponse)
def import_spreadsheet(payload: ProductImportRequest, db: Session = Depends(get_db)) -> ProductImportResponse:
    try:
        result = import_products(db, payload.rows, mode=payload.mode)
    except ImportValidationError as exc:
        logger.warning("Rejected spreadsheet import: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return ProductImportResponse(
        mode=payload.mode,
        imported=result.imported,
        created=result.created,
        updated=result.updated,
        skipped_rows=result.skipped_rows,
        message=result.message,
    )


@app.get("/api/dashboard", response_model=DashboardResponse)
def dashboard(
    lowest_limit: int = Query(default=LOWEST_STOCK_LIMIT, ge=1, le=100),
    suggestion_limit: int = Query(default=PURCHASE_SUGGESTION_LIMIT, ge=1, le=200),
    db: Session = Depends(get_db),
) -> DashboardResponse:
    products = db.scalars(select(Product)).all()
    return build_dashboard(products, lowest_limit=lowest_limit, suggestion_limit=suggestion_limit)


@app.get("/api/products", response_model=ProductListResponse)
def list_products(
    q: str | None = Query(default=None),
    status_filter: StockStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> ProductListResponse:
    rows = query_products(db, q=q, status_filter=status_filter)
    start = (page - 1) * page_size

    return ProductListResponse(
        items=rows[start : start + page_size],
        total=len(rows),
        page=page,
        page_size=page_size,
        status_counts=count_by_status(rows),
    )


@app.get("/api/products/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)) -> ProductRead:
    return annotate_product(_get_product_or_404(db, product_id))


@app.patch("/api/products/{product_id}/minimum-level", response_model=ProductRead)
def update_minimum_level(
    product_id: int,
    payload: MinimumLevelUpdate,
    db: Session = Depends(get_db),
) -> ProductRead:
    product = _get_product_or_404(db, product_id)
    return apply_minimum_level(db, product, payload.minimum_level)
