from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from stockdash.services.classifier import StockStatus

ImportMode = Literal["replace", "upsert"]


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    description: str
    available: int
    in_transit: int
    minimum_level: int
    total_stock: int
    status: StockStatus
    suggested_order_qty: int
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    items: list[ProductRead]
    total: int
    page: int
    page_size: int
    status_counts: dict[StockStatus, int]


class MinimumLevelUpdate(BaseModel):
    minimum_level: int = Field(ge=0, le=1_000_000)


class ProductImportRequest(BaseModel):
    mode: ImportMode = "replace"
    rows: list[dict[str, object]] = Field(default_factory=list, max_length=50_000)


class ProductImportResponse(BaseModel):
    mode: ImportMode
    imported: int
    created: int
    updated: int
    skipped_rows: int
    message: str


class StockSummary(BaseModel):
    total_products: int
    critical: int
    low: int
    attention: int
    ok: int


class StatusSlice(BaseModel):
    status: StockStatus
    count: int


class DashboardResponse(BaseModel):
    summary: StockSummary
    status_distribution: list[StatusSlice]
    lowest_stock: list[ProductRead]
    purchase_suggestions: list[ProductRead]
