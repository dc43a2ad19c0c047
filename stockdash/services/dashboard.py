from __future__ import annotations

from collections.abc import Iterable

from stockdash.models import Product
from stockdash.schemas import DashboardResponse, ProductRead, StatusSlice, StockSummary
from stockdash.services.catalog import annotate_products, count_by_status
from stockdash.services.classifier import STATUS_ORDER, StockStatus

LOWEST_STOCK_LIMIT = 10
PURCHASE_SUGGESTION_LIMIT = 20


def lowest_stock(rows: list[ProductRead], limit: int = LOWEST_STOCK_LIMIT) -> list[ProductRead]:
    ranked = sorted(rows, key=lambda row: (row.total_stock, row.code))
    return ranked[:limit]


def purchase_suggestions(rows: list[ProductRead], limit: int = PURCHASE_SUGGESTION_LIMIT) -> list[ProductRead]:
    candidates = [row for row in rows if row.suggested_order_qty > 0]
    candidates.sort(key=lambda row: (-row.suggested_order_qty, row.code))
    return candidates[:limit]


def build_dashboard(
    products: Iterable[Product],
    lowest_limit: int = LOWEST_STOCK_LIMIT,
    suggestion_limit: int = PURCHASE_SUGGESTION_LIMIT,
) -> DashboardResponse:
    rows = annotate_products(products)
    counts = count_by_status(rows)

    summary = StockSummary(
        total_products=len(rows),
        critical=counts[StockStatus.CRITICAL],
        low=counts[StockStatus.LOW],
        attention=counts[StockStatus.ATTENTION],
        ok=counts[StockStatus.OK],
    )
    distribution = [
        StatusSlice(status=status, count=counts[status]) for status in STATUS_ORDER if counts[status] > 0
    ]

    return DashboardResponse(
        summary=summary,
        status_distribution=distribution,
        lowest_stock=lowest_stock(rows, limit=lowest_limit),
        purchase_suggestions=purchase_suggestions(rows, limit=suggestion_limit),
    )
