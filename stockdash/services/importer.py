"""Spreadsheet import: column contract, row normalization and persistence.

Rows arrive already tabulated (first sheet, header row as keys). The
importer only stores raw quantities; status is derived at read time.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import pandas as pd
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockdash.config import get_default_minimum_level
from stockdash.models import Product
from stockdash.services.classifier import coerce_quantity

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, str] = {
    "Product": "code",
    "Product description": "description",
    "Available": "available",
    "In transit": "in_transit",
}
TEXT_FIELDS = ("code", "description")
QUANTITY_FIELDS = ("available", "in_transit")
MAX_QUANTITY = 2**63 - 1

REPLACE = "replace"
UPSERT = "upsert"


class ImportValidationError(ValueError):
    pass


@dataclass
class ImportResult:
    mode: str
    imported: int
    created: int
    updated: int
    skipped_rows: int

    @property
    def message(self) -> str:
        return f"Spreadsheet processed successfully! {self.imported} products imported."


def _clean_text(value: object) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _column_for(field: str) -> str:
    return next(column for column, name in REQUIRED_COLUMNS.items() if name == field)


def missing_columns(first_row: Mapping[str, object]) -> list[str]:
    return [column for column in REQUIRED_COLUMNS if column not in first_row]


def normalize_rows(rows: Sequence[Mapping[str, object]]) -> tuple[pd.DataFrame, int]:
    """Validate the column contract and return clean rows plus the skipped count.

    Blank rows (no code or no description) are dropped. When a code repeats,
    the last occurrence wins.
    """
    if not rows:
        raise ImportValidationError("The spreadsheet is empty")

    missing = missing_columns(rows[0])
    if missing:
        raise ImportValidationError(f"Required columns not found: {', '.join(missing)}")

    frame = pd.DataFrame(list(rows), dtype=object)
    frame = frame.reindex(columns=list(REQUIRED_COLUMNS)).rename(columns=REQUIRED_COLUMNS)

    for field in TEXT_FIELDS:
        frame[field] = frame[field].map(_clean_text)
    for field in QUANTITY_FIELDS:
        quantities = frame[field].map(coerce_quantity)
        if any(quantity > MAX_QUANTITY for quantity in quantities):
            raise ImportValidationError(f"Quantity out of range in column {_column_for(field)}")
        frame[field] = quantities.astype("int64")

    valid = (frame["code"] != "") & (frame["description"] != "")
    skipped = int((~valid).sum())
    frame = frame[valid]

    duplicates = frame.duplicated(subset="code", keep="last")
    if duplicates.any():
        logger.warning(
            "Duplicate product codes in upload, keeping last occurrence: %s",
            sorted(set(frame.loc[duplicates, "code"])),
        )
        frame = frame[~duplicates]

    if frame.empty:
        raise ImportValidationError("No valid products found in the spreadsheet")

    return frame.reset_index(drop=True), skipped


def import_products(
    db: Session,
    rows: Sequence[Mapping[str, object]],
    mode: str = REPLACE,
    default_minimum_level: int | None = None,
) -> ImportResult:
    if mode not in {REPLACE, UPSERT}:
        raise ImportValidationError(f"Unknown import mode: {mode}")

    frame, skipped = normalize_rows(rows)
    records = frame.to_dict("records")
    minimum_level = get_default_minimum_level() if default_minimum_level is None else default_minimum_level

    created = 0
    updated = 0
    try:
        if mode == REPLACE:
            db.execute(delete(Product))
            existing: dict[str, Product] = {}
        else:
            existing = {product.code: product for product in db.scalars(select(Product)).all()}

        for record in records:
            product = existing.get(record["code"])
            if product is None:
                db.add(
                    Product(
                        code=record["code"],
                        description=record["description"],
                        available=int(record["available"]),
                        in_transit=int(record["in_transit"]),
                        minimum_level=minimum_level,
                    )
                )
                created += 1
            else:
                product.description = record["description"]
                product.available = int(record["available"])
                product.in_transit = int(record["in_transit"])
                db.add(product)
                updated += 1

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Product import failed, rolled back (%s mode, %d rows)", mode, len(records))
        raise

    result = ImportResult(
        mode=mode,
        imported=len(records),
        created=created,
        updated=updated,
        skipped_rows=skipped,
    )
    logger.info(
        "Imported %d products (%s mode): %d created, %d updated, %d rows skipped",
        result.imported,
        mode,
        created,
        updated,
        skipped,
    )
    return result
