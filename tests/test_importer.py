import logging

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from stockdash.database import SessionLocal
from stockdash.models import Product
from stockdash.services.importer import (
    ImportValidationError,
    import_products,
    missing_columns,
    normalize_rows,
)


def _products(db) -> dict[str, Product]:
    return {product.code: product for product in db.scalars(select(Product)).all()}


def test_empty_upload_is_rejected() -> None:
    with pytest.raises(ImportValidationError, match="empty"):
        normalize_rows([])


def test_missing_columns_are_listed_in_contract_order() -> None:
    row = {"Product": "X", "Available": 1}
    assert missing_columns(row) == ["Product description", "In transit"]
    with pytest.raises(ImportValidationError, match="Product description, In transit"):
        normalize_rows([row])


def test_blank_rows_are_skipped(sheet_rows) -> None:
    rows = sheet_rows + [
        {"Product": "  ", "Product description": "No code", "Available": 1, "In transit": 0},
        {"Product": "B-1", "Product description": None, "Available": 1, "In transit": 0},
    ]
    frame, skipped = normalize_rows(rows)
    assert skipped == 2
    assert list(frame["code"]) == ["A-100", "A-200", "A-300"]


def test_quantities_are_coerced(sheet_rows) -> None:
    frame, _ = normalize_rows(sheet_rows)
    records = {row["code"]: row for row in frame.to_dict("records")}
    assert records["A-200"]["available"] == 12
    assert records["A-200"]["in_transit"] == 0


def test_numeric_codes_keep_integer_text() -> None:
    frame, _ = normalize_rows(
        [{"Product": 1001.0, "Product description": " Hinge ", "Available": 1, "In transit": 0}]
    )
    assert frame.loc[0, "code"] == "1001"
    assert frame.loc[0, "description"] == "Hinge"


def test_only_invalid_rows_is_rejected() -> None:
    with pytest.raises(ImportValidationError, match="No valid products"):
        normalize_rows([{"Product": "", "Product description": "", "Available": 1, "In transit": 1}])


def test_duplicate_codes_keep_last_row(sheet_rows) -> None:
    rows = sheet_rows + [{"Product": "A-100", "Product description": "Cable Ties XL", "Available": 9, "In transit": 0}]
    frame, _ = normalize_rows(rows)
    assert len(frame) == 3
    tie = frame[frame["code"] == "A-100"].iloc[0]
    assert tie["description"] == "Cable Ties XL"
    assert tie["available"] == 9


def test_replace_mode_replaces_whole_table(db, sheet_rows) -> None:
    result = import_products(db, sheet_rows)
    assert result.mode == "replace"
    assert result.imported == 3
    assert result.created == 3
    assert result.updated == 0
    assert "3 products imported" in result.message

    stored = _products(db)
    assert set(stored) == {"A-100", "A-200", "A-300"}
    assert all(product.minimum_level == 5 for product in stored.values())


def test_upsert_mode_keeps_minimum_level_and_other_products(db) -> None:
    monitor = _products(db)["ELEC-1001"]
    monitor.minimum_level = 50
    db.commit()

    result = import_products(
        db,
        [
            {"Product": "ELEC-1001", "Product description": "27-inch Monitor v2", "Available": 7, "In transit": 3},
            {"Product": "NEW-1", "Product description": "New Thing", "Available": 1, "In transit": 0},
        ],
        mode="upsert",
    )
    assert result.created == 1
    assert result.updated == 1

    db.expire_all()
    stored = _products(db)
    assert stored["ELEC-1001"].minimum_level == 50
    assert stored["ELEC-1001"].available == 7
    assert stored["ELEC-1001"].description == "27-inch Monitor v2"
    assert stored["NEW-1"].minimum_level == 5
    assert "OFF-2001" in stored


def test_default_minimum_level_from_environment(db, sheet_rows, monkeypatch) -> None:
    monkeypatch.setenv("STOCKDASH_DEFAULT_MINIMUM_LEVEL", "8")
    import_products(db, sheet_rows)
    assert {product.minimum_level for product in _products(db).values()} == {8}


def test_invalid_default_minimum_level_environment(db, sheet_rows, monkeypatch) -> None:
    monkeypatch.setenv("STOCKDASH_DEFAULT_MINIMUM_LEVEL", "lots")
    with pytest.raises(RuntimeError):
        import_products(db, sheet_rows)


def test_unknown_mode_is_rejected(db, sheet_rows) -> None:
    with pytest.raises(ImportValidationError, match="Unknown import mode"):
        import_products(db, sheet_rows, mode="merge")


def test_quantity_text_uses_leading_integer() -> None:
    frame, _ = normalize_rows(
        [{"Product": "U-1", "Product description": "Screws", "Available": "12 un", "In transit": "3 boxes"}]
    )
    assert frame.loc[0, "available"] == 12
    assert frame.loc[0, "in_transit"] == 3


def test_quantity_out_of_range_is_rejected() -> None:
    row = {"Product": "Z", "Product description": "Big", "Available": 0, "In transit": 10**19}
    with pytest.raises(ImportValidationError, match="Quantity out of range in column In transit"):
        normalize_rows([row])


def test_storage_failure_rolls_back_replace(db, sheet_rows, monkeypatch, caplog) -> None:
    def failing_commit() -> None:
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db, "commit", failing_commit)

    with caplog.at_level(logging.ERROR, logger="stockdash.services.importer"):
        with pytest.raises(SQLAlchemyError, match="disk full"):
            import_products(db, sheet_rows)

    assert "Product import failed, rolled back" in caplog.text
    with SessionLocal() as fresh:
        stored = _products(fresh)
    assert len(stored) == 8
    assert "A-100" not in stored
