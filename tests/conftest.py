from collections.abc import Iterator
import os
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

os.environ["DATABASE_URL"] = "sqlite:///./test_stockdash.db"
os.environ.pop("STOCKDASH_DEFAULT_MINIMUM_LEVEL", None)

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stockdash.database import Base, SessionLocal, engine  # noqa: E402
from stockdash.main import app  # noqa: E402
from stockdash.seed import run_seed  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    run_seed()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db() -> Iterator[Session]:
    with SessionLocal() as session:
        yield session


@pytest.fixture
def sheet_rows() -> list[dict[str, object]]:
    return [
        {"Product": "A-100", "Product description": "Cable Ties", "Available": 3, "In transit": 2},
        {"Product": "A-200", "Product description": "Duct Tape", "Available": "12", "In transit": None},
        {"Product": "A-300", "Product description": "Zip Bags", "Available": 0, "In transit": 0},
    ]
