"""
Shared pytest fixtures: in-memory SQLite, a fake OCR engine and the FastAPI TestClient.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import uuid  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from finance_tracker.config import settings  # noqa: E402
from finance_tracker.database import Base, get_db  # noqa: E402
from finance_tracker.dependencies import get_categorizer, get_processor  # noqa: E402
from finance_tracker.main import app  # noqa: E402
from finance_tracker.models import CategoryModel, ReceiptModel  # noqa: E402
from finance_tracker.pipeline import (  # noqa: E402
    MerchantCategorizer,
    ReceiptProcessor,
    SqlReceiptStore,
    TextExtractor,
)
from finance_tracker.schemas import OCRResult  # noqa: E402

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)

USER_ID = "user-1"

WALMART_TEXT = (
    "WALMART\n"
    "123 Main St\n"
    "Milk 3.50\n"
    "Bread 2.20\n"
    "Total: $5.70\n"
    "01/15/2024"
)


class FakeExtractor(TextExtractor):
    """Returns canned text, or raises ``error`` when set."""

    def __init__(self, text: str = WALMART_TEXT, confidence: float = 91.5):
        self.text = text
        self.confidence = confidence
        self.error: Exception | None = None
        self.calls: list[str] = []

    def extract_text(self, path):
        self.calls.append(str(path))
        if self.error is not None:
            raise self.error
        return OCRResult(text=self.text, confidence=self.confidence)


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture(autouse=True)
def _upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))


@pytest.fixture()
def session_factory():
    return _Session


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def extractor():
    return FakeExtractor()


@pytest.fixture()
def categorizer():
    return MerchantCategorizer()


@pytest.fixture()
def processor(extractor, categorizer):
    return ReceiptProcessor(extractor, SqlReceiptStore(_Session), categorizer)


@pytest.fixture()
def make_receipt(db):
    def _make(user_id: str = USER_ID) -> str:
        receipt_id = str(uuid.uuid4())
        db.add(ReceiptModel(id=receipt_id, user_id=user_id, image_url=f"/uploads/receipts/{receipt_id}.png"))
        db.commit()
        return receipt_id

    return _make


@pytest.fixture()
def make_category(db):
    def _make(name: str, user_id: str = USER_ID) -> str:
        category_id = str(uuid.uuid4())
        db.add(CategoryModel(id=category_id, user_id=user_id, name=name))
        db.commit()
        return category_id

    return _make


@pytest.fixture()
def client(processor, categorizer):
    def _override():
        session = _Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_processor] = lambda: processor
    app.dependency_overrides[get_categorizer] = lambda: categorizer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
