"""
Persistence used by the receipt processor.

The processor runs outside any request, so every call opens and closes its
own short-lived session.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from finance_tracker.models import CategoryModel, ReceiptModel, TransactionModel
from finance_tracker.schemas import TransactionCreate


class ReceiptStore(ABC):
    @abstractmethod
    def update_receipt(self, receipt_id: str, ocr_text: Optional[str], processed: bool) -> None:
        ...

    @abstractmethod
    def create_transaction(self, data: TransactionCreate) -> str:
        """Insert a transaction and return its id."""

    @abstractmethod
    def find_category_by_name(self, user_id: str, name: str) -> Optional[str]:
        """Id of the user's category called *name* (case-insensitive), if any."""


class SqlReceiptStore(ReceiptStore):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def update_receipt(self, receipt_id: str, ocr_text: Optional[str], processed: bool) -> None:
        with self._session() as db:
            row = db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id).first()
            if row is None:
                raise LookupError(f"Receipt not found: {receipt_id}")
            row.ocr_text = ocr_text
            row.processed = processed

    def create_transaction(self, data: TransactionCreate) -> str:
        transaction_id = str(uuid.uuid4())
        record = TransactionModel(
            id=transaction_id,
            user_id=data.user_id,
            receipt_id=data.receipt_id,
            category_id=data.category_id,
            merchant_name=data.merchant_name,
            amount=data.amount,
            # range-checked only by the parser, so e.g. 2024-02-31 fails here
            transaction_date=date.fromisoformat(data.transaction_date),
            description=data.description,
            payment_method=data.payment_method,
        )
        with self._session() as db:
            db.add(record)
        return transaction_id

    def find_category_by_name(self, user_id: str, name: str) -> Optional[str]:
        with self._session() as db:
            row = (
                db.query(CategoryModel.id)
                .filter(
                    CategoryModel.user_id == user_id,
                    func.lower(CategoryModel.name) == name.lower(),
                )
                .first()
            )
            return row[0] if row else None
