"""
SQLAlchemy model for uploaded receipts.
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from finance_tracker.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReceiptModel(Base):
    __tablename__ = "receipts"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=False)
    ocr_text = Column(Text, nullable=True)  # null until OCR completes (or fails)
    processed = Column(Boolean, nullable=False, default=False)
    upload_date = Column(DateTime, nullable=False, default=_utcnow)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    transactions = relationship(
        "TransactionModel",
        back_populates="receipt",
        cascade="all, delete-orphan",
    )
