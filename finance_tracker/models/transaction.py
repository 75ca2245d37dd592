"""
SQLAlchemy model for spending transactions.
"""
from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from finance_tracker.database import Base
from finance_tracker.models.receipt import _utcnow


class TransactionModel(Base):
    __tablename__ = "transactions"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),)

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    receipt_id = Column(
        String, ForeignKey("receipts.id", ondelete="CASCADE"), nullable=True, index=True
    )
    category_id = Column(
        String, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    merchant_name = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    transaction_date = Column(Date, nullable=False)
    description = Column(Text)
    payment_method = Column(String)  # cash, credit, debit, ...
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    receipt = relationship("ReceiptModel", back_populates="transactions")
    category = relationship("CategoryModel")
