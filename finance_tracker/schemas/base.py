"""
Pydantic v2 models shared by the receipt pipeline and the HTTP API.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Largest value the transactions.amount column (NUMERIC(10, 2)) holds
MAX_TRANSACTION_AMOUNT = Decimal("99999999.99")


# ---------------------------------------------------------------------------
# OCR / parsing
# ---------------------------------------------------------------------------

class OCRResult(BaseModel):
    """Raw engine output: text plus the engine-reported confidence (0-100)."""
    text: str
    confidence: float = 0.0


class LineItem(BaseModel):
    name: str
    price: Decimal


class ParsedReceiptData(BaseModel):
    """Structured fields recovered from receipt text. Never persisted."""
    merchant_name: Optional[str] = None
    total_amount: Optional[Decimal] = Field(
        None, description="Positive amount, absent when nothing usable was found"
    )
    transaction_date: str = Field(..., description="YYYY-MM-DD, today when no date was found")
    items: list[LineItem] = Field(default_factory=list)


class CategorySuggestion(BaseModel):
    category: str
    confidence: int = Field(..., ge=0, le=100)


# ---------------------------------------------------------------------------
# Persistence payloads
# ---------------------------------------------------------------------------

class TransactionCreate(BaseModel):
    user_id: str
    receipt_id: Optional[str] = None
    category_id: Optional[str] = None
    merchant_name: str
    amount: Decimal = Field(..., gt=0, le=MAX_TRANSACTION_AMOUNT)
    transaction_date: str
    description: Optional[str] = None
    payment_method: Optional[str] = None


# ---------------------------------------------------------------------------
# API request / response envelopes
# ---------------------------------------------------------------------------

class ReceiptUploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    image_url: str
    upload_date: datetime
    processed: bool


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    receipt_id: Optional[str] = None
    category_id: Optional[str] = None
    merchant_name: str
    amount: Decimal
    transaction_date: date
    description: Optional[str] = None
    payment_method: Optional[str] = None


class ReceiptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    image_url: str
    upload_date: datetime
    ocr_text: Optional[str] = None
    processed: bool
    created_at: datetime
    transactions: list[TransactionResponse] = Field(default_factory=list)


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ReceiptListResponse(BaseModel):
    receipts: list[ReceiptResponse]
    pagination: Pagination


class PatternCreate(BaseModel):
    category: str = Field(..., min_length=1)
    keyword: str = Field(..., min_length=1)
