from finance_tracker.schemas.base import (
    MAX_TRANSACTION_AMOUNT,
    CategorySuggestion,
    LineItem,
    OCRResult,
    Pagination,
    ParsedReceiptData,
    PatternCreate,
    ReceiptListResponse,
    ReceiptResponse,
    ReceiptUploadResponse,
    TransactionCreate,
    TransactionResponse,
)

__all__ = [
    "MAX_TRANSACTION_AMOUNT",
    "CategorySuggestion",
    "LineItem",
    "OCRResult",
    "Pagination",
    "ParsedReceiptData",
    "PatternCreate",
    "ReceiptListResponse",
    "ReceiptResponse",
    "ReceiptUploadResponse",
    "TransactionCreate",
    "TransactionResponse",
]
