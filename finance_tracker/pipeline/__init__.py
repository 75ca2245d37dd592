"""
Receipt-to-transaction pipeline.

extract text (OCR) → parse fields → categorize merchant → create transaction.
"""
from finance_tracker.pipeline.categorizer import (
    DEFAULT_MERCHANT_PATTERNS,
    OTHER_CATEGORY,
    MerchantCategorizer,
)
from finance_tracker.pipeline.extractor import (
    ExtractionError,
    TesseractExtractor,
    TextExtractor,
    build_extractor,
)
from finance_tracker.pipeline.orchestrator import ReceiptProcessor
from finance_tracker.pipeline.parser import parse_receipt
from finance_tracker.pipeline.store import ReceiptStore, SqlReceiptStore

__all__ = [
    "DEFAULT_MERCHANT_PATTERNS",
    "OTHER_CATEGORY",
    "ExtractionError",
    "MerchantCategorizer",
    "ReceiptProcessor",
    "ReceiptStore",
    "SqlReceiptStore",
    "TesseractExtractor",
    "TextExtractor",
    "build_extractor",
    "parse_receipt",
]
