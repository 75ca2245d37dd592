"""
Receipt processing: OCR → parse → categorize → transaction.

Runs detached from the upload request. A run always ends with the receipt
marked processed, whatever happens in between, so a bad receipt is never
picked up again.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from finance_tracker.pipeline.categorizer import MerchantCategorizer
from finance_tracker.pipeline.extractor import ExtractionError, TextExtractor
from finance_tracker.pipeline.parser import parse_receipt
from finance_tracker.pipeline.store import ReceiptStore
from finance_tracker.schemas import MAX_TRANSACTION_AMOUNT, ParsedReceiptData, TransactionCreate

logger = logging.getLogger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"


def build_description(parsed: ParsedReceiptData) -> str:
    return f"Auto-created from receipt ({len(parsed.items)} items)"


class ReceiptProcessor:
    def __init__(
        self,
        extractor: TextExtractor,
        store: ReceiptStore,
        categorizer: MerchantCategorizer | None = None,
    ):
        self.extractor = extractor
        self.store = store
        self.categorizer = categorizer or MerchantCategorizer()

    def process(self, receipt_id: str, user_id: str, file_path: str | Path) -> None:
        """Fire-and-forget entry point. Never raises."""
        logger.info("Processing receipt %s", receipt_id)
        ocr_text: Optional[str] = None
        marked = False
        try:
            try:
                result = self.extractor.extract_text(file_path)
            except ExtractionError as e:
                logger.warning("OCR failed for receipt %s: %s", receipt_id, e)
                return
            ocr_text = result.text
            logger.info(
                "OCR extracted %d characters with %.1f%% confidence",
                len(ocr_text), result.confidence,
            )

            parsed = parse_receipt(ocr_text)
            logger.info(
                "Parsed receipt %s: merchant=%s amount=%s date=%s items=%d",
                receipt_id, parsed.merchant_name, parsed.total_amount,
                parsed.transaction_date, len(parsed.items),
            )

            self.store.update_receipt(receipt_id, ocr_text=ocr_text, processed=True)
            marked = True

            if parsed.total_amount is None or parsed.total_amount <= 0:
                logger.info("No usable total on receipt %s, skipping transaction", receipt_id)
                return
            if parsed.total_amount > MAX_TRANSACTION_AMOUNT:
                logger.warning(
                    "Total %s on receipt %s exceeds %s, skipping transaction",
                    parsed.total_amount, receipt_id, MAX_TRANSACTION_AMOUNT,
                )
                return

            transaction_id = self.store.create_transaction(
                self.build_transaction(receipt_id, user_id, parsed)
            )
            logger.info(
                "Transaction %s created for receipt %s (%s)",
                transaction_id, receipt_id, parsed.total_amount,
            )
        except Exception as e:
            logger.error("Error processing receipt %s: %s", receipt_id, e, exc_info=True)
        finally:
            if not marked:
                self._mark_processed(receipt_id, ocr_text)

    def build_transaction(
        self, receipt_id: str, user_id: str, parsed: ParsedReceiptData
    ) -> TransactionCreate:
        category_id = None
        if parsed.merchant_name:
            category_name = self.categorizer.categorize(parsed.merchant_name)
            category_id = self.store.find_category_by_name(user_id, category_name)
            if category_id is None:
                logger.info("User %s has no '%s' category", user_id, category_name)

        return TransactionCreate(
            user_id=user_id,
            receipt_id=receipt_id,
            category_id=category_id,
            merchant_name=parsed.merchant_name or UNKNOWN_MERCHANT,
            amount=parsed.total_amount,
            transaction_date=parsed.transaction_date,
            description=build_description(parsed),
            payment_method=None,
        )

    def _mark_processed(self, receipt_id: str, ocr_text: Optional[str]) -> None:
        try:
            self.store.update_receipt(receipt_id, ocr_text=ocr_text, processed=True)
        except Exception as e:
            logger.error("Failed to mark receipt %s processed: %s", receipt_id, e, exc_info=True)
