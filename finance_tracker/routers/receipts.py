"""
Receipt API endpoints.

POST   /api/receipts/upload      — store file, schedule OCR processing
GET    /api/receipts             — list the caller's receipts
GET    /api/receipts/{id}        — get one receipt (with derived transaction)
DELETE /api/receipts/{id}        — delete receipt, file and derived transaction
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    HTTPException,
    Query,
    UploadFile,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_tracker.database import get_db
from finance_tracker.dependencies import get_current_user_id, get_processor
from finance_tracker.models import ReceiptModel
from finance_tracker.pipeline import ReceiptProcessor
from finance_tracker.schemas import (
    Pagination,
    ReceiptListResponse,
    ReceiptResponse,
    ReceiptUploadResponse,
)
from finance_tracker.storage import delete_file, get_file_path, get_file_url, save_upload

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_owned_receipt(db: Session, receipt_id: str, user_id: str) -> ReceiptModel:
    row = db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id).first()
    if not row:
        logger.warning("Receipt not found: %s", receipt_id)
        raise HTTPException(status_code=404, detail="Receipt not found")
    if row.user_id != user_id:
        raise HTTPException(status_code=403, detail="This receipt does not belong to you")
    return row


# ── POST /api/receipts/upload ────────────────────────────────────────────
@router.post("/receipts/upload", response_model=ReceiptUploadResponse, status_code=201)
def upload_receipt(
    background_tasks: BackgroundTasks,
    receipt: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    processor: ReceiptProcessor = Depends(get_processor),
):
    if receipt is None or not receipt.filename:
        raise HTTPException(status_code=400, detail="No file uploaded. Please upload a receipt image.")

    filename = save_upload(receipt)
    record = ReceiptModel(
        id=str(uuid.uuid4()),
        user_id=user_id,
        image_url=get_file_url(filename),
        ocr_text=None,
        processed=False,
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        delete_file(filename)
        logger.error("Failed to store receipt for user %s: %s", user_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to upload receipt")

    logger.info("Receipt %s uploaded by user %s: %s", record.id, user_id, filename)
    # runs after the response has been sent
    background_tasks.add_task(processor.process, record.id, user_id, str(get_file_path(filename)))
    return ReceiptUploadResponse.model_validate(record)


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=ReceiptListResponse)
def list_receipts(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    processed: Optional[bool] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    query = db.query(ReceiptModel).filter(ReceiptModel.user_id == user_id)
    if processed is not None:
        query = query.filter(ReceiptModel.processed == processed)

    total = query.count()
    rows = (
        query.order_by(ReceiptModel.upload_date.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    logger.info("Found %d receipts for user %s", len(rows), user_id)
    return ReceiptListResponse(
        receipts=[ReceiptResponse.model_validate(r) for r in rows],
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(rows) < total,
        ),
    )


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=ReceiptResponse)
def get_receipt(
    receipt_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return ReceiptResponse.model_validate(_get_owned_receipt(db, receipt_id, user_id))


# ── DELETE /api/receipts/{receipt_id} ────────────────────────────────────
@router.delete("/receipts/{receipt_id}")
def delete_receipt(
    receipt_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    row = _get_owned_receipt(db, receipt_id, user_id)
    delete_file(row.image_url.rsplit("/", 1)[-1])
    transaction_count = len(row.transactions)
    db.delete(row)
    db.commit()
    logger.info(
        "Deleted receipt %s and %d transaction(s) for user %s",
        receipt_id, transaction_count, user_id,
    )
    return {"message": "Receipt deleted successfully", "receipt_id": receipt_id}
