"""
Shared FastAPI dependencies.
"""
from typing import Optional

from fastapi import Header, HTTPException, Request

from finance_tracker.pipeline import MerchantCategorizer, ReceiptProcessor


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity, as forwarded by the authenticating gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id.strip()


def get_categorizer(request: Request) -> MerchantCategorizer:
    return request.app.state.categorizer


def get_processor(request: Request) -> ReceiptProcessor:
    return request.app.state.processor
