"""
Merchant categorization endpoints.

GET  /api/categorization/categories   — categories the matcher knows
GET  /api/categorization/suggest      — ranked guesses for a merchant name
POST /api/categorization/patterns     — add a keyword to a category
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from finance_tracker.dependencies import get_categorizer, get_current_user_id
from finance_tracker.pipeline import MerchantCategorizer
from finance_tracker.schemas import CategorySuggestion, PatternCreate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/categorization/categories")
def list_categories(categorizer: MerchantCategorizer = Depends(get_categorizer)):
    return {"categories": categorizer.categories}


@router.get("/categorization/suggest")
def suggest_categories(
    merchant: str = Query(..., min_length=1),
    categorizer: MerchantCategorizer = Depends(get_categorizer),
):
    suggestions: list[CategorySuggestion] = categorizer.suggest(merchant)
    return {
        "merchant": merchant,
        "category": categorizer.categorize(merchant),
        "suggestions": [s.model_dump() for s in suggestions],
    }


@router.post("/categorization/patterns", status_code=201)
def add_pattern(
    req: PatternCreate,
    user_id: str = Depends(get_current_user_id),
    categorizer: MerchantCategorizer = Depends(get_categorizer),
):
    added = categorizer.add_pattern(req.category, req.keyword)
    logger.info(
        "User %s %s keyword '%s' for %s",
        user_id, "added" if added else "re-submitted", req.keyword, req.category,
    )
    return {"category": req.category, "keywords": categorizer.keywords(req.category), "added": added}
