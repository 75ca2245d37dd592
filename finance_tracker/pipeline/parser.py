"""
Rule‑based receipt field parser.

Turns raw OCR text into merchant, total amount, date and line items.
Every function here is pure and never raises: a field that cannot be
recovered comes back as ``None`` (or today's date, for the date).
"""
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from finance_tracker.schemas import LineItem, ParsedReceiptData

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_AMOUNT = r"(\d+[.,]\d{2})"

# Labeled totals, tried in priority order
TOTAL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"total[:\s]*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"amount[:\s]*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"balance[:\s]*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"grand\s*total[:\s]*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\$\s*" + _AMOUNT + r"\s*total", re.IGNORECASE),
]

_BARE_AMOUNT = re.compile(r"\$?\s*" + _AMOUNT)

DATE_PATTERNS: list[re.Pattern[str]] = [
    # MM/DD/YYYY or MM-DD-YYYY
    re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})"),
    # same, 2-4 digit year
    re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})"),
    # YYYY-MM-DD
    re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})"),
    # Month DD, YYYY
    re.compile(
        r"(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\s+(\d{1,2}),?\s+(\d{4})",
        re.IGNORECASE,
    ),
]

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_LINE_ITEM = re.compile(r"(.+?)\s+\$?\s*" + _AMOUNT)
ITEM_EXCLUDED_WORDS = ("total", "subtotal", "tax")

_MERCHANT_WORD = re.compile(r"[a-zA-Z]{3,}")
_MERCHANT_JUNK = re.compile(r"[^a-zA-Z0-9\s&'-]")
MERCHANT_SCAN_LINES = 3


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def _to_decimal(raw: str) -> Decimal | None:
    try:
        return Decimal(raw.replace(",", "."))
    except InvalidOperation:
        return None


def _to_amount(raw: str) -> Decimal | None:
    """Positive amount or None."""
    value = _to_decimal(raw)
    if value is None or not value.is_finite() or value <= 0:
        return None
    return value


def _date_from_match(match: re.Match[str]) -> str | None:
    first, second, third = match.groups()
    try:
        if first.isalpha():
            month = MONTHS[first[:3].lower()]
            day = int(second)
            year = int(third)
        elif len(first) == 4:
            year, month, day = int(first), int(second), int(third)
        else:
            # US convention
            month, day, year = int(first), int(second), int(third)
            if year < 100:
                year += 2000
    except (KeyError, ValueError):
        return None

    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def extract_merchant_name(lines: list[str]) -> str | None:
    """First of the top three lines that looks like a name, cleaned."""
    for line in lines[:MERCHANT_SCAN_LINES]:
        line = line.strip()
        if len(line) > 3 and _MERCHANT_WORD.search(line):
            return _MERCHANT_JUNK.sub("", line).strip()
    return None


def extract_total_amount(text: str) -> Decimal | None:
    """Labeled total first, else the largest two-decimal amount in the text."""
    for pattern in TOTAL_PATTERNS:
        match = pattern.search(text)
        if match:
            amount = _to_amount(match.group(1))
            if amount is not None:
                return amount

    candidates = [_to_amount(raw) for raw in _BARE_AMOUNT.findall(text)]
    amounts = [a for a in candidates if a is not None]
    return max(amounts) if amounts else None


def extract_date(text: str, today: date | None = None) -> str:
    """Return ``YYYY-MM-DD``; falls back to *today* when nothing matches.

    Only the first match of each pattern is considered.
    """
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            parsed = _date_from_match(match)
            if parsed is not None:
                return parsed
    return (today or date.today()).isoformat()


def extract_line_items(lines: list[str]) -> list[LineItem]:
    items: list[LineItem] = []
    for line in lines:
        match = _LINE_ITEM.fullmatch(line.strip())
        if not match:
            continue
        name = match.group(1).strip()
        lowered = name.lower()
        if len(name) <= 2 or any(word in lowered for word in ITEM_EXCLUDED_WORDS):
            continue
        price = _to_decimal(match.group(2))
        if price is None:
            continue
        items.append(LineItem(name=name, price=price))
    return items


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_receipt(text: str, today: date | None = None) -> ParsedReceiptData:
    """Parse raw OCR *text* into :class:`ParsedReceiptData`."""
    text = text or ""
    lines = _split_lines(text)
    return ParsedReceiptData(
        merchant_name=extract_merchant_name(lines),
        total_amount=extract_total_amount(text),
        transaction_date=extract_date(text, today),
        items=extract_line_items(lines),
    )
