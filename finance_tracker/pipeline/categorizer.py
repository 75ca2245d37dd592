"""
Keyword‑based merchant categorizer.

Maps a free‑text merchant name onto one of a fixed set of spending
categories by lowercase substring matching. Each categorizer owns its own
copy of the keyword table, so custom keywords added at runtime stay local
to that instance. The table may be extended while other threads read it.
"""
from __future__ import annotations

import threading
from typing import Iterable, Mapping

from finance_tracker.schemas import CategorySuggestion

OTHER_CATEGORY = "Other"

# Declaration order is match priority.
DEFAULT_MERCHANT_PATTERNS: dict[str, list[str]] = {
    "Groceries": [
        "walmart", "target", "kroger", "safeway", "whole foods", "trader joe",
        "aldi", "costco", "sam's club", "publix", "wegmans", "albertsons",
        "food lion", "giant", "stop & shop", "harris teeter", "sprouts",
        "fresh market", "grocery", "supermarket", "market",
    ],
    "Dining": [
        "mcdonald", "burger king", "wendy", "taco bell", "chipotle", "subway",
        "starbucks", "dunkin", "panera", "chick-fil-a", "kfc", "pizza hut",
        "domino", "papa john", "olive garden", "applebee", "chili",
        "red lobster", "outback", "texas roadhouse", "restaurant", "cafe",
        "coffee", "diner", "bistro", "grill", "bar & grill", "eatery",
        "food court",
    ],
    "Transportation": [
        "shell", "exxon", "chevron", "bp", "mobil", "texaco", "citgo",
        "sunoco", "uber", "lyft", "taxi", "metro", "transit", "parking",
        "gas station", "fuel", "auto", "car wash", "toll", "bus", "train",
        "subway",
    ],
    "Entertainment": [
        "netflix", "hulu", "disney", "spotify", "apple music", "amazon prime",
        "hbo", "cinema", "theater", "amc", "regal", "movie", "concert",
        "ticketmaster", "steam", "playstation", "xbox", "nintendo", "game",
        "entertainment", "museum", "zoo", "aquarium", "park",
    ],
    "Shopping": [
        "amazon", "ebay", "etsy", "best buy", "apple store", "microsoft store",
        "macy", "nordstrom", "kohl", "jcpenney", "tj maxx", "marshalls",
        "ross", "gap", "old navy", "h&m", "zara", "forever 21",
        "victoria's secret", "bath & body", "bed bath", "home depot", "lowe",
        "ikea", "wayfair", "clothing", "apparel", "fashion",
    ],
    "Utilities": [
        "electric", "power", "gas company", "water", "internet", "cable",
        "phone", "verizon", "at&t", "t-mobile", "sprint", "comcast",
        "spectrum", "utility", "energy", "pg&e", "duke energy", "con edison",
    ],
    "Healthcare": [
        "cvs", "walgreens", "rite aid", "pharmacy", "hospital", "clinic",
        "medical", "doctor", "dentist", "dental", "health", "urgent care",
        "lab", "imaging", "prescription", "medicine",
    ],
}

MATCH_WEIGHT = 30
LENGTH_WEIGHT = 5
MAX_CONFIDENCE = 100


def _normalize(value: str | None) -> str:
    return (value or "").lower().strip()


class MerchantCategorizer:
    """Substring matcher over an ordered ``category -> keywords`` table."""

    def __init__(self, patterns: Mapping[str, Iterable[str]] | None = None):
        source = DEFAULT_MERCHANT_PATTERNS if patterns is None else patterns
        self._lock = threading.Lock()
        self._patterns: dict[str, list[str]] = {}
        for category, keywords in source.items():
            self._patterns[category] = []
            for keyword in keywords:
                self.add_pattern(category, keyword)

    @property
    def categories(self) -> list[str]:
        with self._lock:
            return list(self._patterns)

    def keywords(self, category: str) -> list[str]:
        with self._lock:
            return list(self._patterns.get(category, []))

    def categorize(self, merchant_name: str | None) -> str:
        """Return the first category with a keyword inside *merchant_name*."""
        name = _normalize(merchant_name)
        if not name:
            return OTHER_CATEGORY
        for category, keywords in self._snapshot():
            for keyword in keywords:
                if keyword in name:
                    return category
        return OTHER_CATEGORY

    def suggest(self, merchant_name: str | None) -> list[CategorySuggestion]:
        """Every matching category, highest confidence first.

        ``confidence = min(100, hits * 30 + longest_hit_len * 5)``; ties keep
        declaration order.
        """
        name = _normalize(merchant_name)
        if not name:
            return []

        suggestions: list[CategorySuggestion] = []
        for category, keywords in self._snapshot():
            hits = [kw for kw in keywords if kw in name]
            if not hits:
                continue
            longest = max(len(kw) for kw in hits)
            confidence = min(MAX_CONFIDENCE, len(hits) * MATCH_WEIGHT + longest * LENGTH_WEIGHT)
            suggestions.append(CategorySuggestion(category=category, confidence=confidence))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions

    def add_pattern(self, category: str, keyword: str) -> bool:
        """Register *keyword* under *category*. Returns False for blanks/duplicates."""
        normalized = _normalize(keyword)
        if not normalized:
            return False
        with self._lock:
            keywords = self._patterns.setdefault(category, [])
            if normalized in keywords:
                return False
            keywords.append(normalized)
            return True

    def _snapshot(self) -> list[tuple[str, tuple[str, ...]]]:
        with self._lock:
            return [(category, tuple(keywords)) for category, keywords in self._patterns.items()]
