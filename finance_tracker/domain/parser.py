"""Heuristic natural-language transaction parser"""

import re
from decimal import Decimal
from typing import Optional, Protocol, Tuple

from finance_tracker.domain.categories import (
    CATEGORY_KEYWORDS,
    INCOME_CATEGORY,
    INCOME_KEYWORDS,
    OTHER_CATEGORY,
)
from finance_tracker.domain.models import EXPENSE, INCOME, ParsedTransaction

AMOUNT_PATTERN = re.compile(r"\$?(\d+(?:\.\d{2})?)")
DASH_PATTERN = re.compile(r"[-–—]")
WHITESPACE_PATTERN = re.compile(r"\s+")

INCOME_CONFIDENCE = 0.95
KEYWORD_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.6
DEFAULT_DESCRIPTION = "Transaction"


class TransactionParser(Protocol):
    """Anything that turns free text into a ParsedTransaction"""

    name: str

    async def parse(self, text: str) -> ParsedTransaction:
        ...


def extract_amount(text: str) -> Decimal:
    """First integer or two-decimal number in the text, optionally prefixed by $"""
    match = AMOUNT_PATTERN.search(text)
    return Decimal(match.group(1)) if match else Decimal("0")


def is_income_text(lowered: str) -> bool:
    return any(keyword in lowered for keyword in INCOME_KEYWORDS)


def match_category(lowered: str) -> Tuple[Optional[str], str]:
    """
    Look the text up in the ordered keyword table.

    Returns:
        (matched keyword or None, category)
    """
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in lowered:
            return keyword, category
    return None, OTHER_CATEGORY


def clean_description(text: str, keyword: Optional[str] = None) -> str:
    """
    Strip amounts, dashes and the category keyword, then case-normalize.

    Example:
        "Coffee at Starbucks $6.50" with keyword "coffee" -> "At starbucks"
    """
    cleaned = AMOUNT_PATTERN.sub("", text)
    cleaned = DASH_PATTERN.sub("", cleaned)
    if keyword:
        cleaned = re.sub(rf"\b{re.escape(keyword)}\b", "", cleaned, count=1, flags=re.IGNORECASE)
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    return cleaned.capitalize() if cleaned else DEFAULT_DESCRIPTION


def parse_transaction_text(text: str) -> ParsedTransaction:
    """
    Best-effort guess at a transaction from free text. Never raises.

    Rules:
    - Income keywords always win over the category table (confidence 0.95)
    - Otherwise first matching category keyword (confidence 0.9)
    - Otherwise "Other" (confidence 0.6)
    """
    text = text or ""
    lowered = text.lower()

    amount = extract_amount(lowered)
    keyword, category = match_category(lowered)

    if is_income_text(lowered):
        return ParsedTransaction(
            amount=amount,
            description=clean_description(text),
            category=INCOME_CATEGORY,
            type=INCOME,
            confidence=INCOME_CONFIDENCE,
        )

    return ParsedTransaction(
        amount=amount,
        description=clean_description(text, keyword),
        category=category,
        type=EXPENSE,
        confidence=KEYWORD_CONFIDENCE if keyword else FALLBACK_CONFIDENCE,
    )


class HeuristicParser:
    """Offline keyword parser; the default backend"""

    name = "heuristic"

    async def parse(self, text: str) -> ParsedTransaction:
        return parse_transaction_text(text)
