"""Category set and keyword tables used by the heuristic parser"""

from typing import List, Tuple

INCOME_CATEGORY = "Income"
OTHER_CATEGORY = "Other"

CATEGORIES = [
    "Food & Dining",
    "Shopping",
    "Transportation",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    INCOME_CATEGORY,
    OTHER_CATEGORY,
]

INCOME_KEYWORDS = ("salary", "paid", "income", "bonus", "refund")

# Order matters: first substring match wins
CATEGORY_KEYWORDS: List[Tuple[str, str]] = [
    ("coffee", "Food & Dining"),
    ("starbucks", "Food & Dining"),
    ("restaurant", "Food & Dining"),
    ("food", "Food & Dining"),
    ("lunch", "Food & Dining"),
    ("dinner", "Food & Dining"),
    ("panda express", "Food & Dining"),
    ("gas", "Transportation"),
    ("uber", "Transportation"),
    ("lyft", "Transportation"),
    ("amazon", "Shopping"),
    ("target", "Shopping"),
    ("walmart", "Shopping"),
    ("grocery", "Shopping"),
    ("whole foods", "Shopping"),
    ("netflix", "Entertainment"),
    ("spotify", "Entertainment"),
    ("movie", "Entertainment"),
    ("samsung", "Shopping"),
    ("electronics", "Shopping"),
    ("watch", "Shopping"),
    ("salary", INCOME_CATEGORY),
    ("paid", INCOME_CATEGORY),
    # Not an income keyword, so "paycheck" alone yields an expense filed under Income
    ("paycheck", INCOME_CATEGORY),
]


def normalize_category(category: str | None) -> str:
    """Map a free-form label onto the fixed category set (case-insensitive)"""
    if not category:
        return OTHER_CATEGORY
    wanted = category.strip().lower()
    for known in CATEGORIES:
        if known.lower() == wanted:
            return known
    return OTHER_CATEGORY
