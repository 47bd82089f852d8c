"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

PLACEHOLDER_PICTURE = "https://via.placeholder.com/40x40?text=U"

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass
class User:
    """Identity returned by the identity provider"""

    id: str
    email: str
    name: str
    picture: str


@dataclass
class Transaction:
    """Persisted transaction owned by a single user"""

    id: str
    user_id: str
    amount: Decimal  # magnitude; sign implied by type
    description: str
    category: str
    type: str  # "income" or "expense"
    date: date
    created_at: datetime
    confidence: Optional[float] = None


@dataclass(frozen=True)
class ParsedTransaction:
    """Parser output shown to the user for confirmation"""

    amount: Decimal
    description: str
    category: str
    type: str
    confidence: float


@dataclass
class FinancialSummary:
    total_income: Decimal
    total_expenses: Decimal
    savings: Decimal
    transaction_count: int


@dataclass
class CategorySummary:
    category: str
    amount: Decimal
    count: int
    percentage: float


@dataclass
class TrendPoint:
    """Totals for one calendar day of a trend window"""

    date: date
    income: Decimal
    expenses: Decimal
    net: Decimal
    count: int = 0


@dataclass
class TransactionInsights:
    """Activity figures shown next to the trend chart"""

    total_transactions: int
    average_amount: Decimal
    largest_amount: Decimal
    recent_activity: int
