"""Dashboard aggregations - pure reductions over a user's transactions"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from finance_tracker.domain.models import (
    EXPENSE,
    INCOME,
    CategorySummary,
    FinancialSummary,
    Transaction,
    TransactionInsights,
    TrendPoint,
)
from finance_tracker.utils.date_utils import generate_date_range

ZERO = Decimal("0")
RECENT_ACTIVITY_DAYS = 7


def _total(transactions: Iterable[Transaction], txn_type: str) -> Decimal:
    return sum((t.amount for t in transactions if t.type == txn_type), ZERO)


def financial_summary(transactions: List[Transaction]) -> FinancialSummary:
    """Income, expenses, savings (income - expenses) and transaction count"""
    total_income = _total(transactions, INCOME)
    total_expenses = _total(transactions, EXPENSE)

    return FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        savings=total_income - total_expenses,
        transaction_count=len(transactions),
    )


def category_summary(transactions: List[Transaction]) -> List[CategorySummary]:
    """
    Group expenses by category.

    Percentage is the category's share of total expenses (0 when there are
    none). Result is ordered by amount, largest first.
    """
    amounts: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for txn in transactions:
        if txn.type != EXPENSE:
            continue
        amounts[txn.category] = amounts.get(txn.category, ZERO) + txn.amount
        counts[txn.category] = counts.get(txn.category, 0) + 1

    total_expenses = sum(amounts.values(), ZERO)

    summaries = [
        CategorySummary(
            category=category,
            amount=amount,
            count=counts[category],
            percentage=float(amount / total_expenses * 100) if total_expenses > 0 else 0.0,
        )
        for category, amount in amounts.items()
    ]
    return sorted(summaries, key=lambda s: s.amount, reverse=True)


def trend_series(
    transactions: List[Transaction],
    window_days: int,
    today: Optional[date] = None,
) -> List[TrendPoint]:
    """
    Daily income/expense totals for the last `window_days` days ending today.

    Always returns exactly `window_days` points in ascending date order; days
    without transactions are zero-filled.
    """
    if window_days <= 0:
        return []

    end = today or date.today()
    start = end - timedelta(days=window_days - 1)

    by_day: Dict[date, List[Transaction]] = {}
    for txn in transactions:
        if start <= txn.date <= end:
            by_day.setdefault(txn.date, []).append(txn)

    points = []
    for day in generate_date_range(start, end):
        day_txns = by_day.get(day, [])
        income = _total(day_txns, INCOME)
        expenses = _total(day_txns, EXPENSE)
        points.append(
            TrendPoint(
                date=day,
                income=income,
                expenses=expenses,
                net=income - expenses,
                count=len(day_txns),
            )
        )
    return points


def transaction_insights(
    transactions: List[Transaction],
    today: Optional[date] = None,
    recent_days: int = RECENT_ACTIVITY_DAYS,
) -> TransactionInsights:
    """Count, average and largest amount, plus how many fall in the recent window"""
    if not transactions:
        return TransactionInsights(
            total_transactions=0,
            average_amount=ZERO,
            largest_amount=ZERO,
            recent_activity=0,
        )

    end = today or date.today()
    cutoff = end - timedelta(days=recent_days)
    total = sum((t.amount for t in transactions), ZERO)

    return TransactionInsights(
        total_transactions=len(transactions),
        average_amount=total / len(transactions),
        largest_amount=max(t.amount for t in transactions),
        recent_activity=sum(1 for t in transactions if cutoff <= t.date <= end),
    )
