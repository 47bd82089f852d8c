"""/analytics - dashboard summaries computed from the caller's transactions"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import (
    CategorySummaryResponse,
    FinancialSummaryResponse,
    InsightsResponse,
    TrendPointResponse,
)
from finance_tracker.api.dependencies import get_current_user, get_request_id
from finance_tracker.config import settings
from finance_tracker.domain.aggregation import (
    category_summary,
    financial_summary,
    transaction_insights,
    trend_series,
)
from finance_tracker.domain.models import Transaction, User
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import TransactionRepository, record_to_transaction

router = APIRouter()

MAX_TREND_WINDOW_DAYS = 366


def _load_transactions(db: Session, user: User, request_id: str) -> List[Transaction]:
    try:
        return [record_to_transaction(r) for r in TransactionRepository(db).list_transactions(user.id)]
    except Exception as e:
        logging.error(f"Analytics fetch error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")


@router.get("/summary", response_model=FinancialSummaryResponse)
def get_summary(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Total income, total expenses, savings and transaction count"""
    transactions = _load_transactions(db, user, get_request_id(request))
    summary = financial_summary(transactions)

    return FinancialSummaryResponse(
        total_income=summary.total_income,
        total_expenses=summary.total_expenses,
        savings=summary.savings,
        transaction_count=summary.transaction_count,
    )


@router.get("/categories", response_model=List[CategorySummaryResponse])
def get_categories(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Expense breakdown by category, largest first"""
    transactions = _load_transactions(db, user, get_request_id(request))

    return [
        CategorySummaryResponse(
            category=s.category,
            amount=s.amount,
            count=s.count,
            percentage=s.percentage,
        )
        for s in category_summary(transactions)
    ]


@router.get("/trends", response_model=List[TrendPointResponse])
def get_trends(
    request: Request,
    window_days: int = Query(
        settings.default_trend_window_days,
        alias="windowDays",
        ge=1,
        le=MAX_TREND_WINDOW_DAYS,
        description="Number of days ending today",
    ),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """One zero-filled entry per day of the window, oldest first"""
    transactions = _load_transactions(db, user, get_request_id(request))

    return [
        TrendPointResponse(
            date=p.date,
            income=p.income,
            expenses=p.expenses,
            net=p.net,
            count=p.count,
        )
        for p in trend_series(transactions, window_days)
    ]


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Transaction count, average and largest amount, last-7-day activity"""
    transactions = _load_transactions(db, user, get_request_id(request))
    insights = transaction_insights(transactions)

    return InsightsResponse(
        total_transactions=insights.total_transactions,
        average_amount=insights.average_amount,
        largest_amount=insights.largest_amount,
        recent_activity=insights.recent_activity,
    )
