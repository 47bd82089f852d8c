"""Client-side repository holding one user's transactions"""

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from finance_tracker.client.api_client import FinanceTrackerClient
from finance_tracker.client.session import SessionState
from finance_tracker.domain import aggregation
from finance_tracker.domain.exceptions import AuthenticationMissingError, TransactionNotFoundError
from finance_tracker.domain.identifiers import generate_transaction_id, is_provisional_id
from finance_tracker.domain.models import (
    CategorySummary,
    FinancialSummary,
    ParsedTransaction,
    Transaction,
    TransactionInsights,
    TrendPoint,
    User,
)

EDITABLE_FIELDS = ("amount", "category", "description", "type", "date")


class TransactionStore:
    """
    Explicit, caller-owned cache of the signed-in user's transactions.

    With an API client every write goes to the server and the cache only
    changes after the server accepts it. Without one the store works offline
    and records carry provisional ids until they are stored remotely.
    Reads never hit the network; call refresh() to resync.
    """

    def __init__(self, api: Optional[FinanceTrackerClient] = None, user: Optional[User] = None):
        self.api = api
        self.user = user
        self._transactions: List[Transaction] = []

    @property
    def offline(self) -> bool:
        return self.api is None

    @property
    def transactions(self) -> List[Transaction]:
        return list(self._transactions)

    @property
    def provisional(self) -> List[Transaction]:
        """Records created offline that the server has not assigned an id to yet"""
        return [t for t in self._transactions if is_provisional_id(t.id)]

    def _sort(self) -> None:
        self._transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)

    def _require_user(self) -> User:
        if self.user is None:
            raise AuthenticationMissingError("No signed-in user")
        return self.user

    def _index_of(self, transaction_id: str) -> int:
        for i, txn in enumerate(self._transactions):
            if txn.id == transaction_id:
                return i
        raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

    async def refresh(
        self,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Transaction]:
        """Replace the cache with the server's view (no-op offline)"""
        if self.offline:
            return self.transactions
        self._require_user()
        self._transactions = await self.api.list_transactions(category, start_date, end_date)
        self._sort()
        return self.transactions

    async def add(self, parsed: ParsedTransaction, txn_date: Optional[date] = None) -> Transaction:
        """Store a confirmed parser candidate"""
        user = self._require_user()
        txn_date = txn_date or date.today()

        if self.offline:
            txn = Transaction(
                id=generate_transaction_id(),
                user_id=user.id,
                amount=parsed.amount,
                description=parsed.description,
                category=parsed.category,
                type=parsed.type,
                date=txn_date,
                created_at=datetime.now(timezone.utc),
                confidence=parsed.confidence,
            )
        else:
            txn = await self.api.create_transaction(
                amount=parsed.amount,
                category=parsed.category,
                description=parsed.description,
                txn_type=parsed.type,
                txn_date=txn_date,
                confidence=parsed.confidence,
            )

        self._transactions.append(txn)
        self._sort()
        return txn

    async def update(self, transaction_id: str, **changes: Any) -> Transaction:
        self._require_user()
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        if self.offline:
            index = self._index_of(transaction_id)
            if "amount" in changes:
                changes["amount"] = Decimal(str(changes["amount"]))
            updated = replace(self._transactions[index], **changes)
        else:
            updated = await self.api.update_transaction(transaction_id, **changes)

        try:
            self._transactions[self._index_of(transaction_id)] = updated
        except TransactionNotFoundError:
            self._transactions.append(updated)
        self._sort()
        return updated

    async def remove(self, transaction_id: str) -> None:
        self._require_user()
        if self.offline:
            self._index_of(transaction_id)
        else:
            await self.api.delete_transaction(transaction_id)
        self._transactions = [t for t in self._transactions if t.id != transaction_id]

    def clear(self) -> None:
        self._transactions = []

    def on_session_change(self, state: SessionState, user: Optional[User]) -> None:
        """Session listener: follow sign-in, drop everything on sign-out"""
        if state is SessionState.SIGNED_OUT:
            self.user = None
            self.clear()
        elif user is not None and (self.user is None or self.user.id != user.id):
            self.user = user
            self.clear()

    def summary(self) -> FinancialSummary:
        return aggregation.financial_summary(self._transactions)

    def categories(self) -> List[CategorySummary]:
        return aggregation.category_summary(self._transactions)

    def trends(self, window_days: int, today: Optional[date] = None) -> List[TrendPoint]:
        return aggregation.trend_series(self._transactions, window_days, today=today)

    def insights(self, today: Optional[date] = None) -> TransactionInsights:
        return aggregation.transaction_insights(self._transactions, today=today)
