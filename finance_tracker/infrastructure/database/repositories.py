"""Data access layer for users and transactions"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from finance_tracker.infrastructure.database.models import TransactionRecord, UserRecord
from finance_tracker.domain.exceptions import AuthorizationDeniedError, TransactionNotFoundError
from finance_tracker.domain.models import PLACEHOLDER_PICTURE, Transaction, User

UPDATABLE_FIELDS = ("amount", "category", "description", "date", "type")


def record_to_transaction(record: TransactionRecord) -> Transaction:
    """Convert ORM row into the domain dataclass used by aggregations"""
    return Transaction(
        id=str(record.id),
        user_id=record.user_id,
        amount=Decimal(record.amount),
        description=record.description,
        category=record.category,
        type=record.type,
        date=record.date,
        created_at=record.created_at,
        confidence=record.confidence,
    )


def record_to_user(record: UserRecord) -> User:
    return User(id=record.id, email=record.email, name=record.name, picture=record.picture or PLACEHOLDER_PICTURE)


class UserRepository:
    """Repository for user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.db.get(UserRecord, user_id)

    def get_or_create_user(self, identity: User) -> UserRecord:
        """Return stored profile, creating it on first sight"""
        db_user = self.get_user(identity.id)
        if db_user is not None:
            return db_user

        db_user = UserRecord(
            id=identity.id,
            email=identity.email,
            name=identity.name or identity.email,
            picture=identity.picture or PLACEHOLDER_PICTURE,
        )
        self.db.add(db_user)
        self.db.flush()
        return db_user


class TransactionRepository:
    """Repository for transactions; enforces ownership on mutation"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        user_id: str,
        amount: Decimal,
        category: str,
        description: str,
        txn_type: str,
        txn_date: date,
        confidence: Optional[float] = None,
    ) -> TransactionRecord:
        """Persist transaction; id is assigned here, never by the client"""
        db_txn = TransactionRecord(
            user_id=user_id,
            amount=amount,
            category=category,
            description=description,
            type=txn_type,
            date=txn_date,
            confidence=confidence,
        )
        self.db.add(db_txn)
        self.db.flush()  # Get ID without committing
        return db_txn

    def list_transactions(
        self,
        user_id: str,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[TransactionRecord]:
        """Fetch a user's transactions, newest date first"""
        query = self.db.query(TransactionRecord).filter(TransactionRecord.user_id == user_id)

        if category:
            query = query.filter(TransactionRecord.category == category)
        if start_date:
            query = query.filter(TransactionRecord.date >= start_date)
        if end_date:
            query = query.filter(TransactionRecord.date <= end_date)

        return query.order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc()).all()

    def get_transaction(self, transaction_id: uuid.UUID) -> Optional[TransactionRecord]:
        return self.db.get(TransactionRecord, transaction_id)

    def get_owned_transaction(self, transaction_id: uuid.UUID, user_id: str) -> TransactionRecord:
        """
        Raises:
            TransactionNotFoundError: No transaction with this id
            AuthorizationDeniedError: Transaction belongs to another user
        """
        db_txn = self.get_transaction(transaction_id)
        if db_txn is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        if db_txn.user_id != user_id:
            raise AuthorizationDeniedError(f"User {user_id} does not own transaction {transaction_id}")
        return db_txn

    def update_transaction(
        self,
        transaction_id: uuid.UUID,
        user_id: str,
        changes: Dict[str, Any],
    ) -> TransactionRecord:
        """Apply changes after the ownership check (last write wins)"""
        db_txn = self.get_owned_transaction(transaction_id, user_id)
        for field, value in changes.items():
            if field in UPDATABLE_FIELDS and value is not None:
                setattr(db_txn, field, value)
        self.db.flush()
        return db_txn

    def delete_transaction(self, transaction_id: uuid.UUID, user_id: str) -> None:
        db_txn = self.get_owned_transaction(transaction_id, user_id)
        self.db.delete(db_txn)
        self.db.flush()
