"""SQLAlchemy ORM models for users and their transactions"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Date, DateTime, Float, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(Base):
    """Profile of a user seen through the identity provider"""

    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    picture = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())


class TransactionRecord(Base):
    """Income or expense entry owned by one user"""

    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    date = Column(Date, nullable=False, index=True)
    confidence = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
