"""Pydantic schemas for API request/response validation"""

import datetime as dt
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from finance_tracker.domain.categories import CATEGORIES, normalize_category, OTHER_CATEGORY

# Decimal in Python, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

TransactionType = Literal["income", "expense"]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_category(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    category = normalize_category(value)
    if category == OTHER_CATEGORY and value.strip().lower() != OTHER_CATEGORY.lower():
        raise ValueError(f"category must be one of: {', '.join(CATEGORIES)}")
    return category


def _validate_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not value.strip():
        raise ValueError("description must not be blank")
    return value.strip()


class ParseRequest(CamelModel):
    """Request body for POST /transactions/parse"""

    text: str = Field(..., min_length=1, max_length=500, description="Free-text transaction description")

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value


class ParsedTransactionResponse(CamelModel):
    """Response for POST /transactions/parse"""

    amount: Money
    description: str
    category: str
    type: TransactionType
    confidence: float


class TransactionCreateRequest(CamelModel):
    """Request body for POST /transactions"""

    amount: Decimal = Field(..., ge=0, description="Magnitude; sign is implied by type")
    category: str
    description: str = Field(..., min_length=1)
    type: TransactionType
    date: Optional[dt.date] = Field(None, description="Defaults to today")
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator("category")
    @classmethod
    def category_in_set(cls, value: Optional[str]) -> Optional[str]:
        return _validate_category(value)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        return _validate_description(value)


class TransactionUpdateRequest(CamelModel):
    """Request body for PUT /transactions/{id}; omitted fields are left as is"""

    amount: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = Field(None, min_length=1)
    type: Optional[TransactionType] = None
    date: Optional[dt.date] = None

    @field_validator("category")
    @classmethod
    def category_in_set(cls, value: Optional[str]) -> Optional[str]:
        return _validate_category(value)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _validate_description(value)


class TransactionResponse(CamelModel):
    """Single stored transaction"""

    id: str
    user_id: str
    amount: Money
    description: str
    category: str
    type: TransactionType
    date: dt.date
    created_at: dt.datetime
    confidence: Optional[float] = None


class MessageResponse(BaseModel):
    message: str


class FinancialSummaryResponse(CamelModel):
    """Response for GET /analytics/summary"""

    total_income: Money
    total_expenses: Money
    savings: Money
    transaction_count: int


class CategorySummaryResponse(CamelModel):
    """Single entry of GET /analytics/categories"""

    category: str
    amount: Money
    count: int
    percentage: float


class TrendPointResponse(CamelModel):
    """Single day of GET /analytics/trends"""

    date: dt.date
    income: Money
    expenses: Money
    net: Money
    count: int


class InsightsResponse(CamelModel):
    """Response for GET /analytics/insights"""

    total_transactions: int
    average_amount: Money
    largest_amount: Money
    recent_activity: int


class UserResponse(BaseModel):
    """Profile returned by /auth endpoints"""

    id: str
    email: str
    name: str
    picture: str


class CategoryListResponse(BaseModel):
    categories: List[str]
