"""
Financial domain models: transactions and their aggregates.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.constants import MAX_CONCEPT_LENGTH
from ..utils.validators import validate_amount, validate_required_text
from .auth import User, UserRole
from .base import IdentifiedModel, Money, ensure_utc


class TransactionType(str, Enum):
    """Direction of a transaction. Amounts are always positive magnitudes."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class _TransactionFields(BaseModel):
    """Fields shared by stored transactions and write requests."""
    
    concept: str = Field(..., min_length=1, max_length=MAX_CONCEPT_LENGTH)
    amount: Money = Field(..., description="Positive magnitude; sign comes from type")
    type: TransactionType
    date: datetime = Field(..., description="Effective date of the event")
    
    @field_validator("concept", mode="before")
    @classmethod
    def _strip_concept(cls, v):
        if isinstance(v, str):
            return validate_required_text(v, "concept")
        return v
    
    @field_validator("amount", mode="before")
    @classmethod
    def _positive_amount(cls, v):
        if v is None:
            return v
        return validate_amount(v)
    
    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v
    
    @field_validator("date")
    @classmethod
    def _date_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Transaction(IdentifiedModel, _TransactionFields):
    """Financial transaction owned by exactly one user."""
    
    user_id: str = Field(..., min_length=1, description="Owning user ID")


class TransactionCreateRequest(_TransactionFields):
    """Administrator request to record a transaction for any user."""
    
    user_id: str = Field(..., min_length=1)


class TransactionUpdateRequest(_TransactionFields):
    """Full replacement of a transaction's editable fields."""


class TransactionOwner(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole


class TransactionResponse(BaseModel):
    """Transaction for API responses, with its owner embedded when known."""
    id: str
    concept: str
    amount: Money
    type: TransactionType
    date: datetime
    user_id: str
    user: Optional[TransactionOwner] = None
    created_at: datetime
    updated_at: datetime
    
    @classmethod
    def from_transaction(
        cls,
        transaction: Transaction,
        owner: Optional[User] = None
    ) -> "TransactionResponse":
        data = transaction.model_dump()
        if owner is not None:
            data["user"] = TransactionOwner(
                id=owner.id,
                name=owner.name,
                email=owner.email,
                role=owner.role
            )
        return cls(**data)


class FinancialSummary(BaseModel):
    """Income, expense and balance over a set of transactions."""
    income: Money = Field(default=Decimal("0"))
    expenses: Money = Field(default=Decimal("0"))
    balance: Money = Field(default=Decimal("0"))


class SummaryResponse(FinancialSummary):
    """Summary endpoint payload."""
    total_users: int
    transaction_count: int
    formatted: "FormattedSummary"


class FormattedSummary(BaseModel):
    income: str
    expenses: str
    balance: str


class MonthlyTotals(BaseModel):
    """Income and expense totals for one calendar month (``M/YYYY``)."""
    month: str
    income: Money = Field(default=Decimal("0"))
    expenses: Money = Field(default=Decimal("0"))


class ConceptTotal(BaseModel):
    """Total per concept, labelled with its direction."""
    name: str
    value: Money
    type: TransactionType


SummaryResponse.model_rebuild()
