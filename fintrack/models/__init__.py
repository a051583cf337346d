"""
Pydantic models for the fintrack API.
"""
from .auth import (
    AuthenticatedSession,
    ExternalIdentity,
    Session,
    SessionResponse,
    User,
    UserResponse,
    UserRole,
    UserUpdateRequest,
)
from .base import IdentifiedModel, TimestampedModel
from .financial import (
    ConceptTotal,
    FinancialSummary,
    MonthlyTotals,
    SummaryResponse,
    Transaction,
    TransactionCreateRequest,
    TransactionResponse,
    TransactionType,
    TransactionUpdateRequest,
)

__all__ = [
    # Base models
    "TimestampedModel",
    "IdentifiedModel",
    # Auth models
    "User",
    "UserRole",
    "UserResponse",
    "UserUpdateRequest",
    "Session",
    "SessionResponse",
    "AuthenticatedSession",
    "ExternalIdentity",
    # Financial models
    "Transaction",
    "TransactionType",
    "TransactionCreateRequest",
    "TransactionUpdateRequest",
    "TransactionResponse",
    "FinancialSummary",
    "SummaryResponse",
    "MonthlyTotals",
    "ConceptTotal",
]
