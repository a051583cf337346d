"""
Business logic services.
"""
from .aggregator import FinancialAggregator, format_amount, summarize
from .auth import AuthService
from .authorization import AccessScope, AuthorizationGate, Scope
from .identity import GitHubIdentityProvider
from .session import SessionOutcome, SessionResolution, SessionResolver
from .transaction import TransactionService
from .user import UserService

__all__ = [
    "AccessScope",
    "AuthService",
    "AuthorizationGate",
    "FinancialAggregator",
    "GitHubIdentityProvider",
    "Scope",
    "SessionOutcome",
    "SessionResolution",
    "SessionResolver",
    "TransactionService",
    "UserService",
    "format_amount",
    "summarize",
]
