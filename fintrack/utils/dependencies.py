"""
Dependency injection utilities for FastAPI.

Long-lived handles (settings, Firestore, identity provider) live on
``app.state``; everything request-scoped is assembled from them here.
"""
from typing import Annotated, Optional

from fastapi import Depends, Request

from ..config import Settings
from ..infrastructure import FirestoreService, SessionStore, TransactionStore, UserStore
from ..models.auth import AuthenticatedSession, UserRole
from ..services.aggregator import FinancialAggregator
from ..services.auth import AuthService
from ..services.authorization import AuthorizationGate
from ..services.identity import GitHubIdentityProvider
from ..services.session import SessionResolver
from ..services.transaction import TransactionService
from ..services.user import UserService

_gate = AuthorizationGate()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_firestore(request: Request) -> FirestoreService:
    return request.app.state.firestore


def get_identity_provider(request: Request) -> GitHubIdentityProvider:
    return request.app.state.identity_provider


def get_authorization_gate() -> AuthorizationGate:
    return _gate


def get_session_resolver(
    settings: Settings = Depends(get_app_settings),
    firestore: FirestoreService = Depends(get_firestore)
) -> SessionResolver:
    return SessionResolver(
        sessions=SessionStore(firestore),
        users=UserStore(firestore),
        cookie_name=settings.session_cookie_name
    )


async def get_optional_session(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver)
) -> Optional[AuthenticatedSession]:
    """Resolve the request's session cookie; None for anonymous traffic."""
    resolution = await resolver.resolve(request.headers.get("cookie"))
    request.state.session_outcome = resolution.outcome.value
    if resolution.session is not None:
        request.state.user_id = resolution.session.user.id
    return resolution.session


async def get_current_session(
    session: Optional[AuthenticatedSession] = Depends(get_optional_session),
    gate: AuthorizationGate = Depends(get_authorization_gate)
) -> AuthenticatedSession:
    gate.require_authenticated(session)
    return session


async def get_admin_session(
    session: AuthenticatedSession = Depends(get_current_session),
    gate: AuthorizationGate = Depends(get_authorization_gate)
) -> AuthenticatedSession:
    gate.require_role(session, UserRole.ADMIN)
    return session


def get_auth_service(
    settings: Settings = Depends(get_app_settings),
    firestore: FirestoreService = Depends(get_firestore),
    identity_provider: GitHubIdentityProvider = Depends(get_identity_provider)
) -> AuthService:
    return AuthService(
        settings=settings,
        users=UserStore(firestore),
        sessions=SessionStore(firestore),
        identity_provider=identity_provider
    )


def get_transaction_service(
    firestore: FirestoreService = Depends(get_firestore),
    gate: AuthorizationGate = Depends(get_authorization_gate)
) -> TransactionService:
    return TransactionService(TransactionStore(firestore), UserStore(firestore), gate)


def get_user_service(
    firestore: FirestoreService = Depends(get_firestore),
    gate: AuthorizationGate = Depends(get_authorization_gate)
) -> UserService:
    return UserService(
        UserStore(firestore),
        SessionStore(firestore),
        TransactionStore(firestore),
        gate
    )


def get_financial_aggregator(
    firestore: FirestoreService = Depends(get_firestore)
) -> FinancialAggregator:
    return FinancialAggregator(TransactionStore(firestore), UserStore(firestore))


# Type aliases for dependency injection
OptionalSession = Annotated[Optional[AuthenticatedSession], Depends(get_optional_session)]
CurrentSession = Annotated[AuthenticatedSession, Depends(get_current_session)]
AdminSession = Annotated[AuthenticatedSession, Depends(get_admin_session)]
Gate = Annotated[AuthorizationGate, Depends(get_authorization_gate)]
