"""
Role and ownership checks shared by every protected operation.

Per request the gate moves UNCHECKED -> AUTHENTICATED -> AUTHORIZED, or
stops with AuthenticationError (401) / AuthorizationError (403). Both
errors end the request.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from ..models.auth import AuthenticatedSession, User, UserRole
from ..utils.exceptions import AuthenticationError, AuthorizationError

logger = structlog.get_logger()

ADMIN_REQUIRED = "Forbidden: Admin access required"
OWN_RECORDS_ONLY = "Forbidden: own records only"


class Scope(str, Enum):
    """Visibility applied to queries."""
    ALL = "ALL"
    OWN = "OWN"


@dataclass(frozen=True)
class AccessScope:
    """Scope decision for one request.

    ``owner_id`` is the owner filter to apply to queries; None means no
    filter (an administrator looking at everything).
    """
    scope: Scope
    viewer_id: str
    owner_id: Optional[str]
    
    def permits(self, resource_owner_id: str) -> bool:
        return self.scope == Scope.ALL or resource_owner_id == self.viewer_id


class AuthorizationGate:
    """Stateless ALLOW/DENY decisions over a resolved session."""
    
    def require_authenticated(self, session: Optional[AuthenticatedSession]) -> User:
        if session is None:
            raise AuthenticationError()
        return session.user
    
    def require_role(self, session: Optional[AuthenticatedSession], role: UserRole) -> User:
        user = self.require_authenticated(session)
        if user.role != role:
            logger.info(
                "Role check denied",
                user_id=user.id,
                role=user.role.value,
                required_role=role.value
            )
            raise AuthorizationError(
                ADMIN_REQUIRED if role == UserRole.ADMIN else f"Forbidden: {role.value} role required"
            )
        return user
    
    def scope_for(
        self,
        session: Optional[AuthenticatedSession],
        resource_owner_id: Optional[str] = None
    ) -> AccessScope:
        """ALL for administrators, OWN for everyone else.

        A non-admin naming another owner is refused outright rather than
        silently narrowed.
        """
        user = self.require_authenticated(session)
        
        if user.role == UserRole.ADMIN:
            return AccessScope(scope=Scope.ALL, viewer_id=user.id, owner_id=resource_owner_id)
        
        if resource_owner_id is not None and resource_owner_id != user.id:
            logger.info(
                "Ownership check denied",
                user_id=user.id,
                requested_owner_id=resource_owner_id
            )
            raise AuthorizationError(OWN_RECORDS_ONLY)
        
        return AccessScope(scope=Scope.OWN, viewer_id=user.id, owner_id=user.id)
    
    def require_owner_or_admin(
        self,
        session: Optional[AuthenticatedSession],
        resource_owner_id: str
    ) -> User:
        self.scope_for(session, resource_owner_id)
        return session.user
