"""
Session resolution: cookie header -> verified (user, session) pair.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import structlog
from starlette.requests import cookie_parser

from ..infrastructure.stores import SessionStore, UserStore
from ..middleware.monitoring import SESSION_RESOLUTIONS
from ..models.auth import AuthenticatedSession
from ..models.base import utcnow
from ..utils.exceptions import DatabaseError

logger = structlog.get_logger()


class SessionOutcome(str, Enum):
    """Why a cookie did or did not resolve to a session."""
    VALID = "valid"
    ABSENT = "absent"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class SessionResolution:
    outcome: SessionOutcome
    session: Optional[AuthenticatedSession] = None
    
    @property
    def is_authenticated(self) -> bool:
        return self.session is not None


def _token_hint(token: str) -> str:
    return f"{token[:6]}..." if len(token) > 6 else "***"


class SessionResolver:
    """
    Maps a raw ``Cookie`` header to an authenticated session.

    Callers that only need yes/no use ``resolve_session``; every outcome
    other than VALID collapses to None there. ``resolve`` keeps the
    outcome so storage trouble is logged and counted apart from plain
    anonymous traffic. Reads never renew a session.
    """
    
    def __init__(
        self,
        sessions: SessionStore,
        users: UserStore,
        cookie_name: str,
        clock: Callable[[], datetime] = utcnow
    ):
        self.sessions = sessions
        self.users = users
        self.cookie_name = cookie_name
        self.clock = clock
    
    def extract_token(self, cookie_header: Optional[str]) -> Optional[str]:
        """Pull the session token out of a ``k=v; k2=v2`` header."""
        if not cookie_header:
            return None
        token = cookie_parser(cookie_header).get(self.cookie_name, "").strip()
        return token or None
    
    async def resolve(self, cookie_header: Optional[str]) -> SessionResolution:
        token = self.extract_token(cookie_header)
        if token is None:
            return self._finish(SessionOutcome.ABSENT)
        
        try:
            session = await self.sessions.find_by_token(token)
            user = await self.users.find_by_id(session.user_id) if session else None
        except DatabaseError as e:
            logger.warning(
                "Session lookup degraded",
                token=_token_hint(token),
                error_code=e.code,
                error=e.message
            )
            return self._finish(SessionOutcome.DEGRADED)
        
        if session is None or user is None:
            logger.info("Session token not recognised", token=_token_hint(token))
            return self._finish(SessionOutcome.NOT_FOUND)
        
        if not session.is_valid(self.clock()):
            logger.info(
                "Session expired",
                session_id=session.id,
                user_id=session.user_id,
                expired_at=session.expires_at.isoformat()
            )
            return self._finish(SessionOutcome.EXPIRED)
        
        return self._finish(
            SessionOutcome.VALID,
            AuthenticatedSession(user=user, session=session)
        )
    
    async def resolve_session(self, cookie_header: Optional[str]) -> Optional[AuthenticatedSession]:
        """The session behind ``cookie_header``, or None for any non-valid outcome."""
        resolution = await self.resolve(cookie_header)
        return resolution.session
    
    def _finish(
        self,
        outcome: SessionOutcome,
        session: Optional[AuthenticatedSession] = None
    ) -> SessionResolution:
        SESSION_RESOLUTIONS.labels(outcome=outcome.value).inc()
        if outcome == SessionOutcome.ABSENT:
            logger.debug("No session cookie present")
        return SessionResolution(outcome=outcome, session=session)
