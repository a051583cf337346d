"""
Sign-in, sign-out and session lifecycle.
"""
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..config import Settings
from ..infrastructure.stores import SessionStore, UserStore
from ..models.auth import ExternalIdentity, Session, User, UserRole
from ..models.base import utcnow
from ..utils.constants import SESSION_TOKEN_BYTES
from ..utils.exceptions import ValidationError
from ..utils.validators import placeholder_email
from .identity import GitHubIdentityProvider

logger = structlog.get_logger()


class AuthService:
    """Authentication service with external sign-in and session management."""
    
    def __init__(
        self,
        settings: Settings,
        users: UserStore,
        sessions: SessionStore,
        identity_provider: GitHubIdentityProvider,
        clock: Callable[[], datetime] = utcnow
    ):
        self.settings = settings
        self.users = users
        self.sessions = sessions
        self.identity_provider = identity_provider
        self.clock = clock
    
    def begin_sign_in(self) -> Tuple[str, str]:
        """Return the provider URL and the anti-forgery state it carries."""
        state = secrets.token_urlsafe(16)
        return self.identity_provider.authorize_url(state), state
    
    async def complete_sign_in(
        self,
        code: Optional[str],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Tuple[User, Session]:
        """Exchange ``code``, upsert the user and open a new session."""
        if not code:
            raise ValidationError(
                message="Missing authorization code",
                details={"code": "Missing"}
            )
        
        identity = await self.identity_provider.exchange_code(code)
        user = await self.upsert_user(identity)
        session = await self.create_session(user, ip_address, user_agent)
        return user, session
    
    def _profile_user(self, identity: ExternalIdentity) -> User:
        """Validate the provider profile as a new user record."""
        try:
            return User(
                id=identity.external_id,
                name=identity.display_name,
                email=identity.email or placeholder_email(identity.login),
                email_verified=True,
                image=identity.avatar_url,
                role=self.settings.default_user_role
            )
        except PydanticValidationError as e:
            details = {
                ".".join(str(part) for part in error["loc"]) or "profile": error["msg"]
                for error in e.errors()
            }
            logger.warning(
                "Identity profile rejected",
                external_id=identity.external_id,
                fields=sorted(details)
            )
            raise ValidationError(
                message="Invalid identity profile",
                code="INVALID_IDENTITY_PROFILE",
                details=details
            ) from e
    
    async def upsert_user(self, identity: ExternalIdentity) -> User:
        """Create the user on first login, refresh name/avatar afterwards."""
        profile = self._profile_user(identity)
        
        user = await self.users.find_by_email(profile.email)
        if user is None:
            # Same identity, address changed at the provider
            user = await self.users.find_by_id(identity.external_id)
        
        if user is not None:
            user.name = profile.name
            user.image = profile.image
            user.email = profile.email
            user.email_verified = True
            await self.users.update(user)
            logger.info("User signed in", user_id=user.id)
            return user
        
        await self.users.create(profile)
        
        logger.info("User created on first sign-in", user_id=profile.id, role=profile.role.value)
        if profile.role == UserRole.ADMIN:
            logger.warning("New identity granted administrator role", user_id=profile.id)
        return profile
    
    async def create_session(
        self,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Session:
        """Open a fixed-window session for ``user``."""
        now = self.clock()
        session = Session(
            token=secrets.token_urlsafe(SESSION_TOKEN_BYTES),
            user_id=user.id,
            expires_at=now + timedelta(seconds=self.settings.session_max_age_seconds),
            ip_address=ip_address or "unknown",
            user_agent=user_agent or "unknown",
            created_at=now,
            updated_at=now
        )
        await self.sessions.create(session)
        
        logger.info(
            "Session created",
            user_id=user.id,
            session_id=session.id,
            expires_at=session.expires_at.isoformat()
        )
        return session
    
    async def sign_out(self, token: Optional[str]) -> int:
        """Delete every session carrying ``token``."""
        if not token:
            return 0
        deleted = await self.sessions.delete_by_token(token)
        logger.info("User signed out", sessions_deleted=deleted)
        return deleted
    
    async def purge_expired_sessions(self) -> int:
        """Delete sessions whose expiry has passed."""
        deleted = await self.sessions.delete_expired(self.clock())
        logger.info("Expired sessions purged", count=deleted)
        return deleted
