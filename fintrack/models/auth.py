"""
Authentication and user models.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..utils.constants import MAX_NAME_LENGTH
from ..utils.validators import validate_phone_number
from .base import IdentifiedModel, ensure_utc, utcnow


class UserRole(str, Enum):
    """User roles in the system."""
    USER = "USER"
    ADMIN = "ADMIN"


class User(IdentifiedModel):
    """User identity record. Email is unique across users."""
    
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    email: EmailStr
    email_verified: bool = Field(default=False)
    image: Optional[str] = Field(None, description="Avatar URL")
    role: UserRole = Field(default=UserRole.USER)
    phone: Optional[str] = Field(None, max_length=20)
    
    @field_validator("phone")
    @classmethod
    def _phone_digits(cls, v: Optional[str]) -> Optional[str]:
        return validate_phone_number(v) if v else None
    
    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Session(IdentifiedModel):
    """Fixed-window session created at login.

    Reads never extend ``expires_at``.
    """
    
    token: str = Field(..., min_length=1, description="Opaque value carried in the session cookie")
    user_id: str = Field(..., description="Owning user ID")
    expires_at: datetime
    
    # Session metadata
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    
    @field_validator("expires_at")
    @classmethod
    def _expiry_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
    
    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """A session is valid strictly before its expiry."""
        now = ensure_utc(now) if now else utcnow()
        return now < self.expires_at


class AuthenticatedSession(BaseModel):
    """A resolved, non-expired session together with its existing user."""
    
    user: User
    session: Session
    
    @property
    def expires(self) -> datetime:
        return self.session.expires_at


class ExternalIdentity(BaseModel):
    """Profile returned by the identity provider after a code exchange."""
    
    external_id: str = Field(..., min_length=1)
    login: str = Field(..., min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    
    @field_validator("external_id", "login", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return v
        return str(v).strip()
    
    @property
    def display_name(self) -> str:
        return self.name or self.login


# DTOs for API requests/responses
class UserResponse(BaseModel):
    """User profile for API responses."""
    id: str
    name: str
    email: EmailStr
    email_verified: bool
    image: Optional[str]
    role: UserRole
    phone: Optional[str]
    created_at: datetime
    updated_at: datetime
    
    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(**user.model_dump())


class UserUpdateRequest(BaseModel):
    """Administrator update of a user's name and role."""
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    role: UserRole
    
    @field_validator("role", mode="before")
    @classmethod
    def _upper_role(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class SessionUser(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: UserRole
    image: Optional[str]


class SessionResponse(BaseModel):
    """Current session as seen by the browser."""
    user: SessionUser
    expires: datetime
    
    @classmethod
    def from_session(cls, current: AuthenticatedSession) -> "SessionResponse":
        user = current.user
        return cls(
            user=SessionUser(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                image=user.image
            ),
            expires=current.expires
        )
