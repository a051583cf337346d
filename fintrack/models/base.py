"""
Base models for all Pydantic models in the application.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, Field, PlainSerializer, field_validator


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Decimal internally, plain JSON number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class TimestampedModel(BaseModel):
    """Base model with automatic timestamps."""
    
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    
    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
    
    def update_timestamp(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()


class IdentifiedModel(TimestampedModel):
    """Base model with string identification and timestamps."""
    
    id: str = Field(default_factory=lambda: str(uuid4()))
