"""
Unit tests for session resolution.
"""
from datetime import datetime, timedelta, timezone

import pytest

from fintrack.services.session import SessionOutcome, SessionResolver

NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def resolver(session_store, user_store) -> SessionResolver:
    return SessionResolver(
        sessions=session_store,
        users=user_store,
        cookie_name="session_token",
        clock=lambda: NOW
    )


@pytest.mark.unit
class TestExtractToken:
    
    def test_token_among_other_cookies(self, resolver):
        header = "theme=dark; session_token=abc123; lang=es"
        assert resolver.extract_token(header) == "abc123"
    
    @pytest.mark.parametrize("header", [None, "", "theme=dark", "session_token=", "session_token=  "])
    def test_missing_or_empty(self, resolver, header):
        assert resolver.extract_token(header) is None


@pytest.mark.unit
class TestResolve:
    
    @pytest.mark.asyncio
    async def test_absent_cookie(self, resolver):
        resolution = await resolver.resolve(None)
        
        assert resolution.outcome == SessionOutcome.ABSENT
        assert resolution.session is None
        assert resolution.is_authenticated is False
    
    @pytest.mark.asyncio
    async def test_unknown_token(self, resolver, make_user, make_session):
        user = await make_user()
        await make_session(user, expires_at=NOW + timedelta(days=1))
        
        resolution = await resolver.resolve("session_token=not-a-real-token")
        
        assert resolution.outcome == SessionOutcome.NOT_FOUND
        assert resolution.session is None
    
    @pytest.mark.asyncio
    async def test_valid_session(self, resolver, make_user, make_session):
        user = await make_user()
        session = await make_session(user, expires_at=NOW + timedelta(days=30))
        
        resolution = await resolver.resolve(f"session_token={session.token}")
        
        assert resolution.outcome == SessionOutcome.VALID
        assert resolution.session.user.id == user.id
        assert resolution.session.session.token == session.token
        assert resolution.session.expires == session.expires_at
    
    @pytest.mark.asyncio
    async def test_expired_one_second_ago(self, resolver, make_user, make_session):
        user = await make_user()
        session = await make_session(user, expires_at=NOW - timedelta(seconds=1))
        
        resolution = await resolver.resolve(f"session_token={session.token}")
        
        assert resolution.outcome == SessionOutcome.EXPIRED
        assert resolution.session is None
    
    @pytest.mark.asyncio
    async def test_expiring_exactly_now_is_invalid(self, resolver, make_user, make_session):
        user = await make_user()
        session = await make_session(user, expires_at=NOW)
        
        assert await resolver.resolve_session(f"session_token={session.token}") is None
    
    @pytest.mark.asyncio
    async def test_session_of_deleted_user(self, resolver, make_user, make_session, user_store):
        user = await make_user()
        session = await make_session(user, expires_at=NOW + timedelta(days=1))
        await user_store.delete(user.id)
        
        resolution = await resolver.resolve(f"session_token={session.token}")
        
        assert resolution.outcome == SessionOutcome.NOT_FOUND
    
    @pytest.mark.asyncio
    async def test_resolution_is_idempotent(self, resolver, make_user, make_session, session_store):
        user = await make_user()
        session = await make_session(user, expires_at=NOW + timedelta(days=1))
        header = f"session_token={session.token}"
        
        first = await resolver.resolve_session(header)
        second = await resolver.resolve_session(header)
        
        assert first == second
        stored = await session_store.find_by_token(session.token)
        assert stored.expires_at == session.expires_at
    
    @pytest.mark.asyncio
    async def test_storage_failure_is_degraded(self, resolver, firestore):
        firestore.unavailable = True
        
        resolution = await resolver.resolve("session_token=abc123")
        
        assert resolution.outcome == SessionOutcome.DEGRADED
        assert resolution.session is None
