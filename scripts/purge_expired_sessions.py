#!/usr/bin/env python3
"""
Delete sessions whose expiry has passed.

Meant to run from cron or Cloud Scheduler; uses the same environment
variables as the API (FIRESTORE_PROJECT_ID, GOOGLE_APPLICATION_CREDENTIALS, ...).
"""
import asyncio
import sys

from fintrack.config import get_settings
from fintrack.infrastructure import FirestoreService, SessionStore, UserStore
from fintrack.main import configure_logging
from fintrack.services.auth import AuthService
from fintrack.services.identity import GitHubIdentityProvider
from fintrack.utils.exceptions import DatabaseError


async def purge() -> int:
    settings = get_settings()
    configure_logging(settings)
    
    firestore = FirestoreService(settings)
    identity_provider = GitHubIdentityProvider(settings)
    auth_service = AuthService(
        settings=settings,
        users=UserStore(firestore),
        sessions=SessionStore(firestore),
        identity_provider=identity_provider
    )
    
    try:
        return await auth_service.purge_expired_sessions()
    finally:
        await identity_provider.aclose()
        await firestore.close()


def main() -> int:
    print("🧹 Purging expired sessions...")
    try:
        deleted = asyncio.run(purge())
    except DatabaseError as e:
        print(f"❌ Purge failed: {e.message}")
        return 1
    
    print(f"✅ Deleted {deleted} expired session(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
