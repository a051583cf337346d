"""
Factories for users and sessions.
"""

import secrets
from datetime import timedelta

import factory
from faker import Faker

from fintrack.models.auth import ExternalIdentity, Session, User, UserRole
from fintrack.models.base import utcnow

fake = Faker()


class UserFactory(factory.Factory):
    """Factory for User model."""
    
    class Meta:
        model = User
    
    id = factory.Sequence(lambda n: f"user_{n:04d}")
    name = factory.Faker("name")
    email = factory.LazyAttribute(lambda obj: f"{obj.id}@example.com")
    email_verified = True
    image = factory.LazyFunction(lambda: fake.image_url())
    role = UserRole.USER


class AdminUserFactory(UserFactory):
    """Factory for admin user."""
    
    id = factory.Sequence(lambda n: f"admin_{n:04d}")
    name = "Admin User"
    role = UserRole.ADMIN


class SessionFactory(factory.Factory):
    """Factory for Session model; valid for a day unless told otherwise."""
    
    class Meta:
        model = Session
    
    token = factory.LazyFunction(lambda: secrets.token_urlsafe(32))
    user_id = factory.Sequence(lambda n: f"user_{n:04d}")
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=1))
    ip_address = factory.Faker("ipv4")
    user_agent = factory.Faker("user_agent")


class ExternalIdentityFactory(factory.Factory):
    """Factory for identities returned by the OAuth provider."""
    
    class Meta:
        model = ExternalIdentity
    
    external_id = factory.Sequence(lambda n: str(1000 + n))
    login = factory.Sequence(lambda n: f"octocat{n}")
    name = factory.Faker("name")
    email = factory.Faker("email")
    avatar_url = factory.LazyFunction(lambda: fake.image_url())
