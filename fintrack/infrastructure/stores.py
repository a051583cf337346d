"""
Collection-level stores for sessions, users and transactions.

Each store is a thin, typed view over ``FirestoreService``; services hold
stores, never the raw document layer.
"""
from datetime import datetime
from typing import List, Optional

from ..models.auth import Session, User
from ..models.base import utcnow
from ..models.financial import Transaction
from ..utils.constants import (
    SESSIONS_COLLECTION,
    TRANSACTIONS_COLLECTION,
    USERS_COLLECTION,
)
from .firestore import FirestoreService


class SessionStore:
    """Session records keyed by their opaque token."""
    
    def __init__(self, firestore: FirestoreService):
        self.firestore = firestore
    
    async def find_by_token(self, token: str) -> Optional[Session]:
        sessions = await self.firestore.query_documents(
            collection=SESSIONS_COLLECTION,
            model_class=Session,
            where_clauses=[("token", "==", token)],
            limit=1
        )
        return sessions[0] if sessions else None
    
    async def create(self, session: Session) -> Session:
        await self.firestore.create_document(
            collection=SESSIONS_COLLECTION,
            document_id=session.id,
            data=session
        )
        return session
    
    async def delete_by_token(self, token: str) -> int:
        return await self.firestore.delete_where(
            collection=SESSIONS_COLLECTION,
            where_clauses=[("token", "==", token)]
        )
    
    async def delete_for_user(self, user_id: str) -> int:
        return await self.firestore.delete_where(
            collection=SESSIONS_COLLECTION,
            where_clauses=[("user_id", "==", user_id)]
        )
    
    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        """Remove sessions whose expiry is at or before ``now``."""
        return await self.firestore.delete_where(
            collection=SESSIONS_COLLECTION,
            where_clauses=[("expires_at", "<=", now or utcnow())]
        )


class UserStore:
    """User records; email is unique."""
    
    def __init__(self, firestore: FirestoreService):
        self.firestore = firestore
    
    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self.firestore.get_document(
            collection=USERS_COLLECTION,
            document_id=user_id,
            model_class=User
        )
    
    async def find_by_email(self, email: str) -> Optional[User]:
        users = await self.firestore.query_documents(
            collection=USERS_COLLECTION,
            model_class=User,
            where_clauses=[("email", "==", email)],
            limit=1
        )
        return users[0] if users else None
    
    async def find_many(self, user_id: Optional[str] = None) -> List[User]:
        """All users, or only ``user_id``; newest first."""
        if user_id is not None:
            user = await self.find_by_id(user_id)
            return [user] if user else []
        
        users = await self.firestore.query_documents(
            collection=USERS_COLLECTION,
            model_class=User
        )
        return sorted(users, key=lambda u: u.created_at, reverse=True)
    
    async def create(self, user: User) -> User:
        await self.firestore.create_document(
            collection=USERS_COLLECTION,
            document_id=user.id,
            data=user
        )
        return user
    
    async def update(self, user: User) -> User:
        user.update_timestamp()
        await self.firestore.update_document(
            collection=USERS_COLLECTION,
            document_id=user.id,
            data=user
        )
        return user
    
    async def delete(self, user_id: str) -> None:
        await self.firestore.delete_document(
            collection=USERS_COLLECTION,
            document_id=user_id
        )
    
    async def count(self) -> int:
        return await self.firestore.count_documents(collection=USERS_COLLECTION)


class TransactionStore:
    """Transaction records filtered by owner."""
    
    def __init__(self, firestore: FirestoreService):
        self.firestore = firestore
    
    async def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        return await self.firestore.get_document(
            collection=TRANSACTIONS_COLLECTION,
            document_id=transaction_id,
            model_class=Transaction
        )
    
    async def find_many(self, user_id: Optional[str] = None) -> List[Transaction]:
        """Transactions of one owner (or all when ``user_id`` is None), newest first."""
        where_clauses = []
        if user_id is not None:
            where_clauses.append(("user_id", "==", user_id))
        
        transactions = await self.firestore.query_documents(
            collection=TRANSACTIONS_COLLECTION,
            model_class=Transaction,
            where_clauses=where_clauses
        )
        return sorted(transactions, key=lambda t: t.created_at, reverse=True)
    
    async def create(self, transaction: Transaction) -> Transaction:
        await self.firestore.create_document(
            collection=TRANSACTIONS_COLLECTION,
            document_id=transaction.id,
            data=transaction
        )
        return transaction
    
    async def update(self, transaction: Transaction) -> Transaction:
        transaction.update_timestamp()
        await self.firestore.update_document(
            collection=TRANSACTIONS_COLLECTION,
            document_id=transaction.id,
            data=transaction
        )
        return transaction
    
    async def delete(self, transaction_id: str) -> None:
        await self.firestore.delete_document(
            collection=TRANSACTIONS_COLLECTION,
            document_id=transaction_id
        )
    
    async def delete_for_user(self, user_id: str) -> int:
        return await self.firestore.delete_where(
            collection=TRANSACTIONS_COLLECTION,
            where_clauses=[("user_id", "==", user_id)]
        )
