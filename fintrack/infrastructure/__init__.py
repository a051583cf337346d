"""
Infrastructure layer for external service clients.
"""
from .firestore import FirestoreService
from .stores import SessionStore, TransactionStore, UserStore

__all__ = [
    "FirestoreService",
    "SessionStore",
    "UserStore",
    "TransactionStore",
]
