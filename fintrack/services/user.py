"""
User administration.
"""
from typing import List

import structlog

from ..infrastructure.stores import SessionStore, TransactionStore, UserStore
from ..models.auth import AuthenticatedSession, User, UserResponse, UserUpdateRequest
from ..utils.exceptions import NotFoundError
from .authorization import AccessScope, AuthorizationGate

logger = structlog.get_logger()


class UserService:
    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        transactions: TransactionStore,
        gate: AuthorizationGate
    ):
        self.users = users
        self.sessions = sessions
        self.transactions = transactions
        self.gate = gate
    
    async def _load(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(resource_type="user", resource_id=user_id)
        return user
    
    async def list_users(self, scope: AccessScope) -> List[UserResponse]:
        users = await self.users.find_many(user_id=scope.owner_id)
        return [UserResponse.from_user(user) for user in users]
    
    async def get_user(self, current: AuthenticatedSession, user_id: str) -> UserResponse:
        self.gate.require_owner_or_admin(current, user_id)
        return UserResponse.from_user(await self._load(user_id))
    
    async def update_user(self, user_id: str, request: UserUpdateRequest) -> UserResponse:
        user = await self._load(user_id)
        user.name = request.name
        user.role = request.role
        await self.users.update(user)
        
        logger.info("User updated", user_id=user_id, role=user.role.value)
        return UserResponse.from_user(user)
    
    async def delete_user(self, user_id: str) -> None:
        """Delete a user together with their sessions and transactions."""
        await self._load(user_id)
        
        sessions_deleted = await self.sessions.delete_for_user(user_id)
        transactions_deleted = await self.transactions.delete_for_user(user_id)
        await self.users.delete(user_id)
        
        logger.info(
            "User deleted",
            user_id=user_id,
            sessions_deleted=sessions_deleted,
            transactions_deleted=transactions_deleted
        )
