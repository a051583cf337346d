"""
Transaction service for managing financial transactions.
"""
from typing import Dict, Iterable, List, Optional

import structlog

from ..infrastructure.stores import TransactionStore, UserStore
from ..models.auth import AuthenticatedSession, User
from ..models.financial import (
    Transaction,
    TransactionCreateRequest,
    TransactionResponse,
    TransactionUpdateRequest,
)
from ..utils.exceptions import NotFoundError
from .authorization import AccessScope, AuthorizationGate

logger = structlog.get_logger()


class TransactionService:
    """Service for transaction operations.

    Role checks for writes happen before these methods are called; reads
    take the scope or session they were authorized with.
    """
    
    def __init__(self, transactions: TransactionStore, users: UserStore, gate: AuthorizationGate):
        self.transactions = transactions
        self.users = users
        self.gate = gate
    
    async def _owners(self, user_ids: Iterable[str]) -> Dict[str, User]:
        owners = {}
        for user_id in set(user_ids):
            user = await self.users.find_by_id(user_id)
            if user is not None:
                owners[user_id] = user
        return owners
    
    async def _load(self, transaction_id: str) -> Transaction:
        transaction = await self.transactions.find_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError(resource_type="transaction", resource_id=transaction_id)
        return transaction
    
    async def list_transactions(self, scope: AccessScope) -> List[TransactionResponse]:
        """Visible transactions, newest first, each with its owner embedded."""
        transactions = await self.transactions.find_many(user_id=scope.owner_id)
        owners = await self._owners(t.user_id for t in transactions)
        return [
            TransactionResponse.from_transaction(t, owners.get(t.user_id))
            for t in transactions
        ]
    
    async def get_transaction(
        self,
        current: AuthenticatedSession,
        transaction_id: str
    ) -> TransactionResponse:
        # Absent ids answer 404 before the ownership check; ids are random uuid4
        transaction = await self._load(transaction_id)
        self.gate.require_owner_or_admin(current, transaction.user_id)
        owner = await self.users.find_by_id(transaction.user_id)
        return TransactionResponse.from_transaction(transaction, owner)
    
    async def create_transaction(
        self,
        request: TransactionCreateRequest,
        actor: Optional[User] = None
    ) -> TransactionResponse:
        """Record a transaction for ``request.user_id``."""
        owner = await self.users.find_by_id(request.user_id)
        if owner is None:
            raise NotFoundError(resource_type="user", resource_id=request.user_id)
        
        transaction = Transaction(**request.model_dump())
        await self.transactions.create(transaction)
        
        logger.info(
            "Transaction created",
            transaction_id=transaction.id,
            user_id=transaction.user_id,
            created_by=actor.id if actor else None,
            type=transaction.type.value,
            amount=str(transaction.amount)
        )
        return TransactionResponse.from_transaction(transaction, owner)
    
    async def update_transaction(
        self,
        transaction_id: str,
        request: TransactionUpdateRequest
    ) -> TransactionResponse:
        transaction = await self._load(transaction_id)
        
        for field, value in request.model_dump().items():
            setattr(transaction, field, value)
        await self.transactions.update(transaction)
        
        logger.info(
            "Transaction updated",
            transaction_id=transaction_id,
            fields_updated=sorted(request.model_fields_set)
        )
        owner = await self.users.find_by_id(transaction.user_id)
        return TransactionResponse.from_transaction(transaction, owner)
    
    async def delete_transaction(self, transaction_id: str) -> None:
        transaction = await self._load(transaction_id)
        await self.transactions.delete(transaction_id)
        
        logger.info(
            "Transaction deleted",
            transaction_id=transaction_id,
            user_id=transaction.user_id,
            amount=str(transaction.amount)
        )
