"""
Transaction management endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..models.financial import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionUpdateRequest
)
from ..services.transaction import TransactionService
from ..utils.dependencies import AdminSession, CurrentSession, Gate, get_transaction_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get(
    "",
    response_model=List[TransactionResponse],
    summary="List Transactions",
    description="Visible transactions, newest first."
)
async def list_transactions(
    current: CurrentSession,
    gate: Gate,
    user_id: Optional[str] = Query(None, description="Only transactions owned by this user"),
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> List[TransactionResponse]:
    scope = gate.scope_for(current, user_id)
    return await transaction_service.list_transactions(scope)


@router.get("/{transaction_id}", response_model=TransactionResponse, summary="Get Transaction")
async def get_transaction(
    transaction_id: str,
    current: CurrentSession,
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> TransactionResponse:
    return await transaction_service.get_transaction(current, transaction_id)


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Transaction",
    description="Record a transaction on behalf of an existing user."
)
async def create_transaction(
    request: TransactionCreateRequest,
    current: AdminSession,
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> TransactionResponse:
    return await transaction_service.create_transaction(request, actor=current.user)


@router.put("/{transaction_id}", response_model=TransactionResponse, summary="Update Transaction")
async def update_transaction(
    transaction_id: str,
    request: TransactionUpdateRequest,
    current: AdminSession,
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> TransactionResponse:
    return await transaction_service.update_transaction(transaction_id, request)


@router.delete("/{transaction_id}", summary="Delete Transaction")
async def delete_transaction(
    transaction_id: str,
    current: AdminSession,
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> dict:
    await transaction_service.delete_transaction(transaction_id)
    return {"success": True}
