"""
User management endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends

from ..models.auth import UserResponse, UserUpdateRequest
from ..services.user import UserService
from ..utils.dependencies import AdminSession, CurrentSession, Gate, get_user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=List[UserResponse],
    summary="List Users",
    description="Administrators see every user; everyone else sees only themselves."
)
async def list_users(
    current: CurrentSession,
    gate: Gate,
    user_service: UserService = Depends(get_user_service)
) -> List[UserResponse]:
    return await user_service.list_users(gate.scope_for(current))


@router.get("/{user_id}", response_model=UserResponse, summary="Get User")
async def get_user(
    user_id: str,
    current: CurrentSession,
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    return await user_service.get_user(current, user_id)


@router.put("/{user_id}", response_model=UserResponse, summary="Update User")
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    current: AdminSession,
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    return await user_service.update_user(user_id, request)


@router.delete("/{user_id}", summary="Delete User")
async def delete_user(
    user_id: str,
    current: AdminSession,
    user_service: UserService = Depends(get_user_service)
) -> dict:
    """Delete a user together with their sessions and transactions."""
    await user_service.delete_user(user_id)
    return {"success": True}
