from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from truthmeter.api.deps import get_secret_service
from truthmeter.core.auth import require_admin, verify_api_key
from truthmeter.core.errors import NotFoundAppError, ValidationAppError
from truthmeter.schemas.secret import MessageResponse, SecretView
from truthmeter.schemas.user import UserStats
from truthmeter.services.secret_service import SecretService

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_api_key)])

ServiceDep = Annotated[SecretService, Depends(get_secret_service)]
AdminDep = Annotated[str, Depends(require_admin)]


@router.get("/users", response_model=list[UserStats])
def list_users(admin_id: AdminDep, service: ServiceDep) -> list[UserStats]:
    return service.list_users_with_stats()


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: str, admin_id: AdminDep, service: ServiceDep) -> MessageResponse:
    """Delete a user, their secrets and their votes."""

    if user_id == admin_id:
        raise ValidationAppError(code="cannot_delete_self", message="You cannot delete your own account.")
    if not service.delete_user(user_id):
        raise NotFoundAppError(code="user_not_found", message="User not found.")
    return MessageResponse(message="User deleted.")


@router.get("/secrets", response_model=list[SecretView])
def list_all_secrets(
    admin_id: AdminDep,
    service: ServiceDep,
    limit: Annotated[Optional[int], Query(ge=1, description="Defaults to 200.")] = None,
) -> list[SecretView]:
    return service.list_all_secrets(limit)


@router.delete("/secrets/{secret_id}", response_model=MessageResponse)
def delete_secret(secret_id: int, admin_id: AdminDep, service: ServiceDep) -> MessageResponse:
    if not service.delete_secret(secret_id):
        raise NotFoundAppError(code="secret_not_found", message="Secret not found.")
    return MessageResponse(message="Secret deleted.")
