from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from truthmeter.api.deps import get_secret_service
from truthmeter.core.auth import get_current_user_id, verify_api_key
from truthmeter.schemas.secret import (
    CreateSecretRequest,
    CreateSecretResponse,
    SecretView,
    VoteRequest,
    VoteTally,
)
from truthmeter.services.secret_service import SecretService

router = APIRouter(tags=["Secrets"], dependencies=[Depends(verify_api_key)])

ServiceDep = Annotated[SecretService, Depends(get_secret_service)]
UserIdDep = Annotated[str, Depends(get_current_user_id)]


@router.get("/categories", response_model=list[str])
def list_categories(user_id: UserIdDep, service: ServiceDep) -> list[str]:
    """Return the allowed categories in display order."""

    return service.list_categories()


@router.post(
    "/secrets",
    response_model=CreateSecretResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_secret(
    payload: CreateSecretRequest,
    user_id: UserIdDep,
    service: ServiceDep,
) -> CreateSecretResponse:
    """Share a secret.

    Raises 400 for an unknown category or bad length and 429 when the user
    posted less than the throttle window ago.
    """

    secret_id = service.create_secret(user_id, payload.category, payload.content)
    return CreateSecretResponse(id=secret_id)


@router.get("/secrets", response_model=list[SecretView])
def list_secrets(
    user_id: UserIdDep,
    service: ServiceDep,
    category: Annotated[Optional[str], Query(description="Only return this category.")] = None,
) -> list[SecretView]:
    """Newest secrets first, at most 100."""

    return service.list_secrets(category)


@router.get("/random", response_model=SecretView)
def random_secret(user_id: UserIdDep, service: ServiceDep) -> SecretView:
    return service.get_random_secret()


@router.post("/secrets/{secret_id}/vote", response_model=VoteTally)
def vote(
    secret_id: int,
    payload: VoteRequest,
    user_id: UserIdDep,
    service: ServiceDep,
) -> VoteTally:
    """Cast a one-time truth/lie vote and return the current tallies.

    Voting again is accepted and leaves the tallies unchanged.
    """

    return service.record_vote(secret_id, user_id, payload.vote_type)
