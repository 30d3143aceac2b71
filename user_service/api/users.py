"""User account API endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status

from user_service.api.dependencies import get_account_service, get_current_account_id
from user_service.errors import NotFound
from user_service.schemas.account import AccountProfileResponse, AccountResponse, TokenResponse
from user_service.schemas.envelope import SuccessEnvelope
from user_service.services.account_service import AccountService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post(
    "",
    response_model=SuccessEnvelope[AccountResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: Annotated[dict[str, Any], Body()],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """Register a new account."""
    return SuccessEnvelope(data=service.register(payload))


@router.post("/login", response_model=SuccessEnvelope[TokenResponse])
def login(
    payload: Annotated[dict[str, Any], Body()],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """Login with email and password. Any previous token stops working."""
    return SuccessEnvelope(data=service.login(payload))


@router.get("/{user_id}", response_model=SuccessEnvelope[AccountProfileResponse])
def get_user(
    user_id: str,
    current_account_id: Annotated[UUID, Depends(get_current_account_id)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """Get an account by id, along with the id of the caller."""
    try:
        account_id = UUID(user_id)
    except ValueError:
        raise NotFound("Account not found") from None

    account = service.get_account(account_id)
    return SuccessEnvelope(
        data=AccountProfileResponse(
            **account.model_dump(),
            authenticated_as=current_account_id,
        )
    )
