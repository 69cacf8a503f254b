from fastapi import APIRouter, Depends, HTTPException, status

from study_store.config import Settings
from study_store.routers.deps import get_account_store, get_settings
from study_store.schemas.accounts import (
    AccountResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SignupRequest,
)
from study_store.services.accounts import ADMIN_ROLE, BUYER_ROLE, AccountStore
from study_store.services.tokens import TokenError, create_access_token

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest, accounts: AccountStore = Depends(get_account_store)
) -> AccountResponse:
    try:
        return accounts.create_account(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
def login(
    payload: LoginRequest,
    accounts: AccountStore = Depends(get_account_store),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    if payload.role == ADMIN_ROLE:
        account = accounts.authenticate(payload.email, payload.password)
        if account is None or account.role != ADMIN_ROLE:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid admin credentials",
            )
    else:
        if payload.email == settings.admin_email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please use admin login for administrator account",
            )
        account = accounts.authenticate(payload.email, payload.password)
        if account is None or account.role != BUYER_ROLE:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password.",
            )

    if not settings.jwt_secret:
        return LoginResponse(message="Logged in", user=account)
    try:
        access_token = create_access_token(
            settings, account.id, account.email, account.role
        )
    except TokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return LoginResponse(
        message="Logged in",
        user=account,
        access_token=access_token,
        token_type="bearer",
        expires_in_seconds=settings.access_token_expire_minutes * 60,
    )


def _change_password(accounts: AccountStore, payload: ChangePasswordRequest, role: str) -> None:
    try:
        accounts.change_password(
            payload.email, payload.current_password, payload.new_password, role=role
        )
    except ValueError as exc:
        detail = str(exc)
        status_code = (
            status.HTTP_404_NOT_FOUND
            if "not found" in detail.lower()
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=status_code, detail=detail) from exc


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest, accounts: AccountStore = Depends(get_account_store)
) -> MessageResponse:
    _change_password(accounts, payload, BUYER_ROLE)
    return MessageResponse(message="Password updated successfully")


@router.post("/admin/change-password", response_model=MessageResponse)
def change_admin_password(
    payload: ChangePasswordRequest,
    accounts: AccountStore = Depends(get_account_store),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    if payload.email != settings.admin_email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized",
        )
    _change_password(accounts, payload, ADMIN_ROLE)
    return MessageResponse(message="Password updated successfully")
