from fastapi import APIRouter, Depends, HTTPException, status

from study_store.routers.deps import get_account_store, require_admin
from study_store.schemas.accounts import AccountResponse, PurchaseResponse
from study_store.services.accounts import AccountStore
from study_store.services.tokens import AccessTokenData

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[AccountResponse])
def list_users(
    accounts: AccountStore = Depends(get_account_store),
    _: AccessTokenData = Depends(require_admin),
) -> list[AccountResponse]:
    return accounts.list_accounts()


@router.get("/user-purchases/{email}", response_model=list[PurchaseResponse])
def user_purchases(
    email: str,
    accounts: AccountStore = Depends(get_account_store),
    _: AccessTokenData = Depends(require_admin),
) -> list[PurchaseResponse]:
    try:
        return accounts.list_purchases(email)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
