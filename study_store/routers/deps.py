from fastapi import Header, HTTPException, Request, status

from study_store.config import Settings
from study_store.services.accounts import ADMIN_ROLE, AccountStore
from study_store.services.catalog import CatalogStore
from study_store.services.checkout import CheckoutService
from study_store.services.invoices import InvoiceRenderer
from study_store.services.redemption import RedemptionService
from study_store.services.tokens import AccessTokenData, TokenError, decode_access_token


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_account_store(request: Request) -> AccountStore:
    return request.app.state.accounts


def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.catalog


def get_invoice_renderer(request: Request) -> InvoiceRenderer:
    return request.app.state.invoices


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout


def get_redemption_service(request: Request) -> RedemptionService:
    return request.app.state.redemption


def require_admin(
    request: Request, authorization: str | None = Header(default=None)
) -> AccessTokenData:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
        )
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header",
        )
    try:
        access_data = decode_access_token(get_settings(request), token)
    except TokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    if access_data.role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized",
        )
    return access_data
