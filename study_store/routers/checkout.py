from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from study_store.routers.deps import (
    get_account_store,
    get_checkout_service,
    get_invoice_renderer,
)
from study_store.schemas.accounts import AccountResponse
from study_store.schemas.checkout import (
    CheckoutRequest,
    CheckoutResponse,
    RecordPurchaseRequest,
)
from study_store.services.accounts import AccountStore
from study_store.services.checkout import (
    CheckoutService,
    EmptyCart,
    RenderFailed,
    UnknownAccount,
)
from study_store.services.invoices import InvoiceRenderer

router = APIRouter(tags=["checkout"])


@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    payload: CheckoutRequest,
    service: CheckoutService = Depends(get_checkout_service),
) -> CheckoutResponse:
    lines = [item.to_line() for item in payload.cart]
    try:
        result = service.checkout(payload.email, lines)
    except EmptyCart as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request. Email and cart are required.",
        ) from exc
    except UnknownAccount as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except RenderFailed as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return CheckoutResponse(
        message="Checkout complete",
        download=f"/download-bill/{result.artifact}",
        passwords=result.secrets_by_item,
        subtotal=result.totals.subtotal,
        tax=result.totals.tax,
        total=result.totals.total,
    )


@router.post("/record-purchase", response_model=AccountResponse)
def record_purchase(
    payload: RecordPurchaseRequest,
    accounts: AccountStore = Depends(get_account_store),
) -> AccountResponse:
    if not accounts.exists(payload.email):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    accounts.append_purchases(payload.email, [item.to_line() for item in payload.purchases])
    return accounts.get_account(payload.email)


@router.get("/download-bill/{filename}")
def download_bill(
    filename: str, renderer: InvoiceRenderer = Depends(get_invoice_renderer)
) -> FileResponse:
    path = renderer.resolve(filename)
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found.")
    return FileResponse(path, media_type="application/pdf", filename=path.name)
