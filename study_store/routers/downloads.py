from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from study_store.config import Settings
from study_store.routers.deps import get_redemption_service, get_settings
from study_store.schemas.downloads import (
    PasswordStatusRequest,
    PasswordStatusResponse,
    PasswordVerifyRequest,
    PasswordVerifyResponse,
)
from study_store.services.redemption import DownloadDenied, FileMissing, RedemptionService

router = APIRouter(tags=["downloads"])


@router.post("/verify-password", response_model=PasswordVerifyResponse)
def verify_password(
    payload: PasswordVerifyRequest,
    service: RedemptionService = Depends(get_redemption_service),
    settings: Settings = Depends(get_settings),
) -> PasswordVerifyResponse:
    try:
        token = service.exchange_secret(payload.email, payload.title, payload.password)
    except DownloadDenied as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return PasswordVerifyResponse(
        message="Password verified",
        download=f"/download/{token}",
        expires_in_seconds=settings.download_token_ttl_seconds,
    )


@router.get("/download/{token}")
def download(
    token: str, service: RedemptionService = Depends(get_redemption_service)
) -> FileResponse:
    try:
        delivery = service.fetch(token)
    except DownloadDenied as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except FileMissing as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return FileResponse(delivery.path, filename=delivery.path.name)


@router.post("/check-password-status", response_model=PasswordStatusResponse)
def check_password_status(
    payload: PasswordStatusRequest,
    service: RedemptionService = Depends(get_redemption_service),
) -> PasswordStatusResponse:
    pending = service.status(payload.email, payload.title)
    return PasswordStatusResponse(
        has_password=pending,
        message="Password available" if pending else "Password expired or not generated",
    )
