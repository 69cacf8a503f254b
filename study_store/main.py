import asyncio
import contextlib
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from study_store.config import Settings, settings as default_settings
from study_store.database import init_db
from study_store.routers import admin, auth, catalog, checkout, downloads, health
from study_store.services.accounts import AccountStore
from study_store.services.catalog import CatalogStore
from study_store.services.checkout import CheckoutService
from study_store.services.credentials import CredentialStore
from study_store.services.invoices import InvoiceRenderer
from study_store.services.redemption import RedemptionService

LOGGER = logging.getLogger(__name__)


async def _sweep_credentials(store: CredentialStore, interval: int) -> None:
    while True:
        await asyncio.sleep(interval)
        store.purge_expired()


def create_app(
    settings: Settings | None = None, credentials: CredentialStore | None = None
) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Study Store Backend")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if credentials is None:
        credentials = CredentialStore(
            otp_ttl_seconds=settings.otp_ttl_seconds,
            token_ttl_seconds=settings.download_token_ttl_seconds,
            otp_bytes=settings.otp_bytes,
            token_bytes=settings.download_token_bytes,
            log_secrets=settings.otp_debug,
        )
    accounts = AccountStore()
    catalog_store = CatalogStore(Path(settings.files_dir))
    invoices = InvoiceRenderer(
        bills_dir=Path(settings.bills_dir),
        store_name=settings.store_name,
        store_email=settings.store_email,
        store_phone=settings.store_phone,
        tax_rate=settings.tax_rate,
        currency_label=settings.currency_label,
    )
    app.state.settings = settings
    app.state.credentials = credentials
    app.state.accounts = accounts
    app.state.catalog = catalog_store
    app.state.invoices = invoices
    app.state.checkout = CheckoutService(credentials, accounts, invoices, settings.tax_rate)
    app.state.redemption = RedemptionService(credentials, catalog_store)
    app.state.sweeper = None

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(checkout.router)
    app.include_router(downloads.router)
    app.include_router(catalog.router)
    app.include_router(admin.router)

    @app.on_event("startup")
    async def startup() -> None:
        init_db()
        Path(settings.bills_dir).mkdir(parents=True, exist_ok=True)
        Path(settings.files_dir).mkdir(parents=True, exist_ok=True)
        accounts.ensure_admin(settings.admin_email, settings.admin_password)
        if settings.credential_sweep_seconds > 0:
            app.state.sweeper = asyncio.create_task(
                _sweep_credentials(credentials, settings.credential_sweep_seconds)
            )
        LOGGER.info("Study store backend started")

    @app.on_event("shutdown")
    async def shutdown() -> None:
        sweeper = app.state.sweeper
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            app.state.sweeper = None
        credentials.clear()

    @app.get("/")
    def root():
        return {"status": "Backend running"}

    return app


app = create_app()
