from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from study_store.services.catalog import CatalogStore
from study_store.services.credentials import CredentialStore

LOGGER = logging.getLogger(__name__)

DENIED_PASSWORD_MESSAGE = (
    "Invalid or expired password. Please complete checkout to get a new password."
)
DENIED_DOWNLOAD_MESSAGE = "Download link expired or invalid"


class DownloadDenied(PermissionError):
    pass


class FileMissing(LookupError):
    pass


@dataclass(frozen=True)
class Delivery:
    title: str
    path: Path


class RedemptionService:
    def __init__(self, credentials: CredentialStore, catalog: CatalogStore) -> None:
        self._credentials = credentials
        self._catalog = catalog

    def exchange_secret(self, email: str, title: str, secret: str) -> str:
        token = self._credentials.redeem_otp(email, title, secret)
        if token is None:
            LOGGER.warning("Password exchange denied account=%s item=%s", email, title)
            raise DownloadDenied(DENIED_PASSWORD_MESSAGE)
        return token

    def fetch(self, token: str) -> Delivery:
        # The token is spent here, before the file is looked up.
        grant = self._credentials.consume_token(token)
        if grant is None:
            raise DownloadDenied(DENIED_DOWNLOAD_MESSAGE)
        path = self._catalog.resolve_file_path(grant.item)
        if path is None:
            LOGGER.error("No file registered for item=%s", grant.item)
            raise FileMissing("File not found")
        return Delivery(title=grant.item, path=path)

    def status(self, email: str, title: str) -> bool:
        return self._credentials.has_pending_otp(email, title)
