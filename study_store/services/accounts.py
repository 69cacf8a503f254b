from datetime import datetime, timezone
import logging
import secrets
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from study_store.database import session_scope
from study_store.models.account import AccountEntry, PurchaseEntry
from study_store.schemas.accounts import AccountResponse, PurchaseResponse, SignupRequest
from study_store.services.pricing import CartLine

LOGGER = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
BUYER_ROLE = "buyer"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _password_matches(entry: AccountEntry, password: str) -> bool:
    return secrets.compare_digest(
        entry.password.encode("utf-8"), password.encode("utf-8")
    )


def _select_by_email(email: str):
    return (
        select(AccountEntry)
        .options(selectinload(AccountEntry.purchases))
        .where(AccountEntry.email == _normalize_email(email))
    )


class AccountStore:
    def create_account(self, payload: SignupRequest) -> AccountResponse:
        now = datetime.now(timezone.utc)
        email = _normalize_email(payload.email)
        with session_scope() as session:
            existing = session.execute(
                select(AccountEntry).where(AccountEntry.email == email)
            ).scalar_one_or_none()
            if existing:
                raise ValueError("Email already registered.")
            entry = AccountEntry(
                name=payload.name,
                email=email,
                password=payload.password,
                role=BUYER_ROLE,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.flush()
            LOGGER.info("Registered account email=%s", email)
            return self._to_response(entry)

    def authenticate(self, email: str, password: str) -> AccountResponse | None:
        with session_scope() as session:
            entry = session.execute(_select_by_email(email)).scalar_one_or_none()
            if entry is None or not _password_matches(entry, password):
                return None
            return self._to_response(entry)

    def exists(self, email: str) -> bool:
        if not email:
            return False
        with session_scope() as session:
            result = session.execute(
                select(AccountEntry.id).where(
                    AccountEntry.email == _normalize_email(email)
                )
            )
            return result.scalar_one_or_none() is not None

    def get_account(self, email: str) -> AccountResponse | None:
        with session_scope() as session:
            entry = session.execute(_select_by_email(email)).scalar_one_or_none()
            if entry is None:
                return None
            return self._to_response(entry)

    def list_accounts(self) -> list[AccountResponse]:
        with session_scope() as session:
            result = session.execute(
                select(AccountEntry)
                .options(selectinload(AccountEntry.purchases))
                .where(AccountEntry.role != ADMIN_ROLE)
                .order_by(AccountEntry.id)
            )
            return [self._to_response(entry) for entry in result.scalars().all()]

    def list_purchases(self, email: str) -> list[PurchaseResponse]:
        account = self.get_account(email)
        if account is None:
            raise ValueError("User not found")
        return account.purchases

    def append_purchases(
        self, email: str, lines: Iterable[CartLine], invoice: str | None = None
    ) -> None:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            entry = session.execute(
                select(AccountEntry).where(AccountEntry.email == _normalize_email(email))
            ).scalar_one_or_none()
            if entry is None:
                raise ValueError("User not found")
            for line in lines:
                session.add(
                    PurchaseEntry(
                        account_id=entry.id,
                        title=line.title,
                        price=line.price,
                        quantity=line.quantity,
                        invoice=invoice,
                        created_at=now,
                    )
                )
            entry.updated_at = now

    def change_password(
        self, email: str, current_password: str, new_password: str, role: str = BUYER_ROLE
    ) -> None:
        with session_scope() as session:
            entry = session.execute(
                select(AccountEntry).where(AccountEntry.email == _normalize_email(email))
            ).scalar_one_or_none()
            if entry is None or entry.role != role:
                raise ValueError("User not found")
            if not _password_matches(entry, current_password):
                raise ValueError("Current password is incorrect")
            entry.password = new_password
            entry.updated_at = datetime.now(timezone.utc)
            LOGGER.info("Password changed email=%s role=%s", entry.email, role)

    def ensure_admin(self, email: str, password: str) -> None:
        now = datetime.now(timezone.utc)
        key = _normalize_email(email)
        with session_scope() as session:
            entry = session.execute(
                select(AccountEntry).where(AccountEntry.email == key)
            ).scalar_one_or_none()
            if entry is not None:
                if entry.role != ADMIN_ROLE:
                    entry.role = ADMIN_ROLE
                    entry.updated_at = now
                return
            session.add(
                AccountEntry(
                    name="Admin",
                    email=key,
                    password=password,
                    role=ADMIN_ROLE,
                    created_at=now,
                    updated_at=now,
                )
            )
            LOGGER.info("Seeded admin account email=%s", key)

    def _to_response(self, entry: AccountEntry) -> AccountResponse:
        return AccountResponse(
            id=entry.id,
            name=entry.name,
            email=entry.email,
            role=entry.role or BUYER_ROLE,
            created_at=entry.created_at,
            purchases=[
                PurchaseResponse(
                    title=purchase.title,
                    price=purchase.price,
                    quantity=purchase.quantity,
                    invoice=purchase.invoice,
                    created_at=purchase.created_at,
                )
                for purchase in entry.purchases
            ],
        )
