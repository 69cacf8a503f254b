"""Checkout: price the cart, mint one password per item, render the invoice.

Passwords are issued one item at a time. If rendering fails afterwards the
already-issued passwords stay valid; there is no rollback.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Sequence

from study_store.services.accounts import AccountStore
from study_store.services.credentials import CredentialStore
from study_store.services.invoices import InvoiceDocument, InvoiceRenderError, InvoiceRenderer
from study_store.services.pricing import CartLine, Totals, compute_totals

LOGGER = logging.getLogger(__name__)


class UnknownAccount(LookupError):
    pass


class EmptyCart(ValueError):
    pass


class RenderFailed(RuntimeError):
    pass


@dataclass(frozen=True)
class CheckoutResult:
    artifact: str
    secrets_by_item: dict[str, str]
    totals: Totals


class CheckoutService:
    def __init__(
        self,
        credentials: CredentialStore,
        accounts: AccountStore,
        renderer: InvoiceRenderer,
        tax_rate: Decimal,
    ) -> None:
        self._credentials = credentials
        self._accounts = accounts
        self._renderer = renderer
        self._tax_rate = tax_rate

    def checkout(self, email: str, lines: Sequence[CartLine]) -> CheckoutResult:
        if not lines:
            raise EmptyCart("Cart is empty")
        account = self._accounts.get_account(email)
        if account is None:
            raise UnknownAccount("User not found.")

        secrets_by_item: dict[str, str] = {}
        for line in lines:
            secrets_by_item[line.title] = self._credentials.issue_otp(
                account.email, line.title
            )

        totals = compute_totals(lines, self._tax_rate)
        document = InvoiceDocument(
            account_name=account.name,
            account_email=account.email,
            lines=list(lines),
            totals=totals,
            secrets_by_item=secrets_by_item,
        )
        try:
            artifact = self._renderer.render(document)
        except InvoiceRenderError as exc:
            raise RenderFailed("Failed to generate invoice") from exc

        self._accounts.append_purchases(account.email, lines, invoice=artifact)
        LOGGER.info(
            "Checkout completed account=%s items=%d total=%s invoice=%s",
            account.email,
            len(lines),
            totals.total,
            artifact,
        )
        return CheckoutResult(
            artifact=artifact, secrets_by_item=secrets_by_item, totals=totals
        )
