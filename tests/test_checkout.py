from datetime import datetime, timezone
from decimal import Decimal

import pytest

from study_store.schemas.accounts import AccountResponse
from study_store.services.checkout import CheckoutService, EmptyCart, RenderFailed, UnknownAccount
from study_store.services.credentials import CredentialStore
from study_store.services.invoices import InvoiceRenderError
from study_store.services.pricing import CartLine

BUYER = "asha@example.com"
CART = [
    CartLine(title="A", price=Decimal("100"), quantity=2),
    CartLine(title="B", price=Decimal("50"), quantity=1),
]


class StubAccounts:
    def __init__(self, *emails):
        self.known = set(emails)
        self.appended = []

    def get_account(self, email):
        if email not in self.known:
            return None
        return AccountResponse(
            id=1,
            name="Asha Rao",
            email=email,
            role="buyer",
            created_at=datetime.now(timezone.utc),
        )

    def append_purchases(self, email, lines, invoice=None):
        self.appended.append((email, [line.title for line in lines], invoice))


class StubRenderer:
    def __init__(self, fail=False):
        self.fail = fail
        self.documents = []

    def render(self, document):
        if self.fail:
            raise InvoiceRenderError("disk full")
        self.documents.append(document)
        return "asha@example.com_bill_1.pdf"


@pytest.fixture
def credentials():
    return CredentialStore(otp_ttl_seconds=3600)


def test_checkout_issues_one_password_per_item(credentials):
    accounts = StubAccounts(BUYER)
    renderer = StubRenderer()
    service = CheckoutService(credentials, accounts, renderer, Decimal("0.18"))

    result = service.checkout(BUYER, CART)

    assert set(result.secrets_by_item) == {"A", "B"}
    assert result.artifact == "asha@example.com_bill_1.pdf"
    assert result.totals.subtotal == Decimal("250.00")
    assert result.totals.tax == Decimal("45.00")
    assert result.totals.total == Decimal("295.00")
    assert renderer.documents[0].secrets_by_item == result.secrets_by_item
    assert accounts.appended == [(BUYER, ["A", "B"], "asha@example.com_bill_1.pdf")]
    for title, secret in result.secrets_by_item.items():
        assert credentials.redeem_otp(BUYER, title, secret) is not None


def test_empty_cart_issues_nothing(credentials):
    service = CheckoutService(credentials, StubAccounts(BUYER), StubRenderer(), Decimal("0.18"))
    with pytest.raises(EmptyCart):
        service.checkout(BUYER, [])
    assert credentials.purge_expired() == 0
    assert not credentials.has_pending_otp(BUYER, "A")


def test_unknown_account_rejected_before_issuing(credentials):
    service = CheckoutService(credentials, StubAccounts(), StubRenderer(), Decimal("0.18"))
    with pytest.raises(UnknownAccount):
        service.checkout(BUYER, CART)
    assert not credentials.has_pending_otp(BUYER, "A")


def test_render_failure_keeps_issued_passwords(credentials):
    accounts = StubAccounts(BUYER)
    service = CheckoutService(credentials, accounts, StubRenderer(fail=True), Decimal("0.18"))

    with pytest.raises(RenderFailed):
        service.checkout(BUYER, CART)

    assert credentials.has_pending_otp(BUYER, "A")
    assert credentials.has_pending_otp(BUYER, "B")
    assert accounts.appended == []


def test_checkout_endpoint_returns_totals_and_invoice(client, buyer):
    email, _ = buyer
    response = client.post(
        "/checkout",
        json={
            "email": email,
            "cart": [
                {"title": "A", "price": "100", "quantity": 2},
                {"title": "B", "price": "50", "quantity": 1},
            ],
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert Decimal(data["subtotal"]) == Decimal("250.00")
    assert Decimal(data["tax"]) == Decimal("45.00")
    assert Decimal(data["total"]) == Decimal("295.00")
    assert set(data["passwords"]) == {"A", "B"}
    assert data["download"].startswith("/download-bill/")

    bill = client.get(data["download"])
    assert bill.status_code == 200
    assert bill.headers["content-type"] == "application/pdf"
    assert bill.content.startswith(b"%PDF")


def test_checkout_endpoint_empty_cart(client, buyer):
    email, _ = buyer
    response = client.post("/checkout", json={"email": email, "cart": []})
    assert response.status_code == 400
    status = client.post("/check-password-status", json={"email": email, "title": "A"})
    assert status.json()["has_password"] is False


def test_checkout_endpoint_unknown_account(client):
    response = client.post(
        "/checkout",
        json={"email": "ghost@example.com", "cart": [{"title": "A", "price": "10"}]},
    )
    assert response.status_code == 404


def test_checkout_records_purchases(client, buyer, admin_headers):
    email, _ = buyer
    client.post(
        "/checkout",
        json={"email": email, "cart": [{"title": "A", "price": "100", "quantity": 2}]},
    )
    response = client.get(f"/admin/user-purchases/{email}", headers=admin_headers)
    assert response.status_code == 200
    purchases = response.json()
    assert [(p["title"], p["quantity"]) for p in purchases] == [("A", 2)]
    assert purchases[0]["invoice"].endswith(".pdf")


def test_missing_bill_is_404(client):
    assert client.get("/download-bill/nothing.pdf").status_code == 404
    assert client.get("/download-bill/..%2Fsecret.pdf").status_code == 404


def test_record_purchase_appends_to_history(client, buyer):
    email, _ = buyer
    response = client.post(
        "/record-purchase",
        json={
            "email": email.upper(),
            "purchases": [{"title": "Algebra", "price": "49.99", "quantity": 3}],
        },
    )
    assert response.status_code == 200, response.text
    account = response.json()
    assert account["email"] == email
    assert "password" not in account
    assert [(p["title"], p["quantity"], p["invoice"]) for p in account["purchases"]] == [
        ("Algebra", 3, None)
    ]


def test_record_purchase_unknown_account(client):
    response = client.post(
        "/record-purchase",
        json={"email": "ghost@example.com", "purchases": [{"title": "A", "price": "1"}]},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found."
