"""Password exchange and single-use downloads over HTTP."""
import pytest

FILE_BYTES = b"%PDF-1.4 physics notes"
TITLE = "Physics Notes"


@pytest.fixture
def listed_item(client, admin_headers):
    response = client.post(
        "/admin/add-item",
        data={"title": TITLE, "price": "120", "desc": "Chapter 1-5", "subject": "phy"},
        files={"file": ("physics notes.pdf", FILE_BYTES, "application/pdf")},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def _checkout(client, email, title=TITLE):
    response = client.post(
        "/checkout",
        json={"email": email, "cart": [{"title": title, "price": "120", "quantity": 1}]},
    )
    assert response.status_code == 200, response.text
    return response.json()["passwords"][title]


def test_full_purchase_flow(client, buyer, listed_item):
    email, _ = buyer
    password = _checkout(client, email)

    status = client.post("/check-password-status", json={"email": email, "title": TITLE})
    assert status.json() == {"has_password": True, "message": "Password available"}

    verify = client.post(
        "/verify-password", json={"email": email, "title": TITLE, "password": password}
    )
    assert verify.status_code == 200, verify.text
    link = verify.json()["download"]
    assert verify.json()["expires_in_seconds"] == 300

    first = client.get(link)
    assert first.status_code == 200
    assert first.content == FILE_BYTES

    second = client.get(link)
    assert second.status_code == 403
    assert second.json()["detail"] == "Download link expired or invalid"


def test_password_works_only_once(client, buyer, listed_item):
    email, _ = buyer
    password = _checkout(client, email)
    body = {"email": email, "title": TITLE, "password": password}

    assert client.post("/verify-password", json=body).status_code == 200
    again = client.post("/verify-password", json=body)
    assert again.status_code == 400

    status = client.post("/check-password-status", json={"email": email, "title": TITLE})
    assert status.json()["has_password"] is False


def test_denials_are_indistinguishable(client, buyer, listed_item):
    email, _ = buyer
    _checkout(client, email)

    wrong = client.post(
        "/verify-password", json={"email": email, "title": TITLE, "password": "zzzzzz"}
    )
    never_bought = client.post(
        "/verify-password",
        json={"email": email, "title": "Chemistry", "password": "abcdef"},
    )
    assert wrong.status_code == never_bought.status_code == 400
    assert wrong.json() == never_bought.json()


def test_status_check_is_read_only(client, buyer, listed_item):
    email, _ = buyer
    password = _checkout(client, email)
    for _ in range(3):
        client.post("/check-password-status", json={"email": email, "title": TITLE})
    verify = client.post(
        "/verify-password", json={"email": email, "title": TITLE, "password": password}
    )
    assert verify.status_code == 200


def test_email_case_does_not_matter(client, buyer, listed_item):
    email, _ = buyer
    password = _checkout(client, email.upper())
    verify = client.post(
        "/verify-password", json={"email": email, "title": TITLE, "password": password}
    )
    assert verify.status_code == 200


def test_unknown_token_forbidden(client):
    response = client.get("/download/0123456789abcdef")
    assert response.status_code == 403


def test_missing_file_still_spends_token(client, buyer):
    email, _ = buyer
    password = _checkout(client, email, title="Unlisted Guide")
    verify = client.post(
        "/verify-password",
        json={"email": email, "title": "Unlisted Guide", "password": password},
    )
    link = verify.json()["download"]

    assert client.get(link).status_code == 404
    assert client.get(link).status_code == 403


def test_expired_token_forbidden(settings, clock):
    from fastapi.testclient import TestClient

    from study_store.main import create_app
    from study_store.services.credentials import CredentialStore

    store = CredentialStore(otp_ttl_seconds=3600, token_ttl_seconds=300, clock=clock)
    with TestClient(create_app(settings, credentials=store)) as client:
        client.post(
            "/signup",
            json={"name": "Ravi", "email": "ravi@example.com", "password": "pw"},
        )
        password = _checkout(client, "ravi@example.com", title="Maths Guide")
        verify = client.post(
            "/verify-password",
            json={"email": "ravi@example.com", "title": "Maths Guide", "password": password},
        )
        assert verify.status_code == 200

        clock.advance(301)
        assert client.get(verify.json()["download"]).status_code == 403
