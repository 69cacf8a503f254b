import pytest

from study_store.config import Settings
from study_store.services.tokens import TokenError, create_access_token, decode_access_token


def test_round_trip_carries_role():
    settings = Settings(jwt_secret="s3cret")
    token = create_access_token(settings, 7, "admin@study.com", "admin")
    data = decode_access_token(settings, token)
    assert (data.account_id, data.email, data.role) == (7, "admin@study.com", "admin")


def test_unconfigured_secret():
    with pytest.raises(TokenError):
        create_access_token(Settings(jwt_secret=""), 1, "a@b.c", "buyer")


def test_foreign_signature_rejected():
    token = create_access_token(Settings(jwt_secret="one"), 1, "a@b.c", "admin")
    with pytest.raises(TokenError):
        decode_access_token(Settings(jwt_secret="two"), token)


def test_expired_token_rejected():
    settings = Settings(jwt_secret="s3cret", access_token_expire_minutes=-1)
    token = create_access_token(settings, 1, "a@b.c", "buyer")
    with pytest.raises(TokenError, match="expired"):
        decode_access_token(settings, token)
