from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.auth import (
    InvalidTokenError,
    TokenExpiredError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.config import settings
from app.models.user import User


def _user() -> User:
    return User(id=42, email="ada@example.com", first_name="Ada", last_name="Lovelace")


def test_password_hash_roundtrip():
    password = "strong-pass-123"
    hashed = hash_password(password)
    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password(password, hashed)
    assert not verify_password("wrong-password", hashed)


def test_verify_password_rejects_malformed_hash():
    assert not verify_password("anything", "not-a-hash")


def test_access_token_carries_user_claims():
    claims = decode_access_token(create_access_token(_user()))
    assert claims["userId"] == 42
    assert claims["email"] == "ada@example.com"
    assert claims["firstName"] == "Ada"
    assert claims["iss"] == "jobtracker-api"
    assert claims["aud"] == "jobtracker-app"


def test_expired_token_is_rejected():
    token = create_access_token(_user(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenExpiredError):
        decode_access_token(token)


def test_tampered_token_is_rejected():
    token = create_access_token(_user())
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    with pytest.raises(InvalidTokenError):
        decode_access_token(tampered)


def test_token_for_another_audience_is_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"userId": 1, "iss": settings.jwt_issuer, "aud": "someone-else", "exp": now + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_token_without_user_id_is_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"iss": settings.jwt_issuer, "aud": settings.jwt_audience, "exp": now + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)
