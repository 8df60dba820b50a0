"""Unit tests for JWT handler and the identity dependency."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.ps_common.errors import InvalidCredentialsError
from src.ps_gateway.auth.dependencies import get_current_identity
from src.ps_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("0xalice")
    # Decode without verification to inspect claims
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "0xalice"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    token = create_access_token("0xbob")
    payload = decode_token(token)
    assert payload["sub"] == "0xbob"


def test_decode_token_signed_with_other_secret_raises() -> None:
    token = jwt.encode(
        {"sub": "0xbob", "type": "access"}, "other-secret", algorithm=settings.JWT_ALGORITHM
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_decode_expired_token_raises() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "0xbob", "type": "access", "iat": now - timedelta(hours=2),
         "exp": now - timedelta(hours=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_decode_wrong_type_raises() -> None:
    token = jwt.encode(
        {"sub": "0xbob", "type": "refresh"},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


async def test_get_current_identity_returns_sub() -> None:
    token = create_access_token("0xcarol")
    assert await get_current_identity(token) == "0xcarol"


async def test_get_current_identity_rejects_bad_token() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_identity("not-a-token")
    assert exc_info.value.status_code == 401
