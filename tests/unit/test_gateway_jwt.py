"""Unit tests for JWT handler."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from src.ova_common.errors import InvalidCredentialsError, InvalidRefreshTokenError
from src.ova_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)


def test_access_token_carries_subject_type_and_role() -> None:
    token = create_access_token("user-123", "ADMIN")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["type"] == "access"
    assert payload["role"] == "ADMIN"


def test_refresh_token_has_no_role() -> None:
    token = create_refresh_token("user-123")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["type"] == "refresh"
    assert "role" not in payload


def test_decode_valid_access_token() -> None:
    token = create_access_token("user-abc", "COLLECTOR")
    payload = decode_token(token, expected_type="access")
    assert payload["sub"] == "user-abc"


def test_decode_valid_refresh_token() -> None:
    token = create_refresh_token("user-abc")
    payload = decode_token(token, expected_type="refresh")
    assert payload["type"] == "refresh"


def test_access_token_used_as_refresh_raises_error() -> None:
    token = create_access_token("user-abc", "COLLECTOR")
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(token, expected_type="refresh")


def test_refresh_token_used_as_access_raises_error() -> None:
    token = create_refresh_token("user-abc")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token, expected_type="access")


def test_expired_access_token_raises_credentials_error() -> None:
    with patch(
        "src.ova_gateway.auth.jwt_handler._ACCESS_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_access_token("user-abc", "COLLECTOR")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token, expected_type="access")


def test_expired_refresh_token_raises_refresh_error() -> None:
    with patch(
        "src.ova_gateway.auth.jwt_handler._REFRESH_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_refresh_token("user-abc")
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(token, expected_type="refresh")


def test_token_signed_with_other_secret_is_rejected() -> None:
    forged = jwt.encode({"sub": "user-abc", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(forged, expected_type="access")
