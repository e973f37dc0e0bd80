"""JWT handler and password hashing."""

import pytest
from jose import jwt

from src.rx_common.errors import InvalidCredentialsError, InvalidRefreshTokenError
from src.rx_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.rx_gateway.auth.password import hash_password, verify_password


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("user-123")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["type"] == "access"
    assert payload["exp"] > payload["iat"]


def test_decode_valid_refresh_token() -> None:
    token = create_refresh_token("user-abc")
    payload = decode_token(token, expected_type="refresh")
    assert payload["sub"] == "user-abc"


def test_access_token_used_as_refresh_raises_error() -> None:
    token = create_access_token("user-abc")
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(token, expected_type="refresh")


def test_refresh_token_used_as_access_raises_error() -> None:
    token = create_refresh_token("user-abc")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token, expected_type="access")


def test_tampered_token_rejected() -> None:
    token = create_access_token("user-abc")
    forged = jwt.encode(jwt.get_unverified_claims(token), "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(forged, expected_type="access")


def test_garbage_token_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not.a.jwt", expected_type="access")


class TestPassword:
    def test_hash_verifies(self) -> None:
        hashed = hash_password("Secret123")
        assert hashed != "Secret123"
        assert verify_password("Secret123", hashed)

    def test_wrong_password(self) -> None:
        assert not verify_password("Wrong123", hash_password("Secret123"))

    def test_salted(self) -> None:
        assert hash_password("Secret123") != hash_password("Secret123")
