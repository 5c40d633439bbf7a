"""Tests for password hashing and access token helpers."""

from datetime import timedelta
from types import SimpleNamespace
from uuid import uuid4

import pytest
from jose import jwt

from celengan.config import settings
from celengan.core.security import (
    create_access_token,
    create_user_token,
    decode_token,
    get_token_subject,
    hash_password,
    verify_password,
)


@pytest.mark.unit
class TestPasswords:
    def test_hash_round_trip(self):
        hashed = hash_password("rahasia123")

        assert hashed != "rahasia123"
        assert verify_password("rahasia123", hashed) is True
        assert verify_password("salah", hashed) is False


@pytest.mark.unit
class TestTokens:
    """Access token subject extraction."""

    def test_user_token_carries_id_and_email(self):
        user = SimpleNamespace(id=uuid4(), email="siti@example.com")

        payload = decode_token(create_user_token(user))

        assert payload["sub"] == str(user.id)
        assert payload["email"] == "siti@example.com"
        assert payload["type"] == "access"

    def test_subject_of_valid_token(self):
        user_id = uuid4()
        assert get_token_subject(create_access_token(data={"sub": str(user_id)})) == user_id

    def test_expired_token(self):
        token = create_access_token(
            data={"sub": str(uuid4())}, expires_delta=timedelta(seconds=-10)
        )
        assert get_token_subject(token) is None

    def test_garbage_token(self):
        assert get_token_subject("not-a-jwt") is None

    def test_non_uuid_subject(self):
        assert get_token_subject(create_access_token(data={"sub": "user-1"})) is None

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "refresh"},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        assert get_token_subject(token) is None
