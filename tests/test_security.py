"""
Unit tests for password hashing and JWT helpers.
"""

from datetime import timedelta

import jwt
import pytest

from c4knives.auth.security import (
    TOKEN_LIFETIME,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from c4knives.util.time import utcnow

SECRET = "unit-test-secret-with-at-least-32-bytes"


class TestPasswordHashing:
    def test_hash_is_salted(self):
        """Hashing the same password twice gives different hashes."""
        a = hash_password("admin123")
        b = hash_password("admin123")

        assert a != b
        assert "admin123" not in a

    def test_verify_roundtrip(self):
        hashed = hash_password("admin123")

        assert verify_password("admin123", hashed) is True
        assert verify_password("admin124", hashed) is False

    def test_verify_rejects_blank_and_garbage(self):
        assert verify_password("", hash_password("x")) is False
        assert verify_password("x", "") is False
        assert verify_password("x", "not-a-passlib-hash") is False

    def test_blank_password_not_hashable(self):
        with pytest.raises(ValueError):
            hash_password("")


class TestAccessToken:
    def test_token_carries_subject_and_one_day_expiry(self):
        now = utcnow()
        token = create_access_token(secret=SECRET, admin_id="abc123", now=now)

        payload = decode_access_token(token=token, secret=SECRET)

        assert payload["sub"] == "abc123"
        assert payload["exp"] - payload["iat"] == int(TOKEN_LIFETIME.total_seconds())
        assert TOKEN_LIFETIME == timedelta(hours=24)

    def test_token_still_valid_just_inside_lifetime(self):
        issued = utcnow() - timedelta(hours=23, minutes=59)
        token = create_access_token(secret=SECRET, admin_id="abc123", now=issued)

        assert decode_access_token(token=token, secret=SECRET)["sub"] == "abc123"

    def test_token_expires_after_lifetime(self):
        issued = utcnow() - timedelta(hours=25)
        token = create_access_token(secret=SECRET, admin_id="abc123", now=issued)

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token=token, secret=SECRET)

    def test_wrong_secret_rejected(self):
        token = create_access_token(secret=SECRET, admin_id="abc123")

        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(token=token, secret="another-secret-with-at-least-32-bytes")

    def test_malformed_token_rejected(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token="not.a.jwt", secret=SECRET)

    def test_blank_secret_refused(self):
        with pytest.raises(ValueError):
            create_access_token(secret="", admin_id="abc123")
