"""
Unit tests for authentication module.
Tests vault password hashing and identity provider token decoding.
"""

import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from ...core.auth.hashing import hash_password, verify_password
from ...core.auth.token import decode_token, get_subject
from ...core.config import TokenConfig

class TestPasswordHashing:
    """Test password hashing functionality."""

    def test_hash_password_success(self):
        """Test successful password hashing."""
        password = "test_password_123"
        hashed = hash_password(password)

        assert hashed != password
        assert len(hashed) > 50  # bcrypt hashes are typically 60 characters
        assert hashed.startswith("$2b$12$")  # bcrypt prefix with 12 rounds

    def test_hash_password_salted(self):
        """Test hashing the same password twice gives different digests."""
        assert hash_password("same_password") != hash_password("same_password")

    def test_hash_password_empty(self):
        """Test hashing empty password raises error."""
        with pytest.raises(ValueError, match="Password cannot be empty"):
            hash_password("")

    def test_verify_password_success(self):
        """Test successful password verification."""
        password = "test_password_123"
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True

    def test_verify_password_failure(self):
        """Test password verification with wrong password."""
        password = "test_password_123"
        wrong_password = "wrong_password"
        hashed = hash_password(password)

        assert verify_password(wrong_password, hashed) is False

    def test_verify_password_empty_inputs(self):
        """Test password verification with empty inputs."""
        assert verify_password("", "hash") is False
        assert verify_password("password", "") is False

    def test_verify_password_malformed_hash(self):
        """Test a hash that is not bcrypt never matches."""
        assert verify_password("password", "not-a-bcrypt-hash") is False

class TestTokenDecoding:
    """Test identity provider token decoding."""

    def _token(self, claims, secret=TokenConfig.SECRET_KEY):
        return jwt.encode(claims, secret, algorithm=TokenConfig.ALGORITHM)

    def test_decode_token_success(self):
        """Test a valid token decodes to its claims."""
        exp = datetime.now(timezone.utc) + timedelta(minutes=15)
        token = self._token({"sub": "user123", "exp": exp})

        payload = decode_token(token)

        assert payload is not None
        assert payload["sub"] == "user123"
        assert get_subject(token) == "user123"

    def test_decode_token_expired(self):
        """Test an expired token is rejected."""
        exp = datetime.now(timezone.utc) - timedelta(minutes=1)
        token = self._token({"sub": "user123", "exp": exp})

        assert decode_token(token) is None
        assert get_subject(token) is None

    def test_decode_token_wrong_secret(self):
        """Test a token signed with another key is rejected."""
        token = self._token({"sub": "user123"}, secret="another-secret")

        assert decode_token(token) is None

    def test_decode_token_garbage(self):
        """Test non-JWT input is rejected."""
        assert decode_token("not.a.token") is None
        assert decode_token("") is None

    def test_get_subject_missing_sub(self):
        """Test a valid token without subject yields no user."""
        token = self._token({"email": "test@example.com"})

        assert get_subject(token) is None

if __name__ == "__main__":
    pytest.main([__file__])
