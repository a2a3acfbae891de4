"""
Shared fixtures for vault backend tests.
"""

import pytest
from unittest.mock import Mock


def fake_hash(plaintext: str) -> str:
    """Cheap stand-in for bcrypt in tests that do not exercise hashing."""
    return f"hashed:{plaintext}"


def fake_verify(plaintext: str, hashed: str) -> bool:
    return hashed == fake_hash(plaintext)


def vault_record(**fields):
    """Stored vault row with every security column disabled by default."""
    record = {
        "id": "vault-123",
        "password_enabled": False,
        "password_hash": "",
        "geo_enabled": False,
        "geo_lat": None,
        "geo_lng": None,
        "geo_radius": None,
        "time_enabled": False,
        "unlock_at": "",
    }
    record.update(fields)
    return record


@pytest.fixture
def mock_supabase():
    """Supabase client mock returning no rows until a test sets them."""
    client = Mock()
    client.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
    client.table.return_value.update.return_value.eq.return_value.execute.return_value.data = [{"id": "vault-123"}]
    return client
