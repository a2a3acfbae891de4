"""
Unit tests for the vault security HTTP API.
"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from jose import jwt
from unittest.mock import Mock

from ...core.config import TokenConfig
from ...core.vault.evaluator import AccessPolicyEvaluator
from ...core.vault.mutator import PolicyMutator
from ...core.vault.routes import get_current_user, get_vault_service
from ...core.vault.service import VaultAccessService
from ...core.vault.store import SupabaseVaultPolicyStore
from ...services.api_gateway.main import create_app
from ..conftest import fake_hash, fake_verify, vault_record

class TestVaultRoutes:
    """Test endpoint behaviour and status mapping."""

    def setup_method(self):
        """Set up an app wired to a mocked Supabase client."""
        self.supabase = Mock()
        self.supabase.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        self.supabase.table.return_value.update.return_value.eq.return_value.execute.return_value.data = [{"id": "vault-123"}]

        self.service = VaultAccessService(
            SupabaseVaultPolicyStore(client=self.supabase),
            evaluator=AccessPolicyEvaluator(verifier=fake_verify),
            mutator=PolicyMutator(hasher=fake_hash)
        )
        self.app = create_app(use_lifespan=False)
        self.app.dependency_overrides[get_vault_service] = lambda: self.service
        self.app.dependency_overrides[get_current_user] = lambda: "user-123"
        self.client = TestClient(self.app)

    def _set_record(self, **fields):
        self.supabase.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            vault_record(**fields)
        ]

    def test_get_security_status(self):
        self._set_record(
            password_enabled=True, password_hash="hashed:secret",
            geo_enabled=True, geo_lat=40.0, geo_lng=-73.0, geo_radius=500
        )

        response = self.client.get("/api/vaults/vault-123/security")

        assert response.status_code == 200
        body = response.json()
        assert body["tier"] == "geo"
        assert body["geo_radius_meters"] == 500
        assert body["requires_authentication"] is True
        assert "password_hash" not in body

    def test_get_security_status_not_found(self):
        response = self.client.get("/api/vaults/missing/security")

        assert response.status_code == 404

    def test_storage_failure_is_503(self):
        self.supabase.table.return_value.select.return_value.eq.return_value.execute.side_effect = ConnectionError()

        response = self.client.get("/api/vaults/vault-123/security")

        assert response.status_code == 503

    def test_enable_password(self):
        response = self.client.post("/api/vaults/vault-123/security/password", json={"password": "secret"})

        assert response.status_code == 200
        assert response.json()["tier"] == "password"
        written = self.supabase.table.return_value.update.call_args.args[0]
        assert written["password_hash"] == "hashed:secret"

    def test_enable_geo_default_radius(self):
        response = self.client.post(
            "/api/vaults/vault-123/security/geo",
            json={"lat": 40.0, "lng": -73.0, "password": "secret"}
        )

        assert response.status_code == 200
        assert response.json()["geo_radius_meters"] == 500

    def test_enable_geo_invalid_radius(self):
        response = self.client.post(
            "/api/vaults/vault-123/security/geo",
            json={"lat": 40.0, "lng": -73.0, "radius_meters": 0, "password": "secret"}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "radius"
        self.supabase.table.return_value.update.assert_not_called()

    def test_enable_time(self):
        response = self.client.post(
            "/api/vaults/vault-123/security/time",
            json={"unlock_at": "2030-01-01T12:00:00Z", "password": "secret"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["tier"] == "time"
        assert body["geo_enabled"] is False

    def test_enable_time_malformed(self):
        response = self.client.post(
            "/api/vaults/vault-123/security/time",
            json={"unlock_at": "someday", "password": "secret"}
        )

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "unlock_at"

    def test_unlock_granted(self):
        self._set_record(password_enabled=True, password_hash="hashed:secret")

        response = self.client.post("/api/vaults/vault-123/unlock", json={"password": "secret"})

        assert response.status_code == 200
        assert response.json()["granted"] is True

    def test_unlock_outside_geofence(self):
        self._set_record(
            password_enabled=True, password_hash="hashed:secret",
            geo_enabled=True, geo_lat=40.0, geo_lng=-73.0, geo_radius=500
        )

        response = self.client.post(
            "/api/vaults/vault-123/unlock",
            json={"password": "secret", "position": {"lat": 41.0, "lng": -73.0}}
        )

        assert response.status_code == 403
        body = response.json()
        assert body["granted"] is False
        assert body["reason"] == "location_out_of_range"
        assert body["gate"] == "geo"
        assert body["distance_meters"] > 100_000

    def test_unlock_from_antipode(self):
        self._set_record(
            password_enabled=True, password_hash="hashed:secret",
            geo_enabled=True, geo_lat=0.08, geo_lng=0.0, geo_radius=500
        )

        response = self.client.post(
            "/api/vaults/vault-123/unlock",
            json={"password": "secret", "position": {"lat": -0.08, "lng": 180.0}}
        )

        assert response.status_code == 403
        assert response.json()["reason"] == "location_out_of_range"

    def test_enable_geo_huge_radius(self):
        response = self.client.post(
            "/api/vaults/vault-123/security/geo",
            json={"lat": 40.0, "lng": -73.0, "radius_meters": 10**400, "password": "secret"}
        )

        assert response.status_code == 422
        self.supabase.table.return_value.update.assert_not_called()

    def test_unlock_time_not_reached(self):
        unlock_at = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
        self._set_record(password_enabled=True, password_hash="hashed:secret", time_enabled=True, unlock_at=unlock_at)

        response = self.client.post("/api/vaults/vault-123/unlock", json={"password": "secret"})

        assert response.status_code == 403
        assert response.json()["reason"] == "time_not_reached"
        assert response.json()["unlock_at"] is not None

    def test_unlock_missing_password(self):
        self._set_record(password_enabled=True, password_hash="hashed:secret")

        response = self.client.post("/api/vaults/vault-123/unlock", json={})

        assert response.status_code == 403
        assert response.json()["reason"] == "missing_evidence"

    def test_unlock_invalid_position(self):
        response = self.client.post(
            "/api/vaults/vault-123/unlock",
            json={"position": {"lat": 200.0, "lng": 0.0}}
        )

        assert response.status_code == 422

    def test_unlock_not_found(self):
        response = self.client.post("/api/vaults/missing/unlock", json={"password": "secret"})

        assert response.status_code == 404

class TestVaultRoutesAuthentication:
    """Test bearer token handling."""

    def setup_method(self):
        self.supabase = Mock()
        self.supabase.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [vault_record()]
        service = VaultAccessService(SupabaseVaultPolicyStore(client=self.supabase))
        app = create_app(use_lifespan=False)
        app.dependency_overrides[get_vault_service] = lambda: service
        self.client = TestClient(app)

    def test_missing_token(self):
        response = self.client.get("/api/vaults/vault-123/security")

        assert response.status_code in (401, 403)

    def test_invalid_token(self):
        response = self.client.get(
            "/api/vaults/vault-123/security",
            headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    def test_valid_token(self):
        exp = datetime.now(timezone.utc) + timedelta(minutes=15)
        token = jwt.encode({"sub": "user-123", "exp": exp}, TokenConfig.SECRET_KEY, algorithm=TokenConfig.ALGORITHM)

        response = self.client.get(
            "/api/vaults/vault-123/security",
            headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["tier"] == "none"

class TestHealthRoutes:
    """Test probe endpoints."""

    def setup_method(self):
        self.client = TestClient(create_app(use_lifespan=False))

    def test_live_and_ready(self):
        assert self.client.get("/health/live").json() == {"status": "alive"}
        assert self.client.get("/health/ready").json() == {"status": "ready"}

if __name__ == "__main__":
    pytest.main([__file__])
