"""
Pydantic models for vault security API requests and responses.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ..config import SecurityConfig
from .evaluator import AccessDecision, DenyReason, Gate
from .geo import GeoPoint
from .policy import GeoSecured, SecurityTier, TimeSecured, VaultSecurityPolicy

class PositionModel(BaseModel):
    """Client position fix in decimal degrees."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)

class PasswordSecurityRequest(BaseModel):
    """Request to protect a vault with a password only."""
    password: str

class GeoSecurityRequest(BaseModel):
    """Request to protect a vault with a geofence and a password."""
    lat: float
    lng: float
    radius_meters: int = Field(default=SecurityConfig.DEFAULT_GEO_RADIUS_METERS, description="Geofence radius")
    password: str

class TimeSecurityRequest(BaseModel):
    """Request to protect a vault with a time lock and a password."""
    unlock_at: str = Field(..., description="ISO 8601 unlock time, UTC when no offset is given")
    password: str

class UnlockRequest(BaseModel):
    """Evidence posted by the client when opening a vault."""
    password: Optional[str] = None
    position: Optional[PositionModel] = None

class VaultSecurityStatus(BaseModel):
    """Public view of a vault's policy. Never includes the password hash."""
    vault_id: str
    tier: SecurityTier
    requires_authentication: bool
    password_enabled: bool
    geo_enabled: bool
    time_enabled: bool
    geo_lat: Optional[float] = None
    geo_lng: Optional[float] = None
    geo_radius_meters: Optional[int] = None
    unlock_at: Optional[datetime] = None

    @classmethod
    def from_policy(cls, vault_id: str, policy: VaultSecurityPolicy) -> "VaultSecurityStatus":
        status = cls(
            vault_id=vault_id,
            tier=policy.tier,
            requires_authentication=policy.requires_authentication,
            password_enabled=policy.password_enabled,
            geo_enabled=policy.geo_enabled,
            time_enabled=policy.time_enabled
        )
        if isinstance(policy, GeoSecured):
            status.geo_lat = policy.geo_lat
            status.geo_lng = policy.geo_lng
            status.geo_radius_meters = policy.geo_radius_meters
        elif isinstance(policy, TimeSecured):
            status.unlock_at = policy.unlock_at
        return status

class UnlockResponse(BaseModel):
    """Outcome of an unlock attempt."""
    granted: bool
    reason: Optional[DenyReason] = None
    gate: Optional[Gate] = None
    unlock_at: Optional[datetime] = None
    distance_meters: Optional[float] = None

    @classmethod
    def from_decision(cls, decision: AccessDecision) -> "UnlockResponse":
        return cls(
            granted=decision.allowed,
            reason=decision.reason,
            gate=decision.gate,
            unlock_at=decision.unlock_at,
            distance_meters=round(decision.distance_meters, 1) if decision.distance_meters is not None else None
        )
