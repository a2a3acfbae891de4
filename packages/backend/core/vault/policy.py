"""
Vault security policy model.

A vault's policy is exactly one of four variants. Each variant carries only
the fields it needs, so a geofenced vault can never also hold an unlock time
and a password-only vault never carries coordinates. The flat record
projection mirrors the columns of the ``vaults`` table.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union

from ..config import SecurityConfig
from .exceptions import PolicyRecordError
from .geo import GeoPoint, is_valid_coordinate

logger = logging.getLogger(__name__)

RECORD_FIELDS = (
    "password_enabled",
    "password_hash",
    "geo_enabled",
    "geo_lat",
    "geo_lng",
    "geo_radius",
    "time_enabled",
    "unlock_at",
)


class SecurityTier(str, Enum):
    """Which lock a vault uses besides its password."""
    NONE = "none"
    PASSWORD = "password"
    GEO = "geo"
    TIME = "time"


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Returns None for empty or
    unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as a UTC ISO 8601 string."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat()


class VaultSecurityPolicy:
    """Common read-only view over the policy variants."""

    tier: ClassVar[SecurityTier]
    password_hash: Optional[str]

    @property
    def password_enabled(self) -> bool:
        return self.password_hash is not None

    @property
    def geo_enabled(self) -> bool:
        return self.tier is SecurityTier.GEO

    @property
    def time_enabled(self) -> bool:
        return self.tier is SecurityTier.TIME

    @property
    def requires_authentication(self) -> bool:
        return self.password_enabled or self.geo_enabled or self.time_enabled

    def to_record(self) -> Dict[str, Any]:
        """Full flat record with every security column set."""
        return {
            "password_enabled": self.password_enabled,
            "password_hash": self.password_hash,
            "geo_enabled": False,
            "geo_lat": None,
            "geo_lng": None,
            "geo_radius": None,
            "time_enabled": False,
            "unlock_at": None,
        }


@dataclass(frozen=True)
class NoSecurity(VaultSecurityPolicy):
    """Open vault; the initial policy of every new vault."""
    tier: ClassVar[SecurityTier] = SecurityTier.NONE
    password_hash: ClassVar[Optional[str]] = None


@dataclass(frozen=True)
class PasswordOnly(VaultSecurityPolicy):
    tier: ClassVar[SecurityTier] = SecurityTier.PASSWORD
    password_hash: str


@dataclass(frozen=True)
class GeoSecured(VaultSecurityPolicy):
    """Vault that opens only within ``geo_radius_meters`` of its centre."""
    tier: ClassVar[SecurityTier] = SecurityTier.GEO
    geo_lat: float
    geo_lng: float
    geo_radius_meters: int
    password_hash: str

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(self.geo_lat, self.geo_lng)

    def to_record(self) -> Dict[str, Any]:
        record = super().to_record()
        record.update({
            "geo_enabled": True,
            "geo_lat": self.geo_lat,
            "geo_lng": self.geo_lng,
            "geo_radius": self.geo_radius_meters,
        })
        return record


@dataclass(frozen=True)
class TimeSecured(VaultSecurityPolicy):
    """
    Vault that opens only at or after ``unlock_at``.

    ``unlock_at`` is None only when a stored record held a timestamp that
    could not be parsed; such a vault never opens.
    """
    tier: ClassVar[SecurityTier] = SecurityTier.TIME
    unlock_at: Optional[datetime]
    password_hash: str

    def to_record(self) -> Dict[str, Any]:
        record = super().to_record()
        record.update({
            "time_enabled": True,
            "unlock_at": format_timestamp(self.unlock_at),
        })
        return record


def policy_from_record(record: Dict[str, Any]) -> VaultSecurityPolicy:
    """
    Decode a stored vault record into its policy variant.

    Args:
        record: Row from the vaults table

    Returns:
        The matching policy variant

    Raises:
        PolicyRecordError: If the record enables both tiers or a geofence
            without valid coordinates
    """
    vault_id = record.get("id", "<unknown>")
    password_hash: Optional[str] = None
    if record.get("password_enabled"):
        # an enabled gate with no hash stays enabled and rejects every attempt
        password_hash = record.get("password_hash") or ""

    geo_enabled = bool(record.get("geo_enabled"))
    time_enabled = bool(record.get("time_enabled"))

    if geo_enabled and time_enabled:
        raise PolicyRecordError(f"Vault {vault_id} enables both geo and time locks")

    if (geo_enabled or time_enabled) and password_hash is None:
        logger.warning(f"Vault {vault_id} has a geo or time lock without a password")
        password_hash = ""

    if geo_enabled:
        if record.get("geo_lat") is None or record.get("geo_lng") is None:
            raise PolicyRecordError(f"Vault {vault_id} has a geofence without coordinates")
        try:
            lat = float(record["geo_lat"])
            lng = float(record["geo_lng"])
            radius = int(record.get("geo_radius") or SecurityConfig.DEFAULT_GEO_RADIUS_METERS)
        except (TypeError, ValueError, OverflowError) as e:
            raise PolicyRecordError(f"Vault {vault_id} has malformed geofence fields") from e
        if not is_valid_coordinate(lat, lng):
            raise PolicyRecordError(f"Vault {vault_id} has geofence coordinates out of range")
        if radius <= 0:
            raise PolicyRecordError(f"Vault {vault_id} has a non-positive geofence radius")
        return GeoSecured(geo_lat=lat, geo_lng=lng, geo_radius_meters=radius, password_hash=password_hash)

    if time_enabled:
        unlock_at = parse_timestamp(record.get("unlock_at"))
        if unlock_at is None:
            logger.warning(f"Vault {vault_id} has an unreadable unlock time")
        return TimeSecured(unlock_at=unlock_at, password_hash=password_hash)

    if password_hash is not None:
        return PasswordOnly(password_hash=password_hash)

    return NoSecurity()
