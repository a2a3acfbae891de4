"""
Security policy transitions for vaults.

Every transition builds a complete replacement policy. Inputs are validated
and the password hashed before anything is returned, so a rejected call
never produces a partial policy.
"""

import logging
import math
from datetime import datetime
from numbers import Real
from typing import Callable, Union

from ..auth.hashing import hash_password
from .exceptions import PolicyValidationError
from .geo import is_valid_coordinate
from .policy import (
    GeoSecured,
    NoSecurity,
    PasswordOnly,
    TimeSecured,
    VaultSecurityPolicy,
    parse_timestamp,
)

logger = logging.getLogger(__name__)


class PolicyMutator:
    """
    Builds vault security policies.

    Geo and time locks are mutually exclusive and always come with a
    password. Each call derives a fresh hash, so reconfiguring a lock always
    replaces the previous password.
    """

    def __init__(self, hasher: Callable[[str], str] = hash_password):
        self._hash = hasher

    @staticmethod
    def initial_policy() -> VaultSecurityPolicy:
        """Policy of a newly created vault."""
        return NoSecurity()

    def enable_password_only(self, plaintext: str) -> PasswordOnly:
        """
        Protect a vault with a password alone.

        Raises:
            PolicyValidationError: If the password is empty
        """
        self._validate_password(plaintext)
        policy = PasswordOnly(password_hash=self._hash(plaintext))
        logger.debug("Built password-only policy")
        return policy

    def enable_geo_with_password(
        self,
        lat: float,
        lng: float,
        radius: int,
        plaintext: str
    ) -> GeoSecured:
        """
        Protect a vault with a geofence and a password.

        Args:
            lat: Geofence centre latitude in degrees
            lng: Geofence centre longitude in degrees
            radius: Geofence radius in meters, must be positive
            plaintext: New vault password

        Raises:
            PolicyValidationError: If the centre or radius is invalid or the
                password is empty
        """
        if not self._is_number(lat) or not self._is_number(lng):
            raise PolicyValidationError("location", "Latitude and longitude must be numbers")
        try:
            lat, lng = float(lat), float(lng)
        except OverflowError as e:
            raise PolicyValidationError("location", "Latitude and longitude must be finite and in range") from e
        if not is_valid_coordinate(lat, lng):
            raise PolicyValidationError("location", "Latitude and longitude must be finite and in range")
        radius_meters = self._validate_radius(radius)
        self._validate_password(plaintext)

        policy = GeoSecured(
            geo_lat=lat,
            geo_lng=lng,
            geo_radius_meters=radius_meters,
            password_hash=self._hash(plaintext)
        )
        logger.debug(f"Built geofence policy with radius {radius_meters}m")
        return policy

    def enable_time_with_password(
        self,
        unlock_at: Union[str, datetime],
        plaintext: str
    ) -> TimeSecured:
        """
        Protect a vault with a time lock and a password.

        Past instants are accepted; the lock is checked at unlock time.

        Args:
            unlock_at: ISO 8601 timestamp or datetime; naive values are UTC
            plaintext: New vault password

        Raises:
            PolicyValidationError: If the timestamp cannot be parsed or the
                password is empty
        """
        unlock_time = parse_timestamp(unlock_at)
        if unlock_time is None:
            raise PolicyValidationError("unlock_at", "Invalid unlock date/time")
        self._validate_password(plaintext)

        policy = TimeSecured(unlock_at=unlock_time, password_hash=self._hash(plaintext))
        logger.debug(f"Built time-lock policy opening at {unlock_time.isoformat()}")
        return policy

    @staticmethod
    def _is_number(value) -> bool:
        return isinstance(value, Real) and not isinstance(value, bool)

    def _validate_radius(self, radius) -> int:
        if not self._is_number(radius):
            raise PolicyValidationError("radius", "Radius must be a number")
        try:
            finite = math.isfinite(radius)
        except OverflowError as e:
            raise PolicyValidationError("radius", "Radius is too large") from e
        if not finite:
            raise PolicyValidationError("radius", "Radius must be a number")
        if radius != int(radius):
            raise PolicyValidationError("radius", "Radius must be a whole number of meters")
        if radius <= 0:
            raise PolicyValidationError("radius", "Radius must be greater than zero")
        return int(radius)

    @staticmethod
    def _validate_password(plaintext: str):
        if not isinstance(plaintext, str) or not plaintext:
            raise PolicyValidationError("password", "Please enter a password for this vault")


# Global policy mutator instance
policy_mutator = PolicyMutator()
