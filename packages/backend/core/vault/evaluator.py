"""
Vault access evaluation.
Decides whether live client evidence satisfies a vault's security policy.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from ..auth.hashing import verify_password
from .geo import GeoPoint, distance_between
from .policy import GeoSecured, TimeSecured, VaultSecurityPolicy

logger = logging.getLogger(__name__)


class DenyReason(str, Enum):
    """Machine-readable reasons for refusing access."""
    TIME_NOT_REACHED = "time_not_reached"
    LOCATION_OUT_OF_RANGE = "location_out_of_range"
    WRONG_PASSWORD = "wrong_password"
    MISSING_EVIDENCE = "missing_evidence"


class Gate(str, Enum):
    """Access checks, in the order they are evaluated."""
    TIME = "time"
    GEO = "geo"
    PASSWORD = "password"


@dataclass(frozen=True)
class AccessEvidence:
    """Evidence gathered from the client at unlock time."""
    now: datetime
    password_attempt: Optional[str] = field(default=None, repr=False)
    current_position: Optional[GeoPoint] = None


@dataclass(frozen=True)
class AccessDecision:
    """Result of evaluating a policy against evidence."""
    allowed: bool
    reason: Optional[DenyReason] = None
    gate: Optional[Gate] = None
    unlock_at: Optional[datetime] = None
    distance_meters: Optional[float] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason, gate: Gate, **details) -> "AccessDecision":
        return cls(allowed=False, reason=reason, gate=gate, **details)


class AccessPolicyEvaluator:
    """
    Runs the time, geo and password gates in that order and stops at the
    first failure.

    The evaluator holds no mutable state; one instance can serve any number
    of concurrent callers.
    """

    def __init__(self, verifier: Callable[[str, str], bool] = verify_password):
        """
        Args:
            verifier: Password check, called as verifier(plaintext, hash)
        """
        self._verify = verifier

    def evaluate(self, policy: VaultSecurityPolicy, evidence: AccessEvidence) -> AccessDecision:
        """
        Evaluate access for one vault.

        Args:
            policy: The vault's current security policy
            evidence: Password attempt, position fix and current time

        Returns:
            Allow, or Deny carrying the failing gate and reason
        """
        if isinstance(policy, TimeSecured):
            decision = self._check_time_gate(policy, evidence)
            if decision is not None:
                return decision

        if isinstance(policy, GeoSecured):
            decision = self._check_geo_gate(policy, evidence)
            if decision is not None:
                return decision

        if policy.password_enabled:
            decision = self._check_password_gate(policy, evidence)
            if decision is not None:
                return decision

        return AccessDecision.allow()

    def _check_time_gate(self, policy: TimeSecured, evidence: AccessEvidence) -> Optional[AccessDecision]:
        if policy.unlock_at is None:
            return AccessDecision.deny(DenyReason.MISSING_EVIDENCE, Gate.TIME)

        now = evidence.now
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        if now < policy.unlock_at:
            logger.debug(f"Time gate closed until {policy.unlock_at.isoformat()}")
            return AccessDecision.deny(DenyReason.TIME_NOT_REACHED, Gate.TIME, unlock_at=policy.unlock_at)
        return None

    def _check_geo_gate(self, policy: GeoSecured, evidence: AccessEvidence) -> Optional[AccessDecision]:
        if evidence.current_position is None:
            return AccessDecision.deny(DenyReason.MISSING_EVIDENCE, Gate.GEO)

        points = (evidence.current_position, policy.center)
        if not all(math.isfinite(p.lat) and math.isfinite(p.lng) for p in points):
            logger.warning("Geo gate received a non-finite coordinate")
            return AccessDecision.deny(DenyReason.LOCATION_OUT_OF_RANGE, Gate.GEO)

        distance = distance_between(evidence.current_position, policy.center)
        logger.debug(f"Geo gate distance {distance:.1f}m, radius {policy.geo_radius_meters}m")
        # NaN distances fail the comparison and are denied
        if not distance <= policy.geo_radius_meters:
            return AccessDecision.deny(
                DenyReason.LOCATION_OUT_OF_RANGE, Gate.GEO, distance_meters=distance
            )
        return None

    def _check_password_gate(self, policy: VaultSecurityPolicy, evidence: AccessEvidence) -> Optional[AccessDecision]:
        if not evidence.password_attempt:
            return AccessDecision.deny(DenyReason.MISSING_EVIDENCE, Gate.PASSWORD)

        if not self._verify(evidence.password_attempt, policy.password_hash):
            return AccessDecision.deny(DenyReason.WRONG_PASSWORD, Gate.PASSWORD)
        return None


# Global evaluator instance
access_evaluator = AccessPolicyEvaluator()


def evaluate(policy: VaultSecurityPolicy, evidence: AccessEvidence) -> AccessDecision:
    """Evaluate with the default bcrypt-backed evaluator."""
    return access_evaluator.evaluate(policy, evidence)
