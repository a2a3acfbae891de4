"""
Evidence collaborators for vault unlocks.

Position fixes and passwords come from the client and may take a while or
never arrive. Each request is bounded by a timeout; anything that does not
arrive in time is left out of the evidence and the evaluator reports it as
missing.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from ..config import SecurityConfig
from .evaluator import AccessEvidence
from .exceptions import CredentialPromptCancelled, SensorUnavailableError
from .geo import GeoPoint
from .policy import TimeSecured, VaultSecurityPolicy

logger = logging.getLogger(__name__)


class PositionSensor(ABC):
    """Source of the client's current location."""

    @abstractmethod
    async def get_current_position(self, timeout_ms: int) -> GeoPoint:
        """
        Return the current position.

        Raises:
            SensorUnavailableError: If location is denied or unsupported
        """


class CredentialPrompt(ABC):
    """Source of the vault password typed by the user."""

    @abstractmethod
    async def request_password(self) -> str:
        """
        Return the password the user entered.

        Raises:
            CredentialPromptCancelled: If the user supplies nothing
        """


class Clock:
    """Wall clock returning aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ReportedPositionSensor(PositionSensor):
    """Position fix the client sent along with its unlock request."""

    def __init__(self, position: Optional[GeoPoint]):
        self._position = position

    async def get_current_position(self, timeout_ms: int) -> GeoPoint:
        if self._position is None:
            raise SensorUnavailableError("Client did not report a position")
        return self._position


class ProvidedCredentialPrompt(CredentialPrompt):
    """Password the client sent along with its unlock request."""

    def __init__(self, password: Optional[str]):
        self._password = password

    async def request_password(self) -> str:
        if not self._password:
            raise CredentialPromptCancelled("No password supplied")
        return self._password


async def read_position(sensor: PositionSensor, timeout_ms: int) -> Optional[GeoPoint]:
    """Read a position fix, returning None when the sensor fails or times out."""
    try:
        return await asyncio.wait_for(sensor.get_current_position(timeout_ms), timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.warning(f"Position sensor timed out after {timeout_ms}ms")
    except SensorUnavailableError as e:
        logger.info(f"Position unavailable: {e}")
    return None


async def read_password(prompt: CredentialPrompt, timeout_ms: int) -> Optional[str]:
    """Ask for the vault password, returning None when cancelled or timed out."""
    try:
        return await asyncio.wait_for(prompt.request_password(), timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.warning(f"Password prompt timed out after {timeout_ms}ms")
    except CredentialPromptCancelled:
        logger.info("Password prompt cancelled")
    return None


async def gather_evidence(
    policy: VaultSecurityPolicy,
    sensor: PositionSensor,
    prompt: CredentialPrompt,
    clock: Optional[Clock] = None,
    timeout_ms: int = SecurityConfig.EVIDENCE_TIMEOUT_MS
) -> AccessEvidence:
    """
    Collect the evidence the policy's gates need.

    A time-locked vault that has not opened yet is not worth a location or
    password request; only the clock is read in that case.

    Args:
        policy: The vault's security policy
        sensor: Position source, used only for geofenced vaults
        prompt: Password source, used only when the password gate is on
        clock: Time source, defaults to the system clock
        timeout_ms: Upper bound for each sensor or prompt request

    Returns:
        Evidence for AccessPolicyEvaluator.evaluate
    """
    now = (clock or Clock()).now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if isinstance(policy, TimeSecured) and (policy.unlock_at is None or now < policy.unlock_at):
        return AccessEvidence(now=now)

    position = None
    if policy.geo_enabled:
        position = await read_position(sensor, timeout_ms)
        if position is None:
            return AccessEvidence(now=now)

    password = None
    if policy.password_enabled:
        password = await read_password(prompt, timeout_ms)

    return AccessEvidence(now=now, password_attempt=password, current_position=position)
