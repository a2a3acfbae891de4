"""
Vault access service.
Ties the policy store, evidence collaborators, evaluator and mutator together
for the HTTP layer.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Union

from ..config import SecurityConfig
from .evaluator import AccessDecision, AccessPolicyEvaluator, access_evaluator
from .evidence import Clock, CredentialPrompt, PositionSensor, gather_evidence
from .models import VaultSecurityStatus
from .mutator import PolicyMutator, policy_mutator
from .policy import VaultSecurityPolicy
from .store import VaultPolicyStore

logger = logging.getLogger(__name__)

class VaultAccessService:
    """
    Configures vault locks and decides unlock attempts.

    bcrypt work runs in a worker thread so hashing never blocks the event
    loop. Store errors propagate to the caller unchanged.
    """

    def __init__(
        self,
        store: VaultPolicyStore,
        evaluator: AccessPolicyEvaluator = access_evaluator,
        mutator: PolicyMutator = policy_mutator,
        clock: Optional[Clock] = None
    ):
        self.store = store
        self.evaluator = evaluator
        self.mutator = mutator
        self.clock = clock or Clock()
        logger.info("VaultAccessService initialized")

    async def get_security_status(self, vault_id: str) -> VaultSecurityStatus:
        """Describe a vault's locks without exposing its password hash."""
        policy = await self.store.get_vault_policy(vault_id)
        return VaultSecurityStatus.from_policy(vault_id, policy)

    async def requires_authentication(self, vault_id: str) -> bool:
        """True when any gate protects the vault."""
        policy = await self.store.get_vault_policy(vault_id)
        return policy.requires_authentication

    async def configure_password(self, vault_id: str, plaintext: str) -> VaultSecurityPolicy:
        """
        Protect a vault with a password alone.

        Args:
            vault_id: Vault identifier
            plaintext: New vault password

        Returns:
            The stored policy

        Raises:
            PolicyValidationError: If the password is empty; nothing is written
        """
        policy = await asyncio.to_thread(self.mutator.enable_password_only, plaintext)
        await self.store.put_vault_policy(vault_id, policy)
        logger.info(f"Password security enabled for vault {vault_id}")
        return policy

    async def configure_geofence(
        self,
        vault_id: str,
        lat: float,
        lng: float,
        radius: int,
        plaintext: str
    ) -> VaultSecurityPolicy:
        """
        Protect a vault with a geofence and a password, clearing any time lock.

        Raises:
            PolicyValidationError: On invalid input; nothing is written
        """
        policy = await asyncio.to_thread(self.mutator.enable_geo_with_password, lat, lng, radius, plaintext)
        await self.store.put_vault_policy(vault_id, policy)
        logger.info(f"Geolocation security enabled for vault {vault_id}")
        return policy

    async def configure_time_lock(
        self,
        vault_id: str,
        unlock_at: Union[str, datetime],
        plaintext: str
    ) -> VaultSecurityPolicy:
        """
        Protect a vault with a time lock and a password, clearing any geofence.

        Raises:
            PolicyValidationError: On invalid input; nothing is written
        """
        policy = await asyncio.to_thread(self.mutator.enable_time_with_password, unlock_at, plaintext)
        await self.store.put_vault_policy(vault_id, policy)
        logger.info(f"Time lock enabled for vault {vault_id}")
        return policy

    async def unlock(
        self,
        vault_id: str,
        sensor: PositionSensor,
        prompt: CredentialPrompt,
        timeout_ms: int = SecurityConfig.EVIDENCE_TIMEOUT_MS
    ) -> AccessDecision:
        """
        Decide an unlock attempt.

        Args:
            vault_id: Vault identifier
            sensor: Source of the client's position
            prompt: Source of the client's password
            timeout_ms: Upper bound for each evidence request

        Returns:
            Access decision for the vault
        """
        policy = await self.store.get_vault_policy(vault_id)
        evidence = await gather_evidence(policy, sensor, prompt, self.clock, timeout_ms)
        decision = await asyncio.to_thread(self.evaluator.evaluate, policy, evidence)

        if decision.allowed:
            logger.info(f"Access granted to vault {vault_id}")
        else:
            logger.warning(
                f"Access denied to vault {vault_id}: {decision.reason.value} at {decision.gate.value} gate"
            )
        return decision
