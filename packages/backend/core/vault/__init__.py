"""
Vault access control for the file vault backend.
Layered password, geofence and time locks over named vaults.
"""

from .evaluator import AccessDecision, AccessEvidence, AccessPolicyEvaluator, DenyReason, Gate, evaluate
from .exceptions import (
    CredentialPromptCancelled,
    PolicyRecordError,
    PolicyValidationError,
    SensorUnavailableError,
    StorageError,
    VaultAccessError,
    VaultNotFoundError,
)
from .geo import EARTH_RADIUS_METERS, GeoPoint, haversine_distance
from .mutator import PolicyMutator, policy_mutator
from .policy import (
    GeoSecured,
    NoSecurity,
    PasswordOnly,
    SecurityTier,
    TimeSecured,
    VaultSecurityPolicy,
    policy_from_record,
)
from .service import VaultAccessService
from .store import SupabaseVaultPolicyStore, VaultPolicyStore

__all__ = [
    "AccessDecision",
    "AccessEvidence",
    "AccessPolicyEvaluator",
    "DenyReason",
    "Gate",
    "evaluate",
    "CredentialPromptCancelled",
    "PolicyRecordError",
    "PolicyValidationError",
    "SensorUnavailableError",
    "StorageError",
    "VaultAccessError",
    "VaultNotFoundError",
    "EARTH_RADIUS_METERS",
    "GeoPoint",
    "haversine_distance",
    "PolicyMutator",
    "policy_mutator",
    "GeoSecured",
    "NoSecurity",
    "PasswordOnly",
    "SecurityTier",
    "TimeSecured",
    "VaultSecurityPolicy",
    "policy_from_record",
    "VaultAccessService",
    "SupabaseVaultPolicyStore",
    "VaultPolicyStore"
]
