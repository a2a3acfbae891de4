"""
Exception hierarchy for vault access control.
"""


class VaultAccessError(Exception):
    """Base class for vault access control errors."""


class PolicyValidationError(VaultAccessError, ValueError):
    """Raised when a security policy mutation receives invalid input."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class VaultNotFoundError(VaultAccessError):
    """Raised when the record store has no vault with the given id."""

    def __init__(self, vault_id: str):
        self.vault_id = vault_id
        super().__init__(f"Vault not found: {vault_id}")


class StorageError(VaultAccessError):
    """Raised when the record store fails to read or write a vault."""


class PolicyRecordError(StorageError):
    """Raised when a stored vault record cannot be decoded into a policy."""


class SensorUnavailableError(VaultAccessError):
    """Raised by a position sensor that cannot produce a fix."""


class CredentialPromptCancelled(VaultAccessError):
    """Raised by a credential prompt when no password is supplied."""
