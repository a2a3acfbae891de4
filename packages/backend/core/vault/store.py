"""
Record store for vault security policies.
Reads and writes the security columns of the Supabase ``vaults`` table.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from supabase import create_client, Client

from ..config import SupabaseConfig
from .exceptions import StorageError, VaultNotFoundError
from .policy import RECORD_FIELDS, VaultSecurityPolicy, policy_from_record

logger = logging.getLogger(__name__)


class VaultPolicyStore(ABC):
    """Storage contract for vault security policies."""

    @abstractmethod
    async def get_vault_policy(self, vault_id: str) -> VaultSecurityPolicy:
        """
        Load a vault's policy.

        Raises:
            VaultNotFoundError: If the vault does not exist
            StorageError: If the store fails or the record is corrupt
        """

    @abstractmethod
    async def put_vault_policy(self, vault_id: str, policy: VaultSecurityPolicy) -> None:
        """
        Replace a vault's policy in a single write.

        Raises:
            VaultNotFoundError: If the vault does not exist
            StorageError: If the store fails
        """


class SupabaseVaultPolicyStore(VaultPolicyStore):
    """
    Supabase-backed policy store.
    Failures are raised as StorageError and never retried here.
    """

    def __init__(self, client: Optional[Client] = None, table: str = SupabaseConfig.VAULTS_TABLE):
        """
        Initialize the store.

        Args:
            client: Supabase client; created from configuration when omitted
            table: Name of the vaults table
        """
        if client is None:
            if not SupabaseConfig.URL or not SupabaseConfig.ANON_KEY:
                raise ValueError("Supabase configuration missing")
            client = create_client(SupabaseConfig.URL, SupabaseConfig.ANON_KEY)

        self.supabase: Client = client
        self.table = table
        logger.info(f"SupabaseVaultPolicyStore initialized for table {table}")

    async def get_vault_policy(self, vault_id: str) -> VaultSecurityPolicy:
        columns = ",".join(("id",) + RECORD_FIELDS)
        try:
            result = self.supabase.table(self.table).select(columns).eq("id", vault_id).execute()
        except Exception as e:
            logger.error(f"Failed to load vault {vault_id}: {e}")
            raise StorageError(f"Failed to load vault {vault_id}") from e

        if not result.data:
            raise VaultNotFoundError(vault_id)

        return policy_from_record(result.data[0])

    async def put_vault_policy(self, vault_id: str, policy: VaultSecurityPolicy) -> None:
        record = policy.to_record()
        try:
            result = self.supabase.table(self.table).update(record).eq("id", vault_id).execute()
        except Exception as e:
            logger.error(f"Failed to update vault {vault_id}: {e}")
            raise StorageError(f"Failed to update vault {vault_id}") from e

        if not result.data:
            raise VaultNotFoundError(vault_id)

        logger.info(f"Stored {policy.tier.value} policy for vault {vault_id}")
