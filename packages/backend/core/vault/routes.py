"""
FastAPI routes for vault security configuration and unlocking.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging

from ..auth.token import get_subject
from .evidence import ProvidedCredentialPrompt, ReportedPositionSensor
from .exceptions import PolicyValidationError, StorageError, VaultNotFoundError
from .models import (
    GeoSecurityRequest,
    PasswordSecurityRequest,
    TimeSecurityRequest,
    UnlockRequest,
    UnlockResponse,
    VaultSecurityStatus,
)
from .service import VaultAccessService
from .store import SupabaseVaultPolicyStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/vaults", tags=["vault-security"])
security = HTTPBearer()

_vault_service: Optional[VaultAccessService] = None

def get_vault_service() -> VaultAccessService:
    """Return the shared Supabase-backed vault service."""
    global _vault_service
    if _vault_service is None:
        _vault_service = VaultAccessService(SupabaseVaultPolicyStore())
    return _vault_service

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """Extract user ID from the identity provider's token."""
    user_id = get_subject(credentials.credentials)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )
    return user_id

def _to_http_error(vault_id: str, error: Exception) -> HTTPException:
    if isinstance(error, PolicyValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": error.field, "message": error.message}
        )
    if isinstance(error, VaultNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vault not found"
        )
    logger.error(f"Vault store failure for {vault_id}: {error}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Vault storage unavailable"
    )

@router.get("/{vault_id}/security", response_model=VaultSecurityStatus)
async def get_vault_security(
    vault_id: str,
    user_id: str = Depends(get_current_user),
    service: VaultAccessService = Depends(get_vault_service)
) -> VaultSecurityStatus:
    """
    Describe which locks protect a vault.

    Args:
        vault_id: Vault identifier
        user_id: Current user ID (from token)

    Returns:
        Security status without the password hash
    """
    try:
        return await service.get_security_status(vault_id)
    except (VaultNotFoundError, StorageError) as e:
        raise _to_http_error(vault_id, e)

@router.post("/{vault_id}/security/password", response_model=VaultSecurityStatus)
async def enable_password_security(
    vault_id: str,
    request: PasswordSecurityRequest,
    user_id: str = Depends(get_current_user),
    service: VaultAccessService = Depends(get_vault_service)
) -> VaultSecurityStatus:
    """Protect a vault with a password only."""
    try:
        policy = await service.configure_password(vault_id, request.password)
    except (PolicyValidationError, VaultNotFoundError, StorageError) as e:
        raise _to_http_error(vault_id, e)
    logger.info(f"User {user_id} enabled password security on vault {vault_id}")
    return VaultSecurityStatus.from_policy(vault_id, policy)

@router.post("/{vault_id}/security/geo", response_model=VaultSecurityStatus)
async def enable_geolocation_security(
    vault_id: str,
    request: GeoSecurityRequest,
    user_id: str = Depends(get_current_user),
    service: VaultAccessService = Depends(get_vault_service)
) -> VaultSecurityStatus:
    """
    Protect a vault with a geofence and a password.
    Any time lock on the vault is removed.
    """
    try:
        policy = await service.configure_geofence(
            vault_id,
            request.lat,
            request.lng,
            request.radius_meters,
            request.password
        )
    except (PolicyValidationError, VaultNotFoundError, StorageError) as e:
        raise _to_http_error(vault_id, e)
    logger.info(f"User {user_id} enabled geolocation security on vault {vault_id}")
    return VaultSecurityStatus.from_policy(vault_id, policy)

@router.post("/{vault_id}/security/time", response_model=VaultSecurityStatus)
async def enable_time_security(
    vault_id: str,
    request: TimeSecurityRequest,
    user_id: str = Depends(get_current_user),
    service: VaultAccessService = Depends(get_vault_service)
) -> VaultSecurityStatus:
    """
    Protect a vault with a time lock and a password.
    Any geofence on the vault is removed.
    """
    try:
        policy = await service.configure_time_lock(vault_id, request.unlock_at, request.password)
    except (PolicyValidationError, VaultNotFoundError, StorageError) as e:
        raise _to_http_error(vault_id, e)
    logger.info(f"User {user_id} enabled time security on vault {vault_id}")
    return VaultSecurityStatus.from_policy(vault_id, policy)

@router.post("/{vault_id}/unlock", response_model=UnlockResponse)
async def unlock_vault(
    vault_id: str,
    request: UnlockRequest,
    user_id: str = Depends(get_current_user),
    service: VaultAccessService = Depends(get_vault_service)
):
    """
    Try to open a vault with the posted evidence.

    Args:
        vault_id: Vault identifier
        request: Password and position fix, both optional
        user_id: Current user ID (from token)

    Returns:
        200 with granted=true, or 403 with the deny reason and gate
    """
    sensor = ReportedPositionSensor(request.position.to_point() if request.position else None)
    prompt = ProvidedCredentialPrompt(request.password)

    try:
        decision = await service.unlock(vault_id, sensor, prompt)
    except (VaultNotFoundError, StorageError) as e:
        raise _to_http_error(vault_id, e)

    response = UnlockResponse.from_decision(decision)
    if decision.allowed:
        return response

    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content=response.model_dump(mode="json")
    )
