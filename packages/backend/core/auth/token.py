"""
Identity provider token decoding.
Vault owners sign in with an external identity provider; the backend only
checks the bearer token signature and reads the subject claim.
"""

from typing import Optional, Dict, Any
from jose import jwt, JWTError
import logging

from ..config import TokenConfig

logger = logging.getLogger(__name__)

def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a bearer token and return its payload.
    
    Expired tokens and bad signatures are rejected by python-jose.
    
    Args:
        token: JWT token to decode
        
    Returns:
        Token payload dict or None if invalid
    """
    if not token:
        return None
    try:
        return jwt.decode(token, TokenConfig.SECRET_KEY, algorithms=[TokenConfig.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token decode failed: {e}")
        return None

def get_subject(token: str) -> Optional[str]:
    """Return the user id carried by a valid token, or None."""
    payload = decode_token(token)
    if not payload:
        return None
    return payload.get("sub")
