"""
Password hashing utilities using bcrypt for vault password storage.
Vault passwords are only ever stored as salted bcrypt digests.
"""

from passlib.context import CryptContext
import logging

from ..config import SecurityConfig

logger = logging.getLogger(__name__)

# bcrypt cost never drops below 12 rounds (~250ms per hash)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=SecurityConfig.BCRYPT_ROUNDS
)

def hash_password(password: str) -> str:
    """
    Hash a plain text vault password using bcrypt.
    
    Args:
        password: Plain text password to hash
        
    Returns:
        Salted bcrypt hash string
        
    Raises:
        ValueError: If password is empty or None
    """
    if not password:
        raise ValueError("Password cannot be empty")
    
    try:
        hashed = pwd_context.hash(password)
        logger.debug("Password hashed successfully")
        return hashed
    except Exception as e:
        logger.error(f"Password hashing failed: {type(e).__name__}")
        raise

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against its bcrypt hash.
    
    The digest comparison is constant-time. A malformed or empty hash
    never matches.
    
    Args:
        plain_password: Plain text password to verify
        hashed_password: Stored hash to verify against
        
    Returns:
        True if password matches, False otherwise
    """
    if not plain_password or not hashed_password:
        return False
        
    try:
        result = pwd_context.verify(plain_password, hashed_password)
        logger.debug(f"Password verification result: {result}")
        return result
    except (ValueError, TypeError) as e:
        logger.warning(f"Password verification against malformed hash: {type(e).__name__}")
        return False
