"""
Authentication helpers for the vault backend.
Provides vault password hashing and identity provider token decoding.
"""

from .hashing import pwd_context, hash_password, verify_password
from .token import decode_token, get_subject

__all__ = [
    "pwd_context",
    "hash_password", 
    "verify_password",
    "decode_token",
    "get_subject"
]
