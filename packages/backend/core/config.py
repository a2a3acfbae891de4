"""
Environment-driven configuration for the vault backend.
Values are read once at import time; override them with environment variables.
"""

import os
from typing import List


class SupabaseConfig:
    """Record store connection settings."""
    URL = os.getenv("SUPABASE_URL")
    ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
    VAULTS_TABLE = os.getenv("VAULTS_TABLE", "vaults")


class SecurityConfig:
    """Password hashing and vault lock settings."""
    MIN_BCRYPT_ROUNDS = 12
    BCRYPT_ROUNDS = max(MIN_BCRYPT_ROUNDS, int(os.getenv("BCRYPT_ROUNDS", 12)))
    DEFAULT_GEO_RADIUS_METERS = int(os.getenv("DEFAULT_GEO_RADIUS", 500))
    EVIDENCE_TIMEOUT_MS = int(os.getenv("EVIDENCE_TIMEOUT_MS", 8000))  # matches the browser geolocation timeout


class TokenConfig:
    """Identity provider token settings."""
    SECRET_KEY = os.getenv("JWT_SECRET", "fallback-dev-secret-change-in-production")
    ALGORITHM = os.getenv("JWT_ALGORITHM", "HS512")


class APIConfig:
    """HTTP gateway settings."""
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ]
    HOST = os.getenv("API_HOST", "0.0.0.0")
    PORT = int(os.getenv("API_PORT", 8000))
