"""
DecentraID Configuration Module
Loads environment variables and provides configuration settings for the
off-chain identity custody service.
"""

import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

from decentraid.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration settings."""

    # ============ API Settings ============
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))
    API_LOG_LEVEL: str = os.getenv("API_LOG_LEVEL", "info")

    # development | production
    ENVIRONMENT: str = os.getenv("DECENTRAID_ENV", "development")

    # ============ Encryption ============
    # 32-byte (256-bit) master key as hex string
    MASTER_KEY: str = os.getenv("MASTER_KEY", "")

    # ============ Storage ============
    DB_PATH: str = os.getenv("DB_PATH", "data/decentraid.db")

    # ============ Sharing ============
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # ============ Content Addressing ============
    # Mock CIDv0-looking handle: prefix + first N hex chars of SHA-256
    CONTENT_HANDLE_PREFIX: str = os.getenv("CONTENT_HANDLE_PREFIX", "Qm")
    CONTENT_HANDLE_LENGTH: int = int(os.getenv("CONTENT_HANDLE_LENGTH", "44"))

    # ============ Identifier Generation ============
    # Verification request ids are drawn from [MIN, MAX)
    REQUEST_ID_MIN: int = int(os.getenv("REQUEST_ID_MIN", "100000"))
    REQUEST_ID_MAX: int = int(os.getenv("REQUEST_ID_MAX", "999999"))
    ID_GENERATION_ATTEMPTS: int = int(os.getenv("ID_GENERATION_ATTEMPTS", "5"))

    # ============ Audit ============
    AUDIT_LOG_LIMIT: int = int(os.getenv("AUDIT_LOG_LIMIT", "100"))

    # ============ Blockchain (public, informational only) ============
    DID_REGISTRY_ADDRESS: str = os.getenv("DID_REGISTRY_ADDRESS", "")
    VERIFICATION_LOG_ADDRESS: str = os.getenv("VERIFICATION_LOG_ADDRESS", "")

    def is_production(self) -> bool:
        """Check if running in a production-like deployment."""
        return self.ENVIRONMENT.lower() in ("production", "prod", "staging", "stage")

    def is_encryption_configured(self) -> bool:
        """Check if encryption is properly configured."""
        if not self.MASTER_KEY:
            return False
        try:
            key_bytes = bytes.fromhex(self.MASTER_KEY)
            return len(key_bytes) == 32
        except ValueError:
            return False

    def get_master_key(self) -> bytes:
        """
        Resolve the 32-byte master key.

        A malformed key always fails. A missing key fails in production;
        in development an ephemeral key is generated, so envelopes do not
        survive a restart.

        Returns:
            Raw key bytes
        """
        if not self.MASTER_KEY:
            if self.is_production():
                raise ConfigurationError("MASTER_KEY is required in production")
            logger.warning("[!] MASTER_KEY not set, using an ephemeral development key")
            self.MASTER_KEY = secrets.token_hex(32)

        if not self.is_encryption_configured():
            raise ConfigurationError("MASTER_KEY must be 64 hex characters (32 bytes)")
        return bytes.fromhex(self.MASTER_KEY)

    def get_share_link(self, share_handle: str) -> str:
        """Get the frontend import URL for a share handle."""
        return f"{self.FRONTEND_URL.rstrip('/')}/import/{share_handle}"

    def ensure_data_dir(self) -> None:
        """Create the parent directory of the database file."""
        Path(self.DB_PATH).parent.mkdir(parents=True, exist_ok=True)

    def validate(self) -> None:
        """Fail fast on settings the services cannot run with."""
        if self.REQUEST_ID_MIN >= self.REQUEST_ID_MAX:
            raise ConfigurationError("REQUEST_ID_MIN must be below REQUEST_ID_MAX")
        if self.ID_GENERATION_ATTEMPTS < 1:
            raise ConfigurationError("ID_GENERATION_ATTEMPTS must be at least 1")
        if not 1 <= self.CONTENT_HANDLE_LENGTH <= 64:
            raise ConfigurationError("CONTENT_HANDLE_LENGTH must be between 1 and 64")
        self.get_master_key()


# Global config instance
config = Config()
