"""
Token encryption service using Fernet symmetric encryption.

GitHub OAuth access tokens are encrypted at rest when TOKEN_ENCRYPTION_KEY
is configured.
"""

from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from core.config import get_settings
from core.logging import get_logger

logger = get_logger("security.encryption")

# Fernet tokens are base64 and always start with this prefix (version byte + timestamp)
FERNET_PREFIX = "gAAAAA"


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""

    pass


class TokenEncryption:
    """
    Fernet-based encryption for GitHub access tokens.

    Usage:
        encryption = TokenEncryption(key)
        encrypted = encryption.encrypt("gho_xxxx...")
        decrypted = encryption.decrypt(encrypted)

    Without a key the service is unavailable and callers fall back to
    plaintext storage (see encrypt_if_available).
    """

    def __init__(self, key: str | None = None):
        self._fernet: Optional[Fernet] = None

        if not key:
            logger.warning("encryption_disabled", reason="TOKEN_ENCRYPTION_KEY not set")
            return

        try:
            self._fernet = Fernet(key.encode())
        except (ValueError, TypeError) as e:
            logger.error("encryption_init_failed", error=str(e), error_type=type(e).__name__)
            self._fernet = None

    @property
    def is_available(self) -> bool:
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a string value.

        Raises:
            EncryptionError: If encryption is unavailable
        """
        if self._fernet is None:
            raise EncryptionError("Encryption is not available")
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt an encrypted string.

        Raises:
            EncryptionError: If decryption fails or is unavailable
        """
        if self._fernet is None:
            raise EncryptionError("Encryption is not available")

        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            logger.error("decrypt_invalid_token")
            raise EncryptionError("Invalid token - decryption failed") from None

    def encrypt_if_available(
        self, plaintext: str, require_encryption: bool = False
    ) -> tuple[str, bool]:
        """
        Encrypt if available, otherwise return the plaintext.

        Returns:
            Tuple of (result_string, was_encrypted)

        Raises:
            EncryptionError: If require_encryption is True and encryption unavailable
        """
        if not self.is_available:
            if require_encryption:
                raise EncryptionError(
                    "Encryption is required but not available. "
                    "Set TOKEN_ENCRYPTION_KEY environment variable."
                )
            return plaintext, False

        return self.encrypt(plaintext), True

    def decrypt_if_encrypted(self, value: str) -> str:
        """Decrypt values that look like Fernet tokens, return others unchanged."""
        if not self.is_available or not value.startswith(FERNET_PREFIX):
            return value

        try:
            return self.decrypt(value)
        except EncryptionError:
            return value


@lru_cache(maxsize=1)
def get_encryption_service() -> TokenEncryption:
    """Get the process-wide encryption service."""
    return TokenEncryption(get_settings().token_encryption_key)


__all__ = ["EncryptionError", "TokenEncryption", "get_encryption_service", "FERNET_PREFIX"]
