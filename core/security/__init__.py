"""
Security module for the Sponsors Portal.

Provides:
- Token encryption (Fernet)
"""

from .encryption import EncryptionError, TokenEncryption, get_encryption_service

__all__ = [
    "EncryptionError",
    "TokenEncryption",
    "get_encryption_service",
]
