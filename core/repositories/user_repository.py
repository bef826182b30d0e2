"""User repository for authentication and user management."""

from datetime import datetime

from core.config import get_settings
from core.logging import get_logger
from core.models import TokenBlacklist, User
from core.models.base import utcnow
from core.security.encryption import get_encryption_service

from .base import BaseRepository

logger = get_logger("repository.user")


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    model = User

    def get_by_github_api_id(self, github_api_id: int) -> User | None:
        """Get user by numeric GitHub account ID."""
        return self.session.query(User).filter(User.github_api_id == github_api_id).first()

    def list_with_credentials(self) -> list[User]:
        """Users that have a stored GitHub access token."""
        return (
            self.session.query(User)
            .filter(User.github_api_access_token.isnot(None))
            .order_by(User.id)
            .all()
        )

    def _encrypt_token(self, token: str) -> str:
        """
        Encrypt a GitHub access token for secure storage.

        Falls back to plaintext if encryption is unavailable,
        but logs a warning for security auditing. With REQUIRE_ENCRYPTION
        set, an unavailable key raises EncryptionError instead.
        """
        encryption = get_encryption_service()
        encrypted, was_encrypted = encryption.encrypt_if_available(
            token, require_encryption=get_settings().require_encryption
        )

        if not was_encrypted:
            logger.warning(
                "token_stored_unencrypted",
                message="GitHub token stored without encryption. Set TOKEN_ENCRYPTION_KEY for secure storage.",
            )

        return encrypted

    def get_decrypted_token(self, user: User) -> str | None:
        """Return the plaintext GitHub access token, or None if none is stored."""
        if not user.github_api_access_token:
            return None

        encryption = get_encryption_service()
        return encryption.decrypt_if_encrypted(user.github_api_access_token)

    def create_or_update_from_github(
        self,
        github_api_id: int,
        github_api_login: str,
        access_token: str,
        name: str | None = None,
        email: str | None = None,
        avatar_url: str | None = None,
    ) -> tuple[User, bool]:
        """
        Create or update a user from GitHub OAuth data.

        Returns:
            Tuple of (user, credentials_changed). credentials_changed is True
            when the user is new or the stored login or access token differ
            from the ones GitHub just handed out.
        """
        user = self.get_by_github_api_id(github_api_id)

        if user is None:
            user = User(
                github_api_id=github_api_id,
                github_api_login=github_api_login,
                github_api_access_token=self._encrypt_token(access_token),
                name=name,
                email=email,
                avatar_url=avatar_url,
            )
            self.session.add(user)
            self.session.flush()
            return user, True

        credentials_changed = (
            user.github_api_login != github_api_login
            or self.get_decrypted_token(user) != access_token
        )

        if credentials_changed:
            user.github_api_login = github_api_login
            user.github_api_access_token = self._encrypt_token(access_token)
        if name:
            user.name = name
        if email:
            user.email = email
        if avatar_url:
            user.avatar_url = avatar_url
        user.updated_at = utcnow()

        self.session.flush()
        return user, credentials_changed


class TokenBlacklistRepository(BaseRepository[TokenBlacklist]):
    """Repository for managing blacklisted JWT tokens."""

    model = TokenBlacklist

    def is_blacklisted(self, token_jti: str) -> bool:
        """Check if a token JTI is blacklisted."""
        return self.exists_where(token_jti=token_jti)

    def blacklist_token(self, token_jti: str, expires_at: datetime) -> TokenBlacklist:
        """Add a token to the blacklist."""
        return self.save(TokenBlacklist(token_jti=token_jti, expires_at=expires_at))

    def cleanup_expired(self) -> int:
        """Remove expired tokens from blacklist."""
        result = (
            self.session.query(TokenBlacklist)
            .filter(TokenBlacklist.expires_at < utcnow())
            .delete()
        )
        self.session.flush()
        return result
