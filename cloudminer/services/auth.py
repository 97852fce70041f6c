"""
Credential handling.

The ledger never stores or compares raw secrets: it asks an AuthProvider
for a salted one-way hash at registration and for a verdict at login.
"""

from typing import Protocol

import bcrypt

from cloudminer.config.settings import settings
from cloudminer.utils.validation import normalize_email


class AuthProvider(Protocol):
    """Credential collaborator consumed by the account service."""

    def hash_secret(self, secret: str) -> str:
        """Return a salted one-way hash of the secret."""
        ...

    def verify(self, secret_hash: str, supplied_secret: str) -> bool:
        """Check a supplied secret against a stored hash."""
        ...

    def normalize_email(self, raw: str) -> str:
        """Normalize an email for lookup."""
        ...


class BcryptAuthProvider:
    """AuthProvider backed by bcrypt."""

    def __init__(self, rounds: int | None = None) -> None:
        """
        Initialize provider.

        Args:
            rounds: bcrypt cost factor (defaults to settings)
        """
        self.rounds = rounds or settings.bcrypt_rounds

    def hash_secret(self, secret: str) -> str:
        """
        Hash a secret with bcrypt.

        Args:
            secret: Plain text secret

        Returns:
            bcrypt hash as text
        """
        return bcrypt.hashpw(
            secret.encode(), bcrypt.gensalt(rounds=self.rounds)
        ).decode()

    def verify(self, secret_hash: str, supplied_secret: str) -> bool:
        """
        Verify a secret against a stored bcrypt hash.

        Args:
            secret_hash: Stored hash
            supplied_secret: Plain text secret to verify

        Returns:
            True if the secret matches, False otherwise
        """
        if not secret_hash:
            return False
        try:
            return bcrypt.checkpw(supplied_secret.encode(), secret_hash.encode())
        except ValueError:
            # Malformed stored hash
            return False

    def normalize_email(self, raw: str) -> str:
        """Lowercase and trim an email."""
        return normalize_email(raw)
