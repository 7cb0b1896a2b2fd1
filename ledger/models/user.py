"""
User Model

Passwords are never held in plain text. A user record carries only the
SHA-256 hex digest of the password.
"""

import hashlib

from pydantic import BaseModel, ConfigDict, Field


def hash_password(password: str) -> str:
    """One-way digest of a password (SHA-256, lowercase hex)."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class User(BaseModel):
    """
    A ledger account.

    Username uniqueness is enforced by the caller (sign-up checks
    UserStore.exists first), not by this model or the store.
    """
    model_config = ConfigDict(frozen=True)

    username: str = Field(
        ...,
        description="Unique account name"
    )
    password_digest: str = Field(
        ...,
        description="hash_password() of the account password"
    )
    is_admin: bool = Field(
        default=False,
        description="Admin accounts may search transactions"
    )

    @classmethod
    def create(cls, username: str, password: str, is_admin: bool = False) -> "User":
        """Build a user from a plain-text password."""
        return cls(
            username=username,
            password_digest=hash_password(password),
            is_admin=is_admin,
        )

    def check_password(self, password: str) -> bool:
        return self.password_digest == hash_password(password)
