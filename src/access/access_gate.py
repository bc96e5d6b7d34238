"""
Access Gate

Single shared passphrase that unlocks the mutating parts of the app.
This is a visibility gate, not an authorization model: it has one role and
one secret.

Instead of an ambient global flag, a successful login returns an
AdminSession that callers pass along (the REST layer encodes it in a signed
token and resolves it once per request). The login state is also kept
under a fixed storage key so it survives a restart. That flag is shared:
the REST layer only honours a token while it is set, so a logout from any
client ends admin mode for every outstanding token.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import bcrypt as _bcrypt

import config
from errors import AuthorizationError
from storage.record_store import RecordStore
from utils.logger import get_logger


@dataclass(frozen=True)
class AdminSession:
    """Proof that the passphrase was presented."""
    is_admin: bool = True
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class AccessGate:
    """Passphrase check plus the persisted admin flag."""

    def __init__(self, store: Optional[RecordStore] = None, passphrase: Optional[str] = None,
                 storage_key: str = config.ADMIN_FLAG_STORAGE_KEY):
        secret = passphrase if passphrase is not None else config.ADMIN_PASSPHRASE
        if not secret:
            raise ValueError("ADMIN_PASSPHRASE must be set")
        # Keep only a hash of the secret in memory
        self._passphrase_hash = _bcrypt.hashpw(secret.encode("utf-8"), _bcrypt.gensalt())
        self.store = store or RecordStore()
        self.storage_key = storage_key
        self.logger = get_logger()

    def check_passphrase(self, passphrase: str) -> bool:
        if not passphrase:
            return False
        return _bcrypt.checkpw(passphrase.encode("utf-8"), self._passphrase_hash)

    def login(self, passphrase: str) -> AdminSession:
        """
        Raises:
            AuthorizationError: wrong passphrase (the stored flag is not changed).
        """
        if not self.check_passphrase(passphrase):
            self.logger.warning("Rejected admin login attempt", component="AccessGate")
            raise AuthorizationError("Invalid passphrase")
        self.store.set(self.storage_key, True)
        self.logger.info("Admin logged in", component="AccessGate")
        return AdminSession()

    def logout(self) -> None:
        self.store.delete(self.storage_key)
        self.logger.info("Admin logged out", component="AccessGate")

    def is_admin(self) -> bool:
        """Persisted flag from the last login/logout."""
        return self.store.get(self.storage_key, default=False) is True

    def restore_session(self) -> Optional[AdminSession]:
        """Session for a flag left set by a previous run, if any."""
        return AdminSession() if self.is_admin() else None


def require_admin(session: Optional[AdminSession]) -> AdminSession:
    """
    Raises:
        AuthorizationError: no admin session was supplied.
    """
    if session is None or not session.is_admin:
        raise AuthorizationError("Admin access required")
    return session
