"""
JWT session token creation and verification.
Uses PyJWT with HS256 algorithm.

A token carries the admin session granted by the access gate, so each
request resolves the admin flag once from its own token.
"""
import jwt
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from access.access_gate import AdminSession


class JWTHandler:
    """Handles session token creation and verification."""

    def __init__(self, secret: str, algorithm: str = "HS256",
                 expiry_minutes: int = 480):
        if not secret:
            raise ValueError("API_JWT_SECRET must be set when API is enabled")
        self.secret = secret
        self.algorithm = algorithm
        self.expiry_minutes = expiry_minutes
        self._revoked = set()

    def create_session_token(self, session: AdminSession) -> Dict[str, Any]:
        """Create a token for an admin session, with its response metadata."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": "admin",
            "role": "admin" if session.is_admin else "viewer",
            "type": "session",
            "started_at": session.started_at,
            "iat": now,
            "exp": now + timedelta(minutes=self.expiry_minutes),
            "jti": str(uuid.uuid4()),
        }
        return {
            "access_token": jwt.encode(payload, self.secret, algorithm=self.algorithm),
            "token_type": "bearer",
            "expires_in": self.expiry_minutes * 60,
            "role": payload["role"],
        }

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a session token.

        Returns:
            Decoded payload if valid, None otherwise.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

        if payload.get("type") != "session":
            return None
        if payload.get("jti") in self._revoked:
            return None
        return payload

    def session_from_token(self, token: str) -> Optional[AdminSession]:
        payload = self.verify_token(token)
        if not payload:
            return None
        return AdminSession(
            is_admin=payload.get("role") == "admin",
            started_at=payload.get("started_at", ""),
        )

    def revoke(self, token: str) -> None:
        """Invalidate a token for the rest of this process (logout)."""
        payload = self.verify_token(token)
        if payload:
            self._revoked.add(payload["jti"])
