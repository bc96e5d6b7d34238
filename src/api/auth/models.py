"""
Pydantic models for access-gate requests and responses.
"""
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class SessionRole(str, Enum):
    viewer = "viewer"
    admin = "admin"


class LoginRequest(BaseModel):
    """Login request body."""
    passphrase: str = Field(..., min_length=1, max_length=256, description="Shared admin passphrase")


class TokenResponse(BaseModel):
    """Login response with the session token."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiry in seconds")
    role: SessionRole


class SessionProfile(BaseModel):
    """Current session."""
    is_admin: bool
    started_at: Optional[str] = None


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
