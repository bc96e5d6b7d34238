"""
Access routes - passphrase login, logout, current session.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Depends
from fastapi.security import HTTPAuthorizationCredentials

from access.access_gate import AdminSession
from api.auth.models import (
    LoginRequest, TokenResponse, SessionProfile, MessageResponse, ErrorResponse,
)
from api.auth.dependencies import (
    security, get_access_gate, get_jwt_handler, get_admin_session, get_optional_session,
)
from errors import AuthorizationError

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Unlock admin mode with the shared passphrase",
)
async def login(body: LoginRequest):
    """
    Check the shared passphrase.

    Returns a session token to pass as `Authorization: Bearer <token>` on
    admin routes (adding designs, billing, export).
    """
    gate = get_access_gate()
    jwt_handler = get_jwt_handler()

    try:
        session = gate.login(body.passphrase)
    except AuthorizationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid passphrase",
        )

    return TokenResponse(**jwt_handler.create_session_token(session))


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Leave admin mode",
)
async def logout(
    session: AdminSession = Depends(get_admin_session),
    credentials: HTTPAuthorizationCredentials = Depends(security),
):
    """Clear the persisted admin flag and revoke the presented token."""
    get_access_gate().logout()
    get_jwt_handler().revoke(credentials.credentials)
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=SessionProfile,
    summary="Current session",
)
async def me(session: Optional[AdminSession] = Depends(get_optional_session)):
    """Anonymous callers get `is_admin: false`."""
    if session is None:
        return SessionProfile(is_admin=False)
    return SessionProfile(is_admin=session.is_admin, started_at=session.started_at)
