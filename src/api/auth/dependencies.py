"""
FastAPI dependencies for the access gate and shared services.
Provides get_admin_session, which resolves the admin flag from the Bearer
token once per request, and getters for the catalog, billing engine,
recognizer and exporter.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Any, Dict, Optional

from access.access_gate import AdminSession, require_admin
from errors import AuthorizationError
from utils.logger import get_logger

# Will be initialized in main.py when the app starts
_services: Dict[str, Any] = {}

# Missing headers are reported as 401 by get_admin_session, not by HTTPBearer
security = HTTPBearer(auto_error=False)


def build_services() -> Dict[str, Any]:
    """Construct every service from config."""
    import config
    from access.access_gate import AccessGate
    from api.auth.jwt_handler import JWTHandler
    from billing.bill_ledger import BillLedger
    from billing.billing_engine import BillingEngine
    from catalog.design_catalog import DesignCatalog
    from exports.bill_exporter import BillExporter
    from ocr.design_number_recognizer import DesignNumberRecognizer
    from storage.record_store import RecordStore

    store = RecordStore(data_dir=config.DATA_FOLDER)
    catalog = DesignCatalog(store=store)
    ledger = BillLedger(db_path=config.BILL_LEDGER_PATH) if config.ENABLE_BILL_LEDGER else None

    return {
        "store": store,
        "catalog": catalog,
        "ledger": ledger,
        "engine": BillingEngine(catalog, ledger=ledger),
        "gate": AccessGate(store=store),
        "jwt_handler": JWTHandler(
            secret=config.API_JWT_SECRET,
            algorithm=config.API_JWT_ALGORITHM,
            expiry_minutes=config.API_JWT_EXPIRY_MINUTES,
        ),
        "exporter": BillExporter(),
        "recognizer": DesignNumberRecognizer(),
    }


def init_services(services: Dict[str, Any]):
    """Initialize dependencies with actual instances. Called from main.py."""
    _services.clear()
    _services.update(services)


def reset_services():
    _services.clear()


def _lazy_init():
    """Lazy-initialize services from config if not already done."""
    if _services:
        return
    try:
        _services.update(build_services())
    except Exception as e:
        get_logger().error(f"Service initialization failed: {e}", component="API", exc_info=True)


def _get(name: str):
    _lazy_init()
    if name not in _services:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Service not initialized"
        )
    return _services[name]


def get_jwt_handler():
    return _get("jwt_handler")


def get_access_gate():
    return _get("gate")


def get_catalog():
    return _get("catalog")


def get_billing_engine():
    return _get("engine")


def get_bill_ledger():
    """Ledger instance, or None when ENABLE_BILL_LEDGER is off."""
    return _get("ledger")


def get_exporter():
    return _get("exporter")


def get_recognizer():
    return _get("recognizer")


async def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AdminSession]:
    """
    Session for the request's token, or None for anonymous callers.
    Invalid tokens are treated as anonymous.
    """
    if credentials is None:
        return None
    session = get_jwt_handler().session_from_token(credentials.credentials)
    if session is None or not get_access_gate().is_admin():
        return None
    return session


async def get_admin_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AdminSession:
    """
    FastAPI dependency that requires an admin session.
    Use on routes that mutate the catalog or bills:

        @router.post("/draft/items")
        async def add_item(session: AdminSession = Depends(get_admin_session)):
            ...
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = get_jwt_handler().session_from_token(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # A logout anywhere clears the shared flag and ends every token
    if not get_access_gate().is_admin():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin mode has ended, log in again",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return require_admin(session)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
