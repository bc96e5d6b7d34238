"""
Health check route - public, no authentication required.
"""
from fastapi import APIRouter

router = APIRouter()


@router.get(
    "",
    summary="System health check",
)
async def health_check():
    """
    Check system health status.

    Reports the catalog size, whether OCR is configured and whether the
    bill ledger is enabled. No authentication required.
    """
    health = {
        "status": "healthy",
        "service": "Stitchbook API",
        "version": "1.0.0",
        "components": {}
    }

    try:
        import config
        health["components"]["config"] = "ok"
        health["components"]["ocr"] = "configured" if config.GOOGLE_API_KEY else "unconfigured"
        health["components"]["ledger"] = "enabled" if config.ENABLE_BILL_LEDGER else "disabled"
    except Exception as e:
        health["components"]["config"] = f"error: {str(e)}"
        health["status"] = "degraded"

    try:
        from api.auth.dependencies import get_catalog
        health["components"]["catalog"] = f"{len(get_catalog())} designs"
    except Exception as e:
        health["components"]["catalog"] = f"unavailable: {str(e)}"
        health["status"] = "degraded"

    return health
