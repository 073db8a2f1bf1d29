"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from shelfscan.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check."""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "features": {
            "receipt_ocr": settings.feature_receipt_ocr,
            "ai_categorization": settings.ai_categorization_enabled,
        },
    }


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check.

    Returns 200 if the process is alive.
    """
    return {"live": True, "timestamp": datetime.now(timezone.utc).isoformat()}
