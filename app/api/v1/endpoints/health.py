"""Health check endpoint for load balancers and monitoring."""

import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import get_db

router = APIRouter()


@router.get("")
async def health():
    """Liveness. Includes built_at when BACKEND_BUILT_AT is set."""
    settings = get_settings()
    payload: dict = {"status": "ok", "app": settings.app_name, "environment": settings.environment}
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    """Readiness: app + DB connectivity."""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": type(e).__name__},
        )
    return {"status": "ok", "database": "connected"}
