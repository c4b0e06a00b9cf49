from fastapi import APIRouter, HTTPException

from app.db.session import check_db

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness check - verifies the database answers."""
    if not await check_db():
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ready"}
