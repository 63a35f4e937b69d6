import time

from fastapi import APIRouter

from app.storage.documents import utc_now

router = APIRouter()

_started_at = time.monotonic()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {
        "status": "OK",
        "timestamp": utc_now().isoformat(),
        "uptime": round(time.monotonic() - _started_at, 3),
    }
