"""Health and observability routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_generator, get_health_checker
from core.health import Status
from utils.timestamp import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health")
async def health(health_checker=Depends(get_health_checker)):
    """Health check with component status."""
    report = await health_checker.check()
    status_code = 200 if report.status != Status.FAIL else 503
    return JSONResponse(content=report.to_dict(), status_code=status_code)


@router.get("/heartbeat")
async def heartbeat(generator=Depends(get_generator)):
    """Lightweight heartbeat for frequent polling."""
    return {
        "status": "ok",
        "timestamp": format_timestamp(),
        "layout": generator.layout.to_dict(),
        "capacity": generator.layout.capacity(),
        **generator.stats(),
    }
