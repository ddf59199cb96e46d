"""Health endpoint: throttle queue and backfill worker status."""

from fastapi import APIRouter, Depends

from animelog.api.dependencies import get_backfill_worker, get_throttle
from animelog.api.schemas import HealthResponse
from animelog.application.workers.cover_backfill_worker import CoverBackfillWorker
from animelog.infrastructure.rate_limiter import RequestThrottle

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    throttle: RequestThrottle = Depends(get_throttle),
    worker: CoverBackfillWorker | None = Depends(get_backfill_worker),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        throttle=throttle.get_status(),
        backfill=worker.get_status() if worker is not None else None,
    )
