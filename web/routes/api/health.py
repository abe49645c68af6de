"""Health check and in-process metrics endpoints."""
import logging
import time

from fastapi import APIRouter, Depends, Request

from atelier.config import VERSION
from atelier.exceptions import DataSourceError
from atelier.llm_client import LLMClient
from atelier.observability import get_correlation_id, metrics, Timer
from atelier.store import AtelierStore
from web.schemas import HealthResponse, MetricsResponse
from ._deps import limiter, get_store, get_llm_client, START_TIME

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
@limiter.limit("60/minute")
async def health_check(
    request: Request,
    store: AtelierStore = Depends(get_store),
    llm: LLMClient = Depends(get_llm_client),
):
    """Health check endpoint for Docker/load balancer monitoring."""
    uptime_seconds = int(time.time() - START_TIME)

    try:
        with Timer("health_check_store") as timer:
            stats = await store.catalog.get_stats()
        store_status = {"status": "connected", "latency_ms": round(timer.elapsed_ms, 2), **stats}
    except DataSourceError as e:
        logger.warning(f"Health check store error: {e}")
        store_status = {"status": f"error: {e}"}

    return {
        "status": "healthy" if store_status["status"] == "connected" else "degraded",
        "version": VERSION,
        "uptime_seconds": uptime_seconds,
        "correlation_id": get_correlation_id(),
        "store": store_status,
        "llm_configured": llm.is_available,
    }


@router.get("/metrics", response_model=MetricsResponse)
@limiter.limit("30/minute")
async def get_metrics(request: Request):
    """Request counts, error counts and timing samples since startup."""
    return metrics.get_stats()
