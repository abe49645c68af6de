"""AI insight endpoints: generate (POST) and read the cached one (GET)."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from atelier.exceptions import AtelierError
from atelier.insight_service import InsightCache, InsightGenerator
from atelier.observability import metrics
from web.schemas import InsightResponse
from ._deps import limiter, get_insight_cache, get_insight_generator

router = APIRouter(prefix="/admin/ai-insights", tags=["insights"])
logger = logging.getLogger(__name__)

FAILURE_BODY = {"error": "AI insight failed"}


@router.post("", response_model=InsightResponse, response_model_exclude_none=True)
@limiter.limit("10/minute")
async def generate_insight(
    request: Request,
    generator: InsightGenerator = Depends(get_insight_generator),
):
    """Compute the weekly snapshot, generate a narrative and cache it."""
    try:
        result = await generator.generate()
    except AtelierError as e:
        logger.error(f"Insight generation failed: {e}")
        metrics.record_error(type(e).__name__)
        return JSONResponse(status_code=500, content=FAILURE_BODY)
    return result.to_dict()


@router.get("", response_model=InsightResponse, response_model_exclude_none=True)
@limiter.limit("60/minute")
async def get_cached_insight(
    request: Request,
    cache: InsightCache = Depends(get_insight_cache),
):
    """Most recent insight, or {"cached": false} when none exists."""
    cached = await cache.get_cached()
    if cached is None:
        return {"cached": False}
    return cached.to_dict()
