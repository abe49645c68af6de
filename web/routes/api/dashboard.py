"""Admin overview endpoint."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from atelier.exceptions import ValidationError
from atelier.store import AtelierStore
from atelier.validators import validate_limit
from web.schemas import DashboardResponse
from web.services import dashboard_service
from ._deps import limiter, get_store

router = APIRouter(tags=["dashboard"])
logger = logging.getLogger(__name__)


@router.get("/dashboard", response_model=DashboardResponse)
@limiter.limit("60/minute")
async def get_dashboard(
    request: Request,
    recent: int = Query(5, description="Number of recent items to include"),
    store: AtelierStore = Depends(get_store),
):
    """Headline counters, recent items and the cached insight."""
    try:
        recent = validate_limit(recent, field="recent")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await dashboard_service.get_overview(store, recent_limit=recent)
