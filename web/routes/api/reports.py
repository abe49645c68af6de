"""Report endpoints: time-windowed catalog KPIs."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from atelier.config import config
from atelier.date_range import DateRange
from atelier.report_service import ReportService
from web.schemas import ReportResponse
from ._deps import limiter, get_report_service

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)


@router.get("/generate", response_model=ReportResponse)
@limiter.limit(f"{config.web.rate_limit_per_minute}/minute")
async def generate_report(
    request: Request,
    range: Optional[str] = Query("all", description="today, week, month, year or all"),
    service: ReportService = Depends(get_report_service),
):
    """
    Per-item views/clicks and KPIs for the selected window.

    Unknown ranges are treated as "all". Store failures surface as 503
    through the DataSourceError handler; no partial report is returned.
    """
    report = await service.generate(DateRange.parse(range))
    return report.to_dict()
