"""Shared dependencies for API route modules."""
import time

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from atelier.insight_service import InsightCache, InsightGenerator
from atelier.llm_client import LLMClient
from atelier.report_service import ReportService
from atelier.store import AtelierStore

# Shared limiter instance
limiter = Limiter(key_func=get_remote_address)

# Track startup time for uptime calculation
START_TIME = time.time()


def get_store(request: Request) -> AtelierStore:
    """Store opened on startup and kept on app.state."""
    return request.app.state.store


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_report_service(request: Request) -> ReportService:
    return ReportService(get_store(request))


def get_insight_cache(request: Request) -> InsightCache:
    return InsightCache(get_store(request))


def get_insight_generator(request: Request) -> InsightGenerator:
    return InsightGenerator(get_store(request), get_llm_client(request))
