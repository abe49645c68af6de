"""
FastAPI web application for the Atelier admin dashboard.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from atelier.config import config, validate_config, ConfigurationError, VERSION
from atelier.exceptions import DataSourceError
from atelier.llm_client import build_llm_client
from atelier.observability import setup_logging, get_logger, get_correlation_id
from atelier.store import AtelierStore
from web.middleware import RequestLoggingMiddleware
from web.routes import api
from web.routes.api._deps import limiter

# Configure structured logging
# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
setup_logging(level=config.web.log_level, json_format=(config.web.log_format == "json"))
logger = get_logger(__name__)

app = FastAPI(
    title="Atelier Dashboard",
    description="Catalog KPIs, reports and weekly AI insights",
    version=VERSION,
)

# Add rate limiter to app state
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": "Too many requests. Please try again later.",
            "retry_after": exc.detail
        }
    )


@app.exception_handler(DataSourceError)
async def data_source_error_handler(request: Request, exc: DataSourceError):
    logger.error(f"Data source error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={
            "detail": f"Data source unavailable: {exc.message}",
            "correlation_id": get_correlation_id(),
        }
    )


# Add request logging middleware (adds correlation IDs and timing)
app.add_middleware(RequestLoggingMiddleware)

# Add Gzip compression (min 500 bytes to compress)
app.add_middleware(GZipMiddleware, minimum_size=500)

app.include_router(api.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Atelier Dashboard starting...")

    # Validate configuration early - fail fast with clear errors
    try:
        validate_config()
        logger.info("Configuration validated")
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        raise SystemExit(1)

    store = AtelierStore(config.store.db_path)
    try:
        await store.connect()
        stats = await store.get_stats()
        logger.info(
            f"DuckDB ready: {stats['items']} items, "
            f"{stats['views']} views, {stats['clicks']} clicks, "
            f"{stats['insight_logs']} insight logs"
        )
    except DataSourceError as e:
        logger.error(f"DuckDB initialization failed: {e}", exc_info=True)
        raise  # Fail fast - the store is required

    app.state.store = store
    app.state.llm_client = build_llm_client()
    if not app.state.llm_client.is_available:
        logger.warning("ANTHROPIC_API_KEY not set - insight generation will fail")

    logger.info("Dashboard ready")


@app.on_event("shutdown")
async def shutdown_event():
    store = getattr(app.state, "store", None)
    if store is not None:
        await store.close()
        app.state.store = None
        logger.info("DuckDB closed")
    logger.info("Atelier Dashboard stopped")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("web.main:app", host=config.web.host, port=config.web.port)
