"""
Logging, correlation IDs, operation timing and in-process metrics.

Every log line emitted while a request is being served carries that
request's correlation ID, so a report or insight run can be followed from
the HTTP access line down to the individual store queries.

Usage:
    from atelier.observability import setup_logging, get_logger, timed

    setup_logging(level="INFO", json_format=True)
    logger = get_logger(__name__)

    @timed("generate_report")
    async def generate(...):
        logger.info("Report generated", extra={"range": "week"})
"""
import functools
import inspect
import json
import logging
import time
import uuid
from collections import Counter, deque
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional, Any, Dict, Callable, Deque, Iterator

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord has; anything else on a record came from ``extra=``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Chatty at INFO: HTTP clients used by the Anthropic SDK and the access log
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "uvicorn.access", "watchfiles")


# ═══════════════════════════════════════════════════════════════════════════════
# CORRELATION IDS
# ═══════════════════════════════════════════════════════════════════════════════

def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Short random id, enough to tell concurrent requests apart in logs."""
    return uuid.uuid4().hex[:8]


@contextmanager
def correlation_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation ID for the block and restore the previous one after."""
    token = _correlation_id.set(correlation_id or generate_correlation_id())
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


# ═══════════════════════════════════════════════════════════════════════════════
# FORMATTERS
# ═══════════════════════════════════════════════════════════════════════════════

def _log_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields shared by both formatters: header first, then ``extra=`` values."""
    fields: Dict[str, Any] = {
        "timestamp": datetime.fromtimestamp(record.created, timezone.utc),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    correlation_id = get_correlation_id()
    if correlation_id:
        fields["correlation_id"] = correlation_id
    fields.update(
        (key, value) for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _log_fields(record)
        fields["timestamp"] = fields["timestamp"].isoformat().replace("+00:00", "Z")
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        return json.dumps(fields, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console format for local runs.

    TIMESTAMP - LEVEL - LOGGER [CORRELATION_ID] - MESSAGE key=value ...
    """

    def format(self, record: logging.LogRecord) -> str:
        fields = _log_fields(record)
        timestamp = fields.pop("timestamp").strftime("%Y-%m-%d %H:%M:%S")
        level = fields.pop("level")
        name = fields.pop("logger")
        message = fields.pop("message")
        correlation_id = fields.pop("correlation_id", None)

        line = f"{timestamp} - {level:8} - {name}"
        if correlation_id:
            line += f" [{correlation_id}]"
        line += f" - {message}"
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_libs: bool = False
) -> None:
    """
    Install a single root handler.

    Args:
        level: Root log level name
        json_format: JSON lines (LOG_FORMAT=json) instead of console format
        include_libs: Keep third-party loggers at the root level
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    if not include_libs:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════════════════
# TIMING
# ═══════════════════════════════════════════════════════════════════════════════

def _log_duration(
    logger: logging.Logger,
    operation: str,
    elapsed_ms: float,
    warn_threshold_ms: float,
) -> None:
    level = logging.WARNING if elapsed_ms > warn_threshold_ms else logging.DEBUG
    logger.log(
        level,
        f"{operation} completed",
        extra={"operation": operation, "duration_ms": round(elapsed_ms, 2)}
    )


class Timer:
    """
    Time a block; log the duration when a logger is given.

    Usage:
        with Timer("store_stats") as t:
            stats = await store.catalog.get_stats()
        latency = t.elapsed_ms
    """

    def __init__(
        self,
        name: str,
        logger: Optional[logging.Logger] = None,
        warn_threshold_ms: float = 1000,
    ):
        self.name = name
        self.logger = logger
        self.warn_threshold_ms = warn_threshold_ms
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        if self.logger:
            _log_duration(self.logger, self.name, self.elapsed_ms, self.warn_threshold_ms)


def timed(name: Optional[str] = None, warn_threshold_ms: float = 1000):
    """
    Log and record the duration of every call, including failed ones.

    Works on plain functions and coroutines. Samples land in the global
    ``metrics`` under the operation name and show up on /api/metrics.
    """
    def decorator(func: Callable) -> Callable:
        operation = name or func.__name__
        func_logger = get_logger(func.__module__)

        def _done(start: float) -> None:
            elapsed_ms = (time.perf_counter() - start) * 1000
            _log_duration(func_logger, operation, elapsed_ms, warn_threshold_ms)
            metrics.record_timing(operation, elapsed_ms)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _done(start)
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _done(start)
        return sync_wrapper

    return decorator


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS
# ═══════════════════════════════════════════════════════════════════════════════

def _summarize(samples: Deque[float]) -> Dict[str, Any]:
    ordered = sorted(samples)
    return {
        "count": len(ordered),
        "avg_ms": round(sum(ordered) / len(ordered), 2),
        "min_ms": round(ordered[0], 2),
        "max_ms": round(ordered[-1], 2),
        "p50_ms": round(ordered[len(ordered) // 2], 2),
    }


class MetricsCollector:
    """
    Process-local counters since startup.

    Request counts per endpoint, error counts per type and a rolling
    window of the last ``max_samples`` durations per operation.
    """

    def __init__(self, max_samples: int = 100):
        self._max_samples = max_samples
        self._requests: Counter = Counter()
        self._errors: Counter = Counter()
        self._timings: Dict[str, Deque[float]] = {}

    def record_request(self, endpoint: str) -> None:
        self._requests[endpoint] += 1

    def record_error(self, error_type: str) -> None:
        self._errors[error_type] += 1

    def record_timing(self, operation: str, duration_ms: float) -> None:
        window = self._timings.get(operation)
        if window is None:
            window = self._timings[operation] = deque(maxlen=self._max_samples)
        window.append(duration_ms)

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot in the /api/metrics shape."""
        return {
            "requests": dict(self._requests),
            "errors": dict(self._errors),
            "timing": {op: _summarize(s) for op, s in self._timings.items() if s},
        }

    def reset(self) -> None:
        self._requests.clear()
        self._errors.clear()
        self._timings.clear()


metrics = MetricsCollector()
