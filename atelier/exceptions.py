"""
Custom exception hierarchy for the analytics engine.

Exception Hierarchy:
    AtelierError (base)
    ├── DataSourceError         - Store unreachable or query failed (fatal to a report)
    │   └── QueryTimeoutError   - Query exceeded the store timeout
    └── InsightGenerationError  - Text generation failed, nothing persisted

    ValidationError             - Input validation failed
"""


class AtelierError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class DataSourceError(AtelierError):
    """
    The underlying store is unreachable or returned an error.

    No partial report is produced when this is raised.
    """

    def __init__(self, message: str, details: str = None, operation: str = None):
        super().__init__(message, details)
        self.operation = operation


class QueryTimeoutError(DataSourceError):
    """
    Database query exceeded timeout.

    Indicates a long-running query that should be investigated:
    - Missing index
    - Too much data being scanned
    """

    def __init__(self, query: str, timeout: float, details: str = None):
        self.query = query[:200] + "..." if len(query) > 200 else query
        self.timeout = timeout
        super().__init__(f"Query timed out after {timeout}s", details, operation="query")

    def __str__(self) -> str:
        return f"QueryTimeoutError: Query timed out after {self.timeout}s - {self.query}"


class InsightGenerationError(AtelierError):
    """
    The text-generation capability failed or returned an unusable response.

    Raised before anything is written to the insight log.
    """

    def __init__(self, message: str, details: str = None, model: str = None):
        super().__init__(message, details)
        self.model = model


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating user input before processing.
    """

    def __init__(self, field: str, message: str, value: any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
