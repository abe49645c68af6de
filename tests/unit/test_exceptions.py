"""
Tests for atelier.exceptions module.
"""
from atelier.exceptions import (
    AtelierError,
    DataSourceError,
    QueryTimeoutError,
    InsightGenerationError,
    ValidationError,
)


class TestAtelierError:
    """Tests for base AtelierError exception."""

    def test_message_only(self):
        error = AtelierError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details is None

    def test_message_with_details(self):
        error = AtelierError("Failed to fetch", "Connection refused")
        assert str(error) == "Failed to fetch: Connection refused"


class TestDataSourceError:
    """Tests for DataSourceError exception."""

    def test_inheritance(self):
        assert isinstance(DataSourceError("Store down"), AtelierError)

    def test_operation(self):
        error = DataSourceError("Query failed", "table missing", operation="query")
        assert error.operation == "query"
        assert str(error) == "Query failed: table missing"


class TestQueryTimeoutError:
    """Tests for QueryTimeoutError exception."""

    def test_is_data_source_error(self):
        """Timeouts are fatal to a report just like other store failures."""
        assert isinstance(QueryTimeoutError("SELECT 1", 30), DataSourceError)

    def test_truncates_long_query(self):
        error = QueryTimeoutError("SELECT " + "x" * 500, 5)
        assert error.query.endswith("...")
        assert len(error.query) == 203
        assert error.timeout == 5
        assert "5s" in str(error)


class TestInsightGenerationError:
    """Tests for InsightGenerationError exception."""

    def test_inheritance_and_model(self):
        error = InsightGenerationError("AI insight failed", "timeout", model="claude-test")
        assert isinstance(error, AtelierError)
        assert error.model == "claude-test"


class TestValidationError:
    """Tests for ValidationError exception."""

    def test_not_atelier_error(self):
        assert not isinstance(ValidationError("limit", "bad"), AtelierError)

    def test_with_value(self):
        error = ValidationError("limit", "Must be positive", value=-5)
        assert error.value == -5
        assert "-5" in str(error)

    def test_none_value(self):
        error = ValidationError("limit", "Required")
        assert str(error) == "limit: Required"
