"""
Input validation functions for API parameters.

All validators raise ValidationError on invalid input. The report range
selector is deliberately not validated here: unknown values fall back to
"all" (see atelier.date_range).
"""
from atelier.exceptions import ValidationError

MAX_LIMIT = 50


def validate_limit(
    value: int,
    field: str = "limit",
    min_value: int = 1,
    max_value: int = MAX_LIMIT
) -> int:
    """
    Validate a limit/count parameter.

    Args:
        value: Limit value to validate
        field: Field name for error messages
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Validated limit

    Raises:
        ValidationError: If limit is out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "Must be an integer", value)

    if value < min_value:
        raise ValidationError(field, f"Must be at least {min_value}", value)

    if value > max_value:
        raise ValidationError(field, f"Cannot exceed {max_value}", value)

    return value
