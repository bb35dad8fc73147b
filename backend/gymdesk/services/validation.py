"""Small input coercion helpers shared by the services. All raise ValidationError."""
import math
from datetime import datetime
from typing import Any, Optional

from gymdesk.core.errors import ValidationError


def required_text(value: Any, field: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"{field} is required", field=field)
    return text


def optional_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def positive_number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if math.isnan(number) or math.isinf(number) or number <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    return number


def integer(value: Any, field: str, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be an integer", field=field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, float) and value != number:
        raise ValidationError(f"{field} must be an integer", field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", field=field)
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} must be at most {maximum}", field=field)
    return number


def formatted(value: Any, fmt: str, field: str) -> str:
    """Check `value` parses with strptime `fmt` and return it in canonical form."""
    text = required_text(value, field)
    try:
        return datetime.strptime(text, fmt).strftime(fmt)
    except ValueError:
        raise ValidationError(f"{field} has an invalid format", field=field)
