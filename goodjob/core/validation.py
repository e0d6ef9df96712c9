"""
Small predicates shared by the request validators.

They only answer yes/no; callers decide which HttpError message to raise.
"""

import math
from typing import Any, Iterable

from pydantic import EmailStr, TypeAdapter, ValidationError

_email_adapter = TypeAdapter(EmailStr)


def validate_email(email: Any) -> bool:
    if not isinstance(email, str):
        return False
    try:
        _email_adapter.validate_python(email.lower())
    except ValidationError:
        return False
    return True


def required_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def string_require_length(value: Any, min_length: int, max_length: int) -> bool:
    return isinstance(value, str) and min_length <= len(value) <= max_length


def should_in(value: Any, options: Iterable) -> bool:
    return value in options


def required_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def optional_number(value: Any) -> bool:
    return value is None or required_number(value)


def required_number_in_range(value: Any, minimum: float, maximum: float) -> bool:
    return required_number(value) and minimum <= value <= maximum


def required_number_greater_than_or_equal_to(value: Any, minimum: float) -> bool:
    return required_number(value) and value >= minimum
