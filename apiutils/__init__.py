from .core.errors import AppError
from .core.fields import Category, constrained
from .core.http import get_limit_param, get_page_param, parse_json, read_json
from .core.response import (
    write_created_response,
    write_error_response,
    write_json_response,
    write_no_content_response,
    write_success_response,
)
from .core.validation import ensure_valid, validate_struct

__all__ = [
    "AppError",
    "Category",
    "constrained",
    "ensure_valid",
    "get_limit_param",
    "get_page_param",
    "parse_json",
    "read_json",
    "validate_struct",
    "write_created_response",
    "write_error_response",
    "write_json_response",
    "write_no_content_response",
    "write_success_response",
]
