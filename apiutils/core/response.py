"""Envelope writers for every API response body.

Success: ``{"success": true, "data": ...}`` (``data`` omitted when None).
Failure: ``{"success": false, "error": {"code": "<reason phrase>", "message": "..."}}``.
"""

import logging
from typing import Any, Dict

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse

from .errors import AppError
from .fields import OMIT_EMPTY, describe, is_empty, is_struct, split_json_tag
from .http import wire_name


logger = logging.getLogger(__name__)


def dump_struct(value: Any) -> Any:
    """Convert structures to plain data keyed by wire names.

    Fields tagged ``"-"`` are dropped, ``omitempty`` fields are dropped when
    empty. Lists, tuples and dicts are walked so nested structures convert too.
    """
    if is_struct(value):
        out = {}
        for descriptor in describe(value):
            key = wire_name(descriptor.spec)
            if key is None:
                continue
            _, options = split_json_tag(descriptor.spec.json_tag)
            if OMIT_EMPTY in options and is_empty(descriptor.value, descriptor.category):
                continue
            out[key] = dump_struct(descriptor.value)
        return out
    if isinstance(value, (list, tuple)):
        return [dump_struct(item) for item in value]
    if isinstance(value, dict):
        return {key: dump_struct(item) for key, item in value.items()}
    return value


def _render(status_code: int, envelope: Dict[str, Any]) -> Response:
    try:
        return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope))
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize response envelope ({status_code}): {e}", exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)


def write_json_response(status_code: int, data: Any = None) -> Response:
    envelope: Dict[str, Any] = {"success": 200 <= status_code < 300}
    if data is not None:
        envelope["data"] = dump_struct(data)
    return _render(status_code, envelope)


def write_error_response(error: AppError) -> Response:
    envelope = {
        "success": False,
        "error": {
            "code": error.status_text,
            "message": error.message,
        },
    }
    return _render(error.status_code, envelope)


def write_success_response(data: Any = None) -> Response:
    return write_json_response(200, data)


def write_created_response(data: Any = None) -> Response:
    return write_json_response(201, data)


def write_no_content_response() -> Response:
    return Response(status_code=204)
