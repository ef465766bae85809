import collections.abc
import dataclasses
import json
import logging
import typing
from functools import lru_cache
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import Request
from pydantic import TypeAdapter, ValidationError

from .config import Config
from .errors import bad_request
from .fields import IGNORE_SENTINEL, Category, FieldSpec, parse_int, resolve_display_name, schema_for, split_json_tag


logger = logging.getLogger(__name__)

T = TypeVar("T")


def wire_name(spec: FieldSpec) -> Optional[str]:
    """Key used on the wire, or None when the field is excluded from JSON."""
    name, options = split_json_tag(spec.json_tag)
    if name == IGNORE_SENTINEL and not options:
        return None
    return name or spec.name


def zero_value(spec: FieldSpec) -> Any:
    """Value a field takes when its key is absent (or null) in a payload."""
    f = spec.field
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()

    if spec.category is Category.TEXT:
        return ""
    if spec.category is Category.INTEGER:
        return 0
    if spec.category is Category.FLOAT:
        return 0.0
    if spec.category is Category.BOOLEAN:
        return False
    if spec.category is Category.COLLECTION:
        origin = typing.get_origin(spec.annotation) or spec.annotation
        if origin in (list, tuple, set, frozenset, dict, bytes, bytearray):
            return origin()
        if issubclass(origin, collections.abc.Mapping):
            return {}
        if issubclass(origin, collections.abc.Set):
            return set()
        return []
    return None


@lru_cache(maxsize=None)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _index_fields(target: type) -> Dict[str, FieldSpec]:
    fields: Dict[str, FieldSpec] = {}
    for spec in schema_for(target):
        if not spec.field.init:
            continue
        key = wire_name(spec)
        if key is not None:
            fields[key] = spec
    return fields


def _match_field(fields: Dict[str, FieldSpec], key: str) -> Optional[FieldSpec]:
    spec = fields.get(key)
    if spec is not None:
        return spec
    folded = key.casefold()
    for name, candidate in fields.items():
        if name.casefold() == folded:
            return candidate
    return None


def _coerce(spec: FieldSpec, raw: Any) -> Any:
    try:
        return _adapter(spec.annotation).validate_python(raw)
    except ValidationError as e:
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        raise bad_request(f"Invalid JSON format: {resolve_display_name(spec)}: {reason}", e) from e


def parse_json(body: Optional[bytes], target: Type[T], *, disallow_unknown_fields: bool = True) -> T:
    """Decode a JSON object body into an instance of the dataclass ``target``.

    Absent keys and nulls leave a field at its default (or its category's zero
    value), so presence is judged later by the validator, not here.
    Raises AppError(400) for empty bodies, malformed JSON, unknown keys and
    values that cannot be coerced to the field's type.
    """
    if not (isinstance(target, type) and dataclasses.is_dataclass(target)):
        raise TypeError(f"{target!r} is not a dataclass")
    if not body:
        raise bad_request("Request body is empty")

    try:
        payload = json.loads(body)
    except ValueError as e:
        logger.info(f"Rejected malformed JSON body for {target.__name__}: {e}")
        raise bad_request(f"Invalid JSON format: {e}", e) from e

    if not isinstance(payload, dict):
        raise bad_request("Invalid JSON format: expected a JSON object")

    fields = _index_fields(target)
    values: Dict[str, Any] = {}
    for key, raw in payload.items():
        spec = _match_field(fields, key)
        if spec is None:
            if disallow_unknown_fields:
                raise bad_request(f'Invalid JSON format: unknown field "{key}"')
            continue
        if raw is None:
            continue
        values[spec.name] = _coerce(spec, raw)

    for spec in fields.values():
        if spec.name not in values:
            values[spec.name] = zero_value(spec)

    return target(**values)


async def read_json(request: Request, target: Type[T]) -> T:
    body = await request.body()
    return parse_json(body, target, disallow_unknown_fields=Config.DISALLOW_UNKNOWN_FIELDS)


def get_page_param(request: Request) -> int:
    page = parse_int(request.query_params.get("page"))
    if page is None or page < 1:
        return Config.DEFAULT_PAGE
    return page


def get_limit_param(request: Request) -> int:
    limit = parse_int(request.query_params.get("limit"))
    if limit is None or limit < 1 or limit > Config.MAX_LIMIT:
        return Config.DEFAULT_LIMIT
    return limit
