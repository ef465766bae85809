"""Field inspection primitives used by the structure validator.

A structure is a dataclass instance. Each field is described once per class by
a FieldSpec (name, semantic category, constraint metadata) and, per validation
call, by a FieldDescriptor pairing that spec with the field's current value.

Constraints are declared with ``constrained``::

    @dataclass
    class CreateUser:
        name: str = constrained(required=True, min=3, json="name")
        tags: list[str] = constrained(min=1, json="tags,omitempty", default_factory=list)
"""

import collections.abc
import dataclasses
import logging
import re
import sys
import types
import typing
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Iterator, Mapping, NamedTuple, Optional, Tuple


logger = logging.getLogger(__name__)

REQUIRED = "required"
MIN = "min"
JSON = "json"

IGNORE_SENTINEL = "-"
OMIT_EMPTY = "omitempty"

_INT_PATTERN = re.compile(r"[+-]?\d+")

_UNRESOLVED = object()


class Category(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    OPTIONAL = "optional"
    COLLECTION = "collection"
    UNSUPPORTED = "unsupported"


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    name: str
    category: Category
    annotation: Any
    constraints: Mapping[str, Any]
    field: dataclasses.Field = dataclasses.field(repr=False, compare=False)

    @property
    def json_tag(self) -> Optional[str]:
        return self.constraints.get(JSON)


class FieldDescriptor(NamedTuple):
    spec: FieldSpec
    value: Any

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def category(self) -> Category:
        return self.spec.category

    @property
    def constraints(self) -> Mapping[str, Any]:
        return self.spec.constraints


def constrained(*, required: bool = False, min: Any = None, json: Optional[str] = None, **kwargs: Any) -> Any:
    """Declare a dataclass field carrying constraint metadata.

    Accepts every keyword ``dataclasses.field`` does; existing ``metadata`` is
    merged with the constraints.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if required:
        metadata[REQUIRED] = True
    if min is not None:
        metadata[MIN] = min
    if json is not None:
        metadata[JSON] = json
    return dataclasses.field(metadata=metadata, **kwargs)


def categorize(annotation: Any) -> Category:
    if annotation is Any:
        return Category.OPTIONAL

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        if type(None) in typing.get_args(annotation):
            return Category.OPTIONAL
        return Category.UNSUPPORTED

    target = origin or annotation
    if not isinstance(target, type):
        return Category.UNSUPPORTED
    # bool before int, str before the generic collection check
    if issubclass(target, bool):
        return Category.BOOLEAN
    if issubclass(target, str):
        return Category.TEXT
    if issubclass(target, int):
        return Category.INTEGER
    if issubclass(target, float):
        return Category.FLOAT
    if issubclass(target, collections.abc.Collection):
        return Category.COLLECTION
    return Category.UNSUPPORTED


def is_struct(value: Any) -> bool:
    # __class__ rather than type() so weakref proxies report their referent's class
    return not isinstance(value, type) and dataclasses.is_dataclass(value.__class__)


def _resolve_annotation(cls: type, annotation: Any) -> Any:
    if isinstance(annotation, typing.ForwardRef):
        annotation = annotation.__forward_arg__
    if not isinstance(annotation, str):
        return annotation
    module = sys.modules.get(cls.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    try:
        return eval(annotation, globalns, dict(vars(cls)))
    except (NameError, AttributeError, SyntaxError, TypeError):
        return _UNRESOLVED


@lru_cache(maxsize=None)
def schema_for(cls: type) -> Tuple[FieldSpec, ...]:
    """Build the declarative schema of a dataclass, in declaration order.

    Annotations that cannot be resolved (e.g. string annotations naming a class
    local to a function) are categorized as UNSUPPORTED.
    """
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        logger.debug(f"Resolving annotations of {cls.__name__} field by field: {e}")
        hints = {f.name: _resolve_annotation(cls, f.type) for f in dataclasses.fields(cls)}

    specs = []
    for f in dataclasses.fields(cls):
        annotation = hints.get(f.name, f.type)
        if annotation is _UNRESOLVED:
            annotation, category = Any, Category.UNSUPPORTED
        else:
            category = categorize(annotation)
        specs.append(FieldSpec(
            name=f.name,
            category=category,
            annotation=annotation,
            constraints=f.metadata,
            field=f,
        ))
    return tuple(specs)


def describe(struct: Any) -> Iterator[FieldDescriptor]:
    for spec in schema_for(struct.__class__):
        yield FieldDescriptor(spec, getattr(struct, spec.name, None))


def _empty_text(value: Any) -> bool:
    return value is None or value == ""


def _empty_number(value: Any) -> bool:
    return value is None or value == 0


def _empty_bool(value: Any) -> bool:
    return not value


def _empty_optional(value: Any) -> bool:
    return value is None


def _empty_collection(value: Any) -> bool:
    return value is None or (isinstance(value, collections.abc.Sized) and len(value) == 0)


_EMPTY_CHECKS: Dict[Category, Callable[[Any], bool]] = {
    Category.TEXT: _empty_text,
    Category.INTEGER: _empty_number,
    Category.FLOAT: _empty_number,
    Category.BOOLEAN: _empty_bool,
    Category.OPTIONAL: _empty_optional,
    Category.COLLECTION: _empty_collection,
}


def is_empty(value: Any, category: Category) -> bool:
    """Return True when value is the zero/empty representative of its category.

    Unsupported categories (nested structures, callables, ...) are never empty.
    """
    check = _EMPTY_CHECKS.get(category)
    if check is None:
        return False
    return check(value)


def measure(value: Any, category: Category) -> Optional[int]:
    """Character count of text or item count of a collection.

    None measures 0. Returns None when the value cannot be measured for its
    category (e.g. an int held by a str-annotated field), so ``min`` is skipped.
    """
    if category is Category.TEXT:
        sized = value is None or isinstance(value, str)
    elif category is Category.COLLECTION:
        sized = value is None or isinstance(value, collections.abc.Sized)
    else:
        return None
    if not sized:
        return None
    return 0 if value is None else len(value)


def split_json_tag(tag: Optional[str]) -> Tuple[str, Tuple[str, ...]]:
    if not tag:
        return "", ()
    name, *options = tag.split(",")
    return name, tuple(options)


def resolve_display_name(spec: FieldSpec) -> str:
    name, _ = split_json_tag(spec.json_tag)
    if name and name != IGNORE_SENTINEL:
        return name
    return spec.name


def parse_int(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _INT_PATTERN.fullmatch(raw):
        return int(raw)
    return None


def is_required(constraints: Mapping[str, Any]) -> bool:
    flag = constraints.get(REQUIRED)
    return flag is True or flag == "true"


def min_threshold(constraints: Mapping[str, Any]) -> Optional[int]:
    threshold = parse_int(constraints.get(MIN))
    if threshold is None or threshold < 0:
        return None
    return threshold
