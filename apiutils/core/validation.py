import logging
import weakref
from typing import Any, Optional

from .errors import AppError, bad_request
from .fields import (
    Category,
    FieldDescriptor,
    describe,
    is_empty,
    is_required,
    is_struct,
    measure,
    min_threshold,
    resolve_display_name,
)


logger = logging.getLogger(__name__)


def _dereference(value: Any) -> Any:
    # type() since isinstance() on a dead proxy raises ReferenceError
    if type(value) in weakref.ProxyTypes:
        try:
            value.__class__
        except ReferenceError:
            return None
        return value
    if isinstance(value, weakref.ref):
        return value()
    return value


def _check_field(descriptor: FieldDescriptor) -> Optional[str]:
    name = resolve_display_name(descriptor.spec)
    value = descriptor.value

    if is_required(descriptor.constraints) and is_empty(value, descriptor.category):
        return f"{name} is required"

    threshold = min_threshold(descriptor.constraints)
    if threshold is None:
        return None

    # unmeasurable values (wrong runtime type) skip min like malformed metadata
    size = measure(value, descriptor.category)
    if size is None or size >= threshold:
        return None
    if descriptor.category is Category.TEXT:
        return f"{name} must be at least {threshold} characters long"
    return f"{name} must have at least {threshold} items"


def validate_struct(value: Any) -> Optional[AppError]:
    """Validate a structure's fields against their declared constraints.

    Fields are checked in declaration order, ``required`` before ``min``, and
    the first violation is returned as a 400 AppError. Returns None when every
    field passes.

    ``weakref.ref`` and ``weakref.proxy`` values are dereferenced first; a dead
    reference validates as None, as does anything that is not a dataclass
    instance.
    """
    value = _dereference(value)
    # TODO: decide whether non-structures should raise TypeError instead of passing
    if not is_struct(value):
        return None

    for descriptor in describe(value):
        message = _check_field(descriptor)
        if message is not None:
            logger.debug(f"Validation failed for {value.__class__.__name__}.{descriptor.name}: {message}")
            return bad_request(message)
    return None


def ensure_valid(value: Any) -> None:
    """Raise the first violation of ``value`` instead of returning it."""
    error = validate_struct(value)
    if error is not None:
        raise error
