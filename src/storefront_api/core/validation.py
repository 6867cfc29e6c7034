"""Typed validation results and message rendering.

Validation produces a list of ``FieldViolation`` records (field, kind,
parameter). Turning them into the text shown to API callers is a separate,
pure step so the same violations can be rendered, logged or asserted on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence


class ViolationKind(str, Enum):
    """What was wrong with a field."""

    REQUIRED = "required"
    GTE = "gte"
    GT = "gt"
    EMPTY = "empty"
    INVALID = "invalid"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class FieldViolation:
    """A single structural problem with a request field."""

    field: str
    kind: ViolationKind
    param: Optional[Any] = None


# Pydantic error types mapped onto violation kinds
_PYDANTIC_KINDS = {
    "missing": ViolationKind.REQUIRED,
    "greater_than_equal": ViolationKind.GTE,
    "greater_than": ViolationKind.GT,
    "too_short": ViolationKind.EMPTY,
    "string_too_short": ViolationKind.REQUIRED,
    "json_invalid": ViolationKind.MALFORMED,
    "model_attributes_type": ViolationKind.MALFORMED,
    "dict_type": ViolationKind.MALFORMED,
}

_PYDANTIC_PARAMS = {
    ViolationKind.GTE: "ge",
    ViolationKind.GT: "gt",
    ViolationKind.EMPTY: "min_length",
}

_LOCATION_ROOTS = {"body", "query", "path", "header"}


def field_path(loc: Sequence[Any]) -> str:
    """Render a pydantic location tuple as ``items[0].quantity``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif not path and part in _LOCATION_ROOTS:
            continue
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def violations_from_errors(errors: Iterable[Mapping[str, Any]]) -> List[FieldViolation]:
    """Convert pydantic error dicts into violations."""
    violations = []
    for error in errors:
        kind = _PYDANTIC_KINDS.get(error.get("type", ""), ViolationKind.INVALID)
        param = None
        ctx = error.get("ctx") or {}
        if kind in _PYDANTIC_PARAMS:
            param = ctx.get(_PYDANTIC_PARAMS[kind])
        violations.append(
            FieldViolation(field=field_path(error.get("loc", ())), kind=kind, param=param)
        )
    return violations


def _format_param(value: Any) -> str:
    """Render a bound without float noise: 0.0 -> "0", 0.5 -> "0.5"."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:g}"
    return str(value)


def render_violation(violation: FieldViolation) -> str:
    """Render one violation as a caller-facing message."""
    field = violation.field
    if violation.kind is ViolationKind.MALFORMED or not field:
        return "Invalid request body"
    if violation.kind is ViolationKind.REQUIRED:
        return f"{field} is a required field"
    if violation.kind is ViolationKind.GTE:
        return f"{field} should be at least {_format_param(violation.param)}"
    if violation.kind is ViolationKind.GT:
        return f"{field} should be greater than {_format_param(violation.param)}"
    if violation.kind is ViolationKind.EMPTY:
        return f"Please add {field}"
    return f"{field} provided is invalid"


def render_violations(violations: Iterable[FieldViolation]) -> str:
    """Render violations as one message, de-duplicated, in input order."""
    messages: List[str] = []
    for violation in violations:
        message = render_violation(violation)
        if message not in messages:
            messages.append(message)
    return "; ".join(messages)
