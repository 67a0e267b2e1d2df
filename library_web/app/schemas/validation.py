"""
Turning pydantic validation errors into per-field form messages.

Form handlers validate raw form data with ``collect_violations`` and
get back either a model instance or a list of ``(field, message)``
pairs.  Templates render the messages next to the offending inputs.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

Violation = Tuple[str, str]
ModelT = TypeVar("ModelT", bound=BaseModel)


def _message(error: Mapping[str, Any]) -> str:
    # Errors raised from our own validators carry the exception in ``ctx``;
    # use its text instead of pydantic's "Value error, ..." wrapper.
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return str(error.get("msg", "Invalid value"))


def collect_violations(
    schema: Type[ModelT], data: Mapping[str, Any]
) -> Tuple[Optional[ModelT], List[Violation]]:
    """Validate ``data`` against ``schema``.

    Returns ``(instance, [])`` on success and ``(None, violations)``
    otherwise.  Each violation names the top-level field it belongs to;
    model-level errors use the empty string as field name.
    """
    try:
        return schema.model_validate(dict(data)), []
    except ValidationError as exc:
        violations: List[Violation] = []
        for error in exc.errors():
            loc = error.get("loc") or ("",)
            violations.append((str(loc[0]), _message(error)))
        return None, violations


def violations_by_field(violations: List[Violation]) -> Dict[str, List[str]]:
    """Group violations by field name for rendering."""
    grouped: Dict[str, List[str]] = {}
    for field, message in violations:
        grouped.setdefault(field, []).append(message)
    return grouped
