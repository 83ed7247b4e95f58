"""Field-level validation for JSON payloads.

Rules are small callables returning an error message or None. ``validate``
runs every rule for each field and reports the first failure per field as
``{"field": ..., "message": ...}``.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Rule = Callable[[Any], Optional[str]]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def required(message: str) -> Rule:
    def rule(value: Any) -> Optional[str]:
        return None if _text(value) else message
    return rule


def email(message: str = "Valid email is required") -> Rule:
    def rule(value: Any) -> Optional[str]:
        return None if EMAIL_PATTERN.match(_text(value)) else message
    return rule


def min_length(length: int, message: str) -> Rule:
    def rule(value: Any) -> Optional[str]:
        return None if isinstance(value, str) and len(value) >= length else message
    return rule


def one_of(choices: Iterable[str], message: str) -> Rule:
    allowed = frozenset(choices)

    def rule(value: Any) -> Optional[str]:
        return None if _text(value) in allowed else message
    return rule


def max_bytes(length: int, message: str) -> Rule:
    def rule(value: Any) -> Optional[str]:
        return None if isinstance(value, str) and len(value.encode("utf-8")) <= length else message
    return rule


def validate(
    payload: Mapping[str, Any],
    rules: Mapping[str, Sequence[Rule]],
    *,
    partial: bool = False,
) -> List[Dict[str, str]]:
    """Return the failures for ``payload``; an empty list means it is valid.

    With ``partial`` set, fields missing from the payload are not checked.
    """
    errors: List[Dict[str, str]] = []
    for field, field_rules in rules.items():
        if partial and field not in payload:
            continue
        value = payload.get(field)
        for rule in field_rules:
            message = rule(value)
            if message:
                errors.append({"field": field, "message": message})
                break
    return errors


def clean_text(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value
