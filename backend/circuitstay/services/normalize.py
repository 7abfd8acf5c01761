"""Request normalization — the one place loosely-typed payloads become strict values.

Accepted shapes for list fields: a list of strings, a JSON-encoded list, or a
comma-separated string. Mapping fields accept a dict, a JSON-encoded object,
or bracket-indexed keys (``experienceDistances[Safari]=5``). Anything else
raises ``ValidationError`` instead of silently becoming an empty collection.
"""

import json
import math
import re
from typing import Any, TypeVar

import pydantic

from circuitstay.errors import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

_WHITESPACE = re.compile(r"\s+")


def normalize_label(value: str) -> str:
    """'  Wildlife Safari ' -> 'wildlife_safari'"""
    return _WHITESPACE.sub("_", str(value).strip().lower())


def parse_string_list(value: Any, field: str) -> list[str]:
    """Coerce a list-like value to a list of trimmed, non-empty strings."""
    if value is None:
        return []

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                raise ValidationError(f"{field} is not a valid JSON list")
        else:
            return [part.strip() for part in text.split(",") if part.strip()]

    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field} must be a list of strings")

    items = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ValidationError(f"{field} must contain only strings")
        text = str(item).strip()
        if text:
            items.append(text)
    return items


def parse_label_list(value: Any, field: str) -> list[str]:
    """Like parse_string_list, with each entry normalized and duplicates dropped."""
    labels = []
    for item in parse_string_list(value, field):
        label = normalize_label(item)
        if label not in labels:
            labels.append(label)
    return labels


def parse_mapping(value: Any, field: str) -> dict:
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError(f"{field} is not a valid JSON object")
    if not isinstance(value, dict):
        raise ValidationError(f"{field} must be an object")
    return value


def parse_object_list(value: Any, field: str) -> list[dict]:
    """A list of objects; a single object is wrapped."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError(f"{field} is not valid JSON")
    if isinstance(value, dict):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValidationError(f"{field} must be a list of objects")
    return value


def coerce_number(value: Any, fallback: float | None = 0) -> float | None:
    """Finite number from a number or numeric string, else the fallback."""
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return int(number) if number.is_integer() else number


def coerce_bool(value: Any) -> bool:
    return value is True or value == "true"


def collect_bracketed(payload: dict, prefix: str) -> dict[str, float]:
    """Collect ``prefix[key]=value`` entries from a flat form-style payload."""
    pattern = re.compile(rf"^{re.escape(prefix)}\[(.+?)\]$")
    found = {}
    for key, value in payload.items():
        m = pattern.match(str(key))
        if m:
            found[m.group(1)] = coerce_number(value, 0)
    return found


def parse_number_map(value: Any, field: str) -> dict[str, float]:
    return {str(k): coerce_number(v, 0) for k, v in parse_mapping(value, field).items()}


def validate_payload(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a raw payload into ``model``, reporting failures as ValidationError."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"]) or "body"
            msg = err["msg"].removeprefix("Value error, ")
            problems.append(f"{loc}: {msg}")
        raise ValidationError("; ".join(problems))
