"""Answer Values — closed sum type for questionnaire answer payloads.

Invariants:
    - coerce_answer() is the only place that inspects raw answer shapes
    - An AnswerValue is exactly one of Scalar, ListValue, SubKeyed
    - Empty strings, empty lists and None coerce to None (no evidence)
    - Projections (first_text, text_list) never raise

Design Decisions:
    - Frozen dataclasses over isinstance checks scattered downstream: shape resolved once
      at the normalization boundary (ADR: answers arrive as str | list | dict from storage)
    - SubKeyed keeps the sub-question key so multi-part answers ("sun_exposure": {"subKey":
      "summer", "value": "often"}) survive normalization without losing the inner value
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Scalar:
    value: str | int | float | bool


@dataclass(frozen=True)
class ListValue:
    items: tuple[str, ...]


@dataclass(frozen=True)
class SubKeyed:
    sub_key: str
    value: Union[Scalar, ListValue]


AnswerValue = Union[Scalar, ListValue, SubKeyed]


def coerce_answer(raw: object) -> AnswerValue | None:
    """Resolve a raw answer payload into an AnswerValue, or None when it carries nothing."""
    if raw is None:
        return None
    if isinstance(raw, (Scalar, ListValue, SubKeyed)):
        return raw
    if isinstance(raw, bool) or isinstance(raw, (int, float)):
        return Scalar(raw)
    if isinstance(raw, str):
        text = raw.strip()
        return Scalar(text) if text else None
    if isinstance(raw, (list, tuple)):
        items = tuple(
            str(item).strip() for item in raw
            if item is not None and str(item).strip()
        )
        return ListValue(items) if items else None
    if isinstance(raw, dict):
        sub_key = raw.get("subKey", raw.get("sub_key"))
        inner = coerce_answer(raw.get("value"))
        if sub_key is None or inner is None or isinstance(inner, SubKeyed):
            return None
        return SubKeyed(str(sub_key), inner)
    return None


def first_text(value: AnswerValue | None) -> str | None:
    """First textual item of an answer (scalar as string, first list item)."""
    if value is None:
        return None
    if isinstance(value, SubKeyed):
        return first_text(value.value)
    if isinstance(value, ListValue):
        return value.items[0] if value.items else None
    return str(value.value)


def text_list(value: AnswerValue | None) -> list[str]:
    """All textual items of an answer; a scalar becomes a one-element list."""
    if value is None:
        return []
    if isinstance(value, SubKeyed):
        return text_list(value.value)
    if isinstance(value, ListValue):
        return list(value.items)
    return [str(value.value)]


def as_flag(value: AnswerValue | None) -> bool:
    """Truthiness of a yes/no answer ("yes", "true", "да", True)."""
    if value is None:
        return False
    if isinstance(value, Scalar) and isinstance(value.value, bool):
        return value.value
    text = (first_text(value) or "").strip().lower()
    return text in ("yes", "true", "да", "1")


def as_int(value: AnswerValue | None, default: int = 0) -> int:
    """Leading integer of an answer; unparsable values yield the default."""
    if value is None:
        return default
    if isinstance(value, Scalar) and isinstance(value.value, (int, float)) \
            and not isinstance(value.value, bool):
        return int(value.value)
    text = (first_text(value) or "").strip()
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch == "-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return default
