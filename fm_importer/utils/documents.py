"""Helpers for reading converted XML/JSON documents."""

from typing import Any, List, Optional


def as_list(value: Any) -> List[Any]:
    """Normalize the converter's one-or-many convention to a list.

    A child that occurs once is stored as an object, repeated children as a
    list, and a missing child is absent (None).
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def text_of(value: Any) -> str:
    """Text content of a converted element (``"#text"``) or a plain string."""
    if value is None:
        return ""
    if isinstance(value, dict):
        return value.get("#text", "")
    if isinstance(value, list):
        return "\n".join(text_of(v) for v in value)
    return str(value)


def element_key(value: Any) -> Optional[str]:
    """Canonical lookup key for an external id.

    Converted XML carries ids as strings while hand-written JSON may use
    numbers; hrefs and ``@annotatedElements`` always reference them as text.
    """
    if value is None:
        return None
    return str(value)
