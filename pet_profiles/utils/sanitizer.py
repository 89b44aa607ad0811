"""
Normalization of raw metafield values.

Every profile attribute read from the Admin API passes through
``sanitize_metafield_value`` before it reaches a ProfileRecord, so the rest
of the application only ever sees a trimmed string or ``""``.
"""

from typing import Any


def sanitize_metafield_value(value: Any) -> str:
    """Return *value* stripped of surrounding whitespace, or ``""``.

    ``None``, missing values and anything that is not a ``str`` (numbers,
    bytes, lists, dicts) all become ``""``. Never raises.
    """
    if not isinstance(value, str):
        return ""
    return value.strip()
