"""Deep, key-wise merge of nested values."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

Value = dict[str, Any]


def _combine(a: Mapping[str, Any], b: Mapping[str, Any]) -> Value:
    result: Value = {}
    for key in (*a.keys(), *(k for k in b.keys() if k not in a)):
        a_val = a.get(key)
        b_val = b.get(key)
        if isinstance(a_val, Mapping) and isinstance(b_val, Mapping):
            result[key] = _combine(a_val, b_val)
        elif key in b:
            result[key] = b_val
        else:
            result[key] = a_val
    return result


def combine(a: Value, b: Mapping[str, Any] | None) -> Value:
    """Overlay *b* onto *a* recursively.

    - Keys holding mappings on both sides are merged recursively.
    - Otherwise a key present in *b* wins, even when its value is ``None``.
    - Keys only in *a* are kept.

    Returns *a* itself when *b* is ``None`` or empty. Neither input is
    mutated.
    """
    if not b:
        return a
    return _combine(a, b)
