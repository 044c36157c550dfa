"""Deterministic content addresses for report inputs.

A fingerprint is ``"{report_type}_{hash}"`` where the hash is a 32-bit
rolling string hash of the canonical JSON form of the input, rendered in
base 36. It only needs to avoid redundant regeneration, so it is
deliberately not a cryptographic digest.
"""

import json
import re
from collections.abc import Iterable, Mapping
from typing import Optional, Union

Scalar = Union[str, int, float, bool]
FormInput = Mapping[str, Optional[Scalar]]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9]")

# Canonical strings up to this length stay readable in cache keys
READABLE_KEY_MAX = 200
READABLE_KEY_CHARS = 80


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def string_hash(text: str) -> str:
    """Rolling ``h * 31 + c`` hash over code points, kept to signed 32 bits."""
    h = 0
    for ch in text:
        h = _to_int32((h << 5) - h + ord(ch))
    return _base36(abs(h))


def canonicalize(form_input: FormInput, fields: Optional[Iterable[str]] = None) -> str:
    """Serialize a flat scalar mapping so that key order never matters.

    ``None`` values are indistinguishable from absent keys. When ``fields`` is
    given, each listed field is always present, with ``""`` standing in for
    missing values.
    """
    normalized: dict[str, Scalar] = {}
    for key, value in form_input.items():
        if value is None:
            continue
        if not isinstance(value, (str, int, float, bool)):
            raise TypeError(
                f"form input '{key}' must be str, int, float or bool, got {type(value).__name__}"
            )
        normalized[str(key)] = value

    if fields is not None:
        for field in fields:
            normalized.setdefault(field, "")

    return json.dumps(
        {k: normalized[k] for k in sorted(normalized)},
        separators=(",", ":"),
        ensure_ascii=False,
    )


def fingerprint(
    report_type: str,
    form_input: FormInput,
    fields: Optional[Iterable[str]] = None,
) -> str:
    """Return the cache id for a report type and its form input."""
    return f"{report_type}_{string_hash(canonicalize(form_input, fields))}"


def build_cache_key(feature: str, request: Union[str, FormInput]) -> str:
    """Cache key for a day-scoped AI response.

    Short inputs stay human readable; long ones are hashed.
    """
    text = request if isinstance(request, str) else canonicalize(request)
    if len(text) > READABLE_KEY_MAX:
        suffix = string_hash(text)
    else:
        suffix = _UNSAFE_KEY_CHARS.sub("_", text)[:READABLE_KEY_CHARS]
    return f"{feature}_{suffix}"
