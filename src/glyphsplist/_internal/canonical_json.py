"""Canonical JSON rendering of plist trees and reports.

One function is used for every JSON file and stdout rendering the CLI
produces, so the same input always yields the same bytes.
"""

import json
import math
from typing import Any

from ..kernel.plist import format_float


def _json_safe(obj: Any) -> Any:
    # JSON has no NaN/Infinity; keep the plist spelling as a string.
    if isinstance(obj, float) and not math.isfinite(obj):
        return format_float(obj)
    if isinstance(obj, dict):
        return {key: _json_safe(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(value) for value in obj]
    return obj


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization.

    Rules:
    - UTF-8 (no ASCII escaping)
    - Sorted keys
    - Stable separators (",", ":")
    - Non-finite floats written as the strings "nan", "inf", "-inf"

    Args:
        obj: Plist tree or other JSON-compatible object

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        _json_safe(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False
    )
