"""Plist value model.

A parsed document is a tree of plain Python values:

- Dictionary -> ``dict`` with ``str`` keys
- Array      -> ``list``
- String     -> ``str``
- Integer    -> ``int`` (signed 64-bit range)
- Float      -> ``float``

``bool`` is an ``int`` subclass in Python but is never a plist value;
booleans are stored as integers 0/1 by the ``bool`` converter.
"""

import re
from typing import Any, Dict, List, Optional, Union

PlistValue = Union[Dict[str, Any], List[Any], str, int, float]
PlistDict = Dict[str, Any]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def plist_kind(value: Any) -> str:
    """Name the plist variant of a value, for error messages.

    Never includes the value itself, so large dictionaries and arrays do
    not leak into diagnostics.
    """
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, dict):
        return "dictionary"
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    return type(value).__name__


def is_number(value: Any) -> bool:
    """True for plist integers and floats (``bool`` excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """True for plist integers (``bool`` excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


_INT_RE = re.compile(r"-?[0-9]+\Z")


def parse_int(text: str) -> Optional[int]:
    """Parse ``-?[0-9]+`` within the signed 64-bit range, else None.

    Stricter than ``int()``, which also accepts whitespace, ``+`` and
    underscores.
    """
    if not _INT_RE.match(text):
        return None
    number = int(text)
    if number < INT64_MIN or number > INT64_MAX:
        return None
    return number
