"""Format-agnostic core: plist text engine, converters, schema engine."""

from .plist import dumps, parse, parse_atom
from .schema import (
    ALWAYS_SERIALISE,
    REST,
    FieldDescriptor,
    PlistModel,
    Requiredness,
    decode,
    describe,
    encode,
)
from .scalars import Converter, get_converter, register_converter
from .values import PlistValue, plist_kind

__all__ = [
    "ALWAYS_SERIALISE",
    "Converter",
    "FieldDescriptor",
    "PlistModel",
    "PlistValue",
    "REST",
    "Requiredness",
    "decode",
    "describe",
    "dumps",
    "encode",
    "get_converter",
    "parse",
    "parse_atom",
    "plist_kind",
    "register_converter",
]
