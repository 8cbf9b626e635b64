# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Tagged setting values and their byte encoding.

A setting is persisted as ``(payload: bytes, type tag: int)``.  Tags are the
Qt meta-type ids, and scalars are encoded the way ``QVariant::toByteArray``
renders them (ASCII decimal numbers, ``true``/``false``, UTF-8 text), so
settings files written by Qt applications decode unchanged.  Lists and maps
are stored as UTF-8 JSON.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

__all__ = ["TypeTag", "SettingValue", "UnsupportedValueError"]

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class UnsupportedValueError(TypeError):
    """Raised for Python values that have no setting representation."""


class TypeTag(IntEnum):
    INVALID = 0
    BOOL = 1
    INT = 2
    UINT = 3
    LONG_LONG = 4
    ULONG_LONG = 5
    DOUBLE = 6
    MAP = 8
    LIST = 9
    STRING = 10
    BYTE_ARRAY = 12
    FLOAT = 38


_INT_TAGS = {TypeTag.INT, TypeTag.UINT, TypeTag.LONG_LONG, TypeTag.ULONG_LONG}
_FLOAT_TAGS = {TypeTag.DOUBLE, TypeTag.FLOAT}


def _check_json(value: Any) -> None:
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedValueError("Non-finite floats cannot be stored inside lists/maps")
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _check_json(item)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedValueError(f"Map keys must be strings, got {type(key).__name__}")
            _check_json(item)
        return
    raise UnsupportedValueError(f"Cannot store {type(value).__name__} inside a list/map")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


@dataclass(frozen=True)
class SettingValue:
    """A setting's logical value together with its type tag.

    Equality compares the tag as well as the value, so ``True`` and ``1``
    are different settings values.
    """

    tag: TypeTag
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> SettingValue:
        """Wrap a Python value, choosing the tag from its type."""

        if isinstance(value, SettingValue):
            return value
        if value is None:
            return cls(TypeTag.INVALID, None)
        if isinstance(value, bool):
            return cls(TypeTag.BOOL, value)
        if isinstance(value, int):
            tag = TypeTag.INT if _INT32_MIN <= value <= _INT32_MAX else TypeTag.LONG_LONG
            return cls(tag, value)
        if isinstance(value, float):
            return cls(TypeTag.DOUBLE, value)
        if isinstance(value, str):
            return cls(TypeTag.STRING, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(TypeTag.BYTE_ARRAY, bytes(value))
        if isinstance(value, (list, tuple)):
            _check_json(value)
            return cls(TypeTag.LIST, list(value))
        if isinstance(value, dict):
            _check_json(value)
            return cls(TypeTag.MAP, dict(value))
        raise UnsupportedValueError(f"Unsupported setting type: {type(value).__name__}")

    @property
    def is_valid(self) -> bool:
        return self.tag is not TypeTag.INVALID

    def same_as(self, other: SettingValue) -> bool:
        """Equality used for change detection; NaN matches NaN of the same tag."""

        if self == other:
            return True
        return (
            self.tag is other.tag
            and self.tag in _FLOAT_TAGS
            and isinstance(self.value, float)
            and isinstance(other.value, float)
            and math.isnan(self.value)
            and math.isnan(other.value)
        )

    def encode(self) -> bytes:
        tag = self.tag
        if tag is TypeTag.INVALID:
            return b""
        if tag is TypeTag.BOOL:
            return b"true" if self.value else b"false"
        if tag in _INT_TAGS:
            return str(int(self.value)).encode("ascii")
        if tag in _FLOAT_TAGS:
            return _format_float(float(self.value)).encode("ascii")
        if tag is TypeTag.STRING:
            return str(self.value).encode("utf-8")
        if tag is TypeTag.BYTE_ARRAY:
            return bytes(self.value)
        return json.dumps(self.value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def encode_with_tag(self) -> tuple[bytes, int]:
        return self.encode(), int(self.tag)

    @classmethod
    def decode(cls, payload: bytes | str | None, tag: int) -> SettingValue:
        """Rebuild a value from its stored payload and tag.

        Raises ``ValueError`` for unknown tags or malformed payloads.
        """

        try:
            kind = TypeTag(int(tag))
        except ValueError:
            raise ValueError(f"Unknown setting type tag: {tag!r}") from None

        if payload is None:
            raw = b""
        elif isinstance(payload, str):
            raw = payload.encode("utf-8")
        else:
            raw = bytes(payload)

        if kind is TypeTag.INVALID:
            return cls(kind, None)
        if kind is TypeTag.BOOL:
            text = raw.decode("ascii").strip().lower()
            return cls(kind, text not in ("", "false", "0"))
        if kind in _INT_TAGS:
            return cls(kind, int(raw.decode("ascii")))
        if kind in _FLOAT_TAGS:
            return cls(kind, float(raw.decode("ascii")))
        if kind is TypeTag.STRING:
            return cls(kind, raw.decode("utf-8"))
        if kind is TypeTag.BYTE_ARRAY:
            return cls(kind, raw)
        decoded = json.loads(raw.decode("utf-8")) if raw else None
        if kind is TypeTag.LIST and not isinstance(decoded, list):
            raise ValueError("List setting payload is not a JSON array")
        if kind is TypeTag.MAP and not isinstance(decoded, dict):
            raise ValueError("Map setting payload is not a JSON object")
        return cls(kind, decoded)
