"""Auxiliary field kinds carried by blocks.

Usage:
    FieldType.INT32.coerce(7)        # Int32(value=7)
    FieldType("int32")               # parse a schema entry
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


@dataclass(frozen=True, slots=True)
class Int32:
    """32-bit signed integer field value."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Int32 requires an int, got {type(self.value).__name__}")
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"Int32 out of range: {self.value}")

    def __int__(self) -> int:
        return self.value


FieldValue: TypeAlias = Int32
"""Closed union of supported field values. Extend alongside FieldType."""


class FieldType(Enum):
    """Field kinds a block type may declare in its schema.

    The value is the name used in registry files.
    """

    INT32 = "int32"

    def coerce(self, value: object) -> FieldValue:
        """Turn a raw value into the typed field value for this kind.

        Args:
            value: Raw value or an already-typed field value.

        Returns:
            Typed field value.

        Raises:
            TypeError: If value cannot represent this kind.
            ValueError: If value is outside the kind's range.
        """
        if self is FieldType.INT32:
            if isinstance(value, Int32):
                return value
            return Int32(value)  # type: ignore[arg-type]
        raise TypeError(f"No coercion for {self}")  # pragma: no cover


def raw_value(value: FieldValue) -> int:
    """Unwrap a typed field value to its plain Python value."""
    return value.value
