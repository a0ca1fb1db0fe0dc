"""Conversion between stored text and typed values.

Values are always kept as text in memory.  ``Settings.get`` and
``Settings.set`` go through an adapter to turn that text into a Python value
and back.
"""

from __future__ import annotations

import math
import re
import struct
from typing import Any, Protocol

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class TypeAdapter(Protocol):
    """Adapter for a scalar value type.

    ``parse`` raises :class:`ValueError` when the text is not a valid value;
    ``serialize`` raises :class:`TypeError` or :class:`ValueError` when given
    a value it cannot represent.
    """

    name: str

    def parse(self, raw: str) -> Any:
        """Parse *raw* text into a Python value."""

    def serialize(self, value: Any) -> str:
        """Serialise *value* into text for storage."""


class StringAdapter:
    """Adapter for plain string values."""

    name = "str"

    def parse(self, raw: str) -> str:
        return raw

    def serialize(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError("expected str")
        return value


class BooleanAdapter:
    """Adapter for boolean values.

    ``true`` and ``false`` are accepted in any letter case; serialisation
    always writes lower case.
    """

    name = "bool"

    def parse(self, raw: str) -> bool:
        lowered = raw.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise ValueError(f"invalid boolean: {raw!r}")

    def serialize(self, value: Any) -> str:
        if not isinstance(value, bool):
            raise TypeError("expected bool")
        return "true" if value else "false"


class IntegerAdapter:
    """Adapter for fixed-width integers.

    Python integers are unbounded, so the width only limits the accepted
    range: ``IntegerAdapter(32, signed=False)`` accepts ``0 .. 2**32 - 1``.
    ``bits=None`` accepts any integer.
    """

    def __init__(self, bits: int | None = 64, *, signed: bool = True) -> None:
        self.bits = bits
        self.signed = signed
        self.minimum: int | None
        self.maximum: int | None
        if bits is None:
            self.minimum = None if signed else 0
            self.maximum = None
            self.name = "int" if signed else "uint"
            return
        if signed:
            self.minimum = -(2 ** (bits - 1))
            self.maximum = 2 ** (bits - 1) - 1
        else:
            self.minimum = 0
            self.maximum = 2**bits - 1
        self.name = f"{'i' if signed else 'u'}{bits}"

    def _check(self, value: int) -> int:
        too_low = self.minimum is not None and value < self.minimum
        too_high = self.maximum is not None and value > self.maximum
        if too_low or too_high:
            raise ValueError(
                f"{value} out of range for {self.name} [{self.minimum}, {self.maximum}]"
            )
        return value

    def parse(self, raw: str) -> int:
        if not _INTEGER_RE.fullmatch(raw):
            raise ValueError(f"invalid integer: {raw!r}")
        return self._check(int(raw))

    def serialize(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("expected int")
        return str(self._check(value))

    def __repr__(self) -> str:
        return f"IntegerAdapter({self.bits}, signed={self.signed})"


class FloatAdapter:
    """Adapter for 32 or 64 bit floating point numbers.

    32 bit values are rounded to single precision on parse and written with
    the shortest text that reads back to the same single precision value.
    """

    def __init__(self, bits: int = 64) -> None:
        if bits not in (32, 64):
            raise ValueError("float width must be 32 or 64")
        self.bits = bits
        self.name = f"f{bits}"

    def _narrow(self, value: float) -> float:
        if self.bits == 64 or not math.isfinite(value):
            return value
        try:
            return struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise ValueError(f"{value} out of range for f32") from exc

    def parse(self, raw: str) -> float:
        # float() also takes digit separators and non-ASCII digits
        if "_" in raw or not raw.isascii():
            raise ValueError(f"invalid float: {raw!r}")
        return self._narrow(float(raw))

    def serialize(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError("expected number")
        number = self._narrow(float(value))
        if self.bits == 64 or not math.isfinite(number):
            return repr(number)
        for digits in range(1, 10):
            text = f"{number:.{digits}g}"
            if self._narrow(float(text)) == number:
                return text
        return repr(number)  # pragma: no cover - 9 digits always suffice

    def __repr__(self) -> str:
        return f"FloatAdapter({self.bits})"


STRING = StringAdapter()
BOOL = BooleanAdapter()
INT = IntegerAdapter(None)
INT8 = IntegerAdapter(8)
INT16 = IntegerAdapter(16)
INT32 = IntegerAdapter(32)
INT64 = IntegerAdapter(64)
UINT8 = IntegerAdapter(8, signed=False)
UINT16 = IntegerAdapter(16, signed=False)
UINT32 = IntegerAdapter(32, signed=False)
UINT64 = IntegerAdapter(64, signed=False)
FLOAT32 = FloatAdapter(32)
FLOAT64 = FloatAdapter(64)

TYPE_REGISTRY: dict[type, TypeAdapter] = {
    bool: BOOL,
    int: INT,
    float: FLOAT64,
    str: STRING,
}

NAMED_ADAPTERS: dict[str, TypeAdapter] = {
    adapter.name: adapter
    for adapter in (
        STRING, BOOL, INT,
        INT8, INT16, INT32, INT64,
        UINT8, UINT16, UINT32, UINT64,
        FLOAT32, FLOAT64,
    )
}
NAMED_ADAPTERS.update({"float": FLOAT64, "string": STRING})


def adapter_for(kind: Any) -> TypeAdapter:
    """Resolve *kind* to an adapter.

    *kind* may be an adapter instance, a Python type registered in
    :data:`TYPE_REGISTRY` or a name from :data:`NAMED_ADAPTERS` such as
    ``"u32"`` or ``"f64"``.  Anything else raises :class:`TypeError`.
    """
    if isinstance(kind, str):
        try:
            return NAMED_ADAPTERS[kind.lower()]
        except KeyError:
            raise TypeError(f"unknown value type: {kind!r}") from None
    if isinstance(kind, type):
        try:
            return TYPE_REGISTRY[kind]
        except KeyError:
            raise TypeError(f"no adapter registered for {kind.__name__}") from None
    if callable(getattr(kind, "parse", None)) and callable(getattr(kind, "serialize", None)):
        return kind
    raise TypeError(f"not a value type: {kind!r}")
