"""Fixed-point decimal amounts with 18 fractional digits."""

from __future__ import annotations

import re

_SCALE = 10**18
_PATTERN = re.compile(r"^(-)?(\d+)(?:\.(\d{1,18}))?$")


def _div_toward_zero(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


class Amount:
    """A signed decimal with 18 fractional digits; products and quotients truncate toward zero."""

    __slots__ = ("_raw",)

    def __init__(self, value: "Amount | int | str" = 0) -> None:
        if isinstance(value, Amount):
            self._raw = value._raw
        elif isinstance(value, bool):
            raise TypeError("booleans are not amounts")
        elif isinstance(value, int):
            self._raw = value * _SCALE
        elif isinstance(value, str):
            self._raw = Amount.parse(value)._raw
        else:
            raise TypeError(f"cannot make an amount from {type(value).__name__}")

    @classmethod
    def _from_raw(cls, raw: int) -> "Amount":
        result = cls.__new__(cls)
        result._raw = raw
        return result

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """Parse a decimal string such as ``"-12.5"``."""
        match = _PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"invalid amount: {text!r}")
        sign, whole, frac = match.groups()
        raw = int(whole) * _SCALE + int((frac or "").ljust(18, "0"))
        return cls._from_raw(-raw if sign else raw)

    @staticmethod
    def _coerce(other: object) -> "Amount | None":
        if isinstance(other, Amount):
            return other
        if isinstance(other, int) and not isinstance(other, bool):
            return Amount(other)
        return None

    @property
    def raw(self) -> int:
        return self._raw

    def is_zero(self) -> bool:
        return self._raw == 0

    def __add__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Amount._from_raw(self._raw + o._raw)

    __radd__ = __add__

    def __sub__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Amount._from_raw(self._raw - o._raw)

    def __rsub__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return o - self

    def __mul__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Amount._from_raw(_div_toward_zero(self._raw * o._raw, _SCALE))

    __rmul__ = __mul__

    def __truediv__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        if o._raw == 0:
            raise ZeroDivisionError("division of an amount by zero")
        return Amount._from_raw(_div_toward_zero(self._raw * _SCALE, o._raw))

    def __rtruediv__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return o / self

    def __neg__(self):
        return Amount._from_raw(-self._raw)

    def __abs__(self):
        return Amount._from_raw(abs(self._raw))

    def __lt__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._raw < o._raw

    def __le__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._raw <= o._raw

    def __gt__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._raw > o._raw

    def __ge__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._raw >= o._raw

    def __eq__(self, other):
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._raw == o._raw

    def __hash__(self):
        return hash(self._raw)

    def __str__(self) -> str:
        sign = "-" if self._raw < 0 else ""
        whole, frac = divmod(abs(self._raw), _SCALE)
        if frac == 0:
            return f"{sign}{whole}"
        return f"{sign}{whole}." + str(frac).rjust(18, "0").rstrip("0")

    def __repr__(self) -> str:
        return f"Amount('{self}')"