"""Fixed-width integers built by doubling narrower ones. Public API."""

from __future__ import annotations

from .bits import WORD_BITS
from .double import DoubleWidth, Int128, Int256, UInt128, UInt256, double_width
from .errors import (
    ArithmeticTrap,
    ConversionTrap,
    FixedWidthError,
    UnsupportedWordSize,
)
from .fixed import (
    FixedWidthInteger,
    Int8,
    Int16,
    Int32,
    Int64,
    NativeInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    fixed_int,
)

__all__ = [
    "WORD_BITS",
    "ArithmeticTrap",
    "ConversionTrap",
    "DoubleWidth",
    "FixedWidthError",
    "FixedWidthInteger",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Int128",
    "Int256",
    "NativeInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt128",
    "UInt256",
    "UnsupportedWordSize",
    "double_width",
    "fixed_int",
    "integer_type",
]


def integer_type(bits: int, signed: bool = True) -> type[FixedWidthInteger]:
    """Native kind for widths up to 64, doubled 64-bit kinds above that."""
    if bits <= 64:
        return fixed_int(bits, signed)
    if bits & (bits - 1):
        raise ValueError(f"width must be a power of two, got {bits}")
    return double_width(integer_type(bits // 2, signed))
