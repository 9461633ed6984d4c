"""Fixed-width integer capability set and the native leaf kinds.

`FixedWidthInteger` carries every operator, written once against a small
set of primitives (overflow-reporting add/subtract, full-width multiply,
magnitude division, limb-level bitwise ops, masked shifts). Anything that
implements those primitives can be doubled by `dwint.double.double_width`,
including another doubled type.

`NativeInt` kinds stand in for the host's machine integers: they are the
only place the arithmetic itself runs on Python's unbounded ints.
"""

from __future__ import annotations

import logging
import math
import operator
import struct
from typing import ClassVar, TypeVar

from .bits import (
    WORD_BITS,
    byte_swap,
    count_leading_zeros,
    count_trailing_zeros,
    mask,
    popcount,
    word_image,
    split_words,
    value_range,
    wrap,
)
from .errors import ArithmeticTrap, ConversionTrap, UnsupportedWordSize

logger = logging.getLogger(__name__)

F = TypeVar("F", bound="FixedWidthInteger")

F64_FRAC_BITS: int = 52
F64_EXP_BIAS: int = 0x3FF


def trap_arithmetic(msg: str, op: str) -> ArithmeticTrap:
    logger.debug("arithmetic trap in %s: %s", op, msg)
    return ArithmeticTrap(msg, op)


def trap_conversion(msg: str, op: str) -> ConversionTrap:
    logger.debug("conversion trap in %s: %s", op, msg)
    return ConversionTrap(msg, op)


def trap_words(msg: str, op: str) -> UnsupportedWordSize:
    logger.debug("word extraction trap in %s: %s", op, msg)
    return UnsupportedWordSize(msg, op)


def shift_amount(amount: object) -> int:
    """Shift counts may be plain ints or any fixed-width integer."""
    return operator.index(amount)


class FixedWidthInteger:
    """Abstract fixed-width two's-complement integer.

    Subclasses provide the class attributes below plus the primitives marked
    abstract. Plain `int` operands are converted with the trapping
    constructor; operands of any other fixed-width class are rejected.
    """

    __slots__ = ()

    bit_width: ClassVar[int]
    is_signed: ClassVar[bool]
    Magnitude: ClassVar[type]
    ZERO: ClassVar[FixedWidthInteger]
    ONE: ClassVar[FixedWidthInteger]
    MIN: ClassVar[FixedWidthInteger]
    MAX: ClassVar[FixedWidthInteger]
    MINUS_ONE: ClassVar[FixedWidthInteger]

    # -----------------------------------------------------------------------
    # Abstract primitives
    # -----------------------------------------------------------------------

    @classmethod
    def _exactly_int(cls: type[F], source: int) -> F | None:
        raise NotImplementedError

    @classmethod
    def from_truncating_bits(cls: type[F], bits: int) -> F:
        raise NotImplementedError

    @classmethod
    def from_bit_pattern(cls: type[F], pattern: FixedWidthInteger) -> F:
        raise NotImplementedError

    @classmethod
    def _lineage(cls) -> tuple[int, bool, int]:
        """(leaf width, signedness, doublings): enough to rebuild the kind."""
        raise NotImplementedError

    @property
    def bit_pattern(self) -> FixedWidthInteger:
        raise NotImplementedError

    @property
    def magnitude(self) -> FixedWidthInteger:
        raise NotImplementedError

    def __int__(self) -> int:
        raise NotImplementedError

    def _eq(self: F, rhs: F) -> bool:
        raise NotImplementedError

    def _lt(self: F, rhs: F) -> bool:
        raise NotImplementedError

    def adding_reporting_overflow(self: F, rhs: F) -> tuple[F, bool]:
        raise NotImplementedError

    def subtracting_reporting_overflow(self: F, rhs: F) -> tuple[F, bool]:
        raise NotImplementedError

    def multiplied_full_width(self: F, rhs: F) -> tuple[F, FixedWidthInteger]:
        raise NotImplementedError

    def dividing_full_width(
        self: F, dividend: tuple[F, FixedWidthInteger]
    ) -> tuple[F, F]:
        raise NotImplementedError

    def _quotient_and_remainder(self: F, rhs: F) -> tuple[F, F]:
        """Divide with a non-zero divisor and no min/-1 overflow."""
        raise NotImplementedError

    def _and(self: F, rhs: F) -> F:
        raise NotImplementedError

    def _or(self: F, rhs: F) -> F:
        raise NotImplementedError

    def _xor(self: F, rhs: F) -> F:
        raise NotImplementedError

    def __invert__(self: F) -> F:
        raise NotImplementedError

    def masked_shift_left(self: F, amount: object) -> F:
        raise NotImplementedError

    def masked_shift_right(self: F, amount: object) -> F:
        raise NotImplementedError

    @property
    def leading_zero_bit_count(self) -> int:
        raise NotImplementedError

    @property
    def trailing_zero_bit_count(self) -> int:
        raise NotImplementedError

    @property
    def nonzero_bit_count(self) -> int:
        raise NotImplementedError

    @property
    def byte_swapped(self: F) -> F:
        raise NotImplementedError

    def to_words(self, word_bits: int = WORD_BITS) -> tuple[int, ...]:
        raise NotImplementedError

    # -----------------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------------

    @classmethod
    def exactly(cls: type[F], source: object) -> F | None:
        """Convert source if it is representable, else None."""
        if isinstance(source, float):
            return cls._exactly_float(source)
        if isinstance(source, FixedWidthInteger):
            if type(source) is cls:
                return source
            return cls._exactly_int(int(source))
        if isinstance(source, int):
            return cls._exactly_int(int(source))
        raise TypeError(f"cannot convert {type(source).__name__} to {cls.__name__}")

    @classmethod
    def converting(cls: type[F], source: object) -> F:
        """Trapping conversion. Floats are truncated toward zero first."""
        if isinstance(source, float):
            if not math.isfinite(source):
                raise trap_conversion(f"{source} is not finite", cls.__name__)
            result = cls._exactly_float(math.modf(source)[1])
        else:
            result = cls.exactly(source)
        if result is None:
            raise trap_conversion(
                f"{source!r} is not representable in {cls.__name__}", cls.__name__
            )
        return result

    @classmethod
    def truncating_if_needed(cls: type[F], source: object) -> F:
        return cls.from_truncating_bits(operator.index(source))

    @classmethod
    def clamping(cls: type[F], source: object) -> F:
        value: int = operator.index(source)
        if value < int(cls.MIN):
            return cls.MIN
        if value > int(cls.MAX):
            return cls.MAX
        return cls._exactly_int(value)

    @classmethod
    def _exactly_float(cls: type[F], source: float) -> F | None:
        if not math.isfinite(source):
            return None
        if source == 0.0:
            return cls.ZERO
        ui: int = struct.unpack("<Q", struct.pack("<d", source))[0]
        negative: bool = (ui >> 63) != 0
        exponent: int = ((ui >> F64_FRAC_BITS) & 0x7FF) - F64_EXP_BIAS
        if exponent < 0:
            return None
        if negative and not cls.is_signed:
            return None
        sig: int = (1 << F64_FRAC_BITS) | (ui & mask(F64_FRAC_BITS))
        value_bits: int = cls.bit_width - 1 if cls.is_signed else cls.bit_width
        if exponent > value_bits:
            return None
        if exponent == value_bits and not (negative and sig == 1 << F64_FRAC_BITS):
            return None
        offset: int = F64_FRAC_BITS - exponent
        if offset > 0:
            if sig & mask(offset):
                return None
            integral = cls.Magnitude._exactly_int(sig >> offset)
        else:
            integral = cls.Magnitude._exactly_int(sig) << (0 - offset)
        if not negative:
            return cls.from_bit_pattern(integral)
        # integral may be 2^(bit_width-1), one past MAX
        below = cls.from_bit_pattern(integral - 1)
        return (-below) - cls.ONE

    # -----------------------------------------------------------------------
    # Derived arithmetic
    # -----------------------------------------------------------------------

    def _coerce(self: F, other: object) -> F | None:
        if type(other) is type(self):
            return other
        if isinstance(other, int) and not isinstance(other, FixedWidthInteger):
            return type(self).converting(other)
        return None

    def _sign_fill(self: F, negative: bool) -> F:
        return ~type(self).ZERO if negative else type(self).ZERO

    def is_negative(self) -> bool:
        return self.is_signed and self._lt(type(self).ZERO)

    def is_zero(self) -> bool:
        return self._eq(type(self).ZERO)

    def signum(self: F) -> F:
        if self.is_negative():
            return type(self).MINUS_ONE
        if self.is_zero():
            return type(self).ZERO
        return type(self).ONE

    def multiplied_reporting_overflow(self: F, rhs: F) -> tuple[F, bool]:
        high, low = self.multiplied_full_width(rhs)
        result: F = type(self).from_bit_pattern(low)
        # The product fits iff the discarded half is the sign extension of
        # the kept half: zero for a non-negative result, all ones otherwise.
        return (result, not high._eq(self._sign_fill(result.is_negative())))

    def _division_overflow(self: F, rhs: F) -> bool:
        if rhs.is_zero():
            return True
        return (
            self.is_signed
            and rhs._eq(type(self).MINUS_ONE)
            and self._eq(type(self).MIN)
        )

    def quotient_and_remainder(self: F, rhs: object) -> tuple[F, F]:
        divisor = self._coerce(rhs)
        if divisor is None:
            raise TypeError(f"cannot divide {type(self).__name__} by {rhs!r}")
        if divisor.is_zero():
            raise trap_arithmetic("division by zero", "quotient_and_remainder")
        if self._division_overflow(divisor):
            raise trap_arithmetic("division overflow", "quotient_and_remainder")
        return self._quotient_and_remainder(divisor)

    def divided_reporting_overflow(self: F, rhs: F) -> tuple[F, bool]:
        if self._division_overflow(rhs):
            return (self, True)
        return (self._quotient_and_remainder(rhs)[0], False)

    def remainder_reporting_overflow(self: F, rhs: F) -> tuple[F, bool]:
        if rhs.is_zero():
            return (self, True)
        if self._division_overflow(rhs):
            return (type(self).ZERO, True)
        return (self._quotient_and_remainder(rhs)[1], False)

    def wrapping_add(self: F, rhs: object) -> F:
        return self.adding_reporting_overflow(self._coerce_strict(rhs, "&+"))[0]

    def wrapping_sub(self: F, rhs: object) -> F:
        return self.subtracting_reporting_overflow(self._coerce_strict(rhs, "&-"))[0]

    def wrapping_mul(self: F, rhs: object) -> F:
        return self.multiplied_reporting_overflow(self._coerce_strict(rhs, "&*"))[0]

    def wrapping_neg(self: F) -> F:
        return type(self).ZERO.subtracting_reporting_overflow(self)[0]

    def _coerce_strict(self: F, other: object, op: str) -> F:
        rhs = self._coerce(other)
        if rhs is None:
            raise TypeError(
                f"unsupported operand for {op}: {type(self).__name__} and "
                f"{type(other).__name__}"
            )
        return rhs

    # -----------------------------------------------------------------------
    # Operators
    # -----------------------------------------------------------------------

    def _checked(self: F, result: tuple[F, bool], msg: str, op: str) -> F:
        if result[1]:
            raise trap_arithmetic(msg, op)
        return result[0]

    def __add__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._checked(self.adding_reporting_overflow(rhs), "overflow", "+")

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._checked(
            self.subtracting_reporting_overflow(rhs), "overflow", "-"
        )

    def __rsub__(self, other):
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return lhs - self

    def __mul__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._checked(self.multiplied_reporting_overflow(rhs), "overflow", "*")

    def __rmul__(self, other):
        return self.__mul__(other)

    def __floordiv__(self, other):
        """Truncating division; the quotient rounds toward zero."""
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        if rhs.is_zero():
            raise trap_arithmetic("division by zero", "//")
        return self._checked(self.divided_reporting_overflow(rhs), "overflow", "//")

    def __rfloordiv__(self, other):
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return lhs // self

    def __mod__(self, other):
        """Truncating remainder; the result takes the dividend's sign."""
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        if rhs.is_zero():
            raise trap_arithmetic("division by zero", "%")
        return self._checked(self.remainder_reporting_overflow(rhs), "overflow", "%")

    def __rmod__(self, other):
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return lhs % self

    def __divmod__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self.quotient_and_remainder(rhs)

    def __neg__(self):
        return type(self).ZERO - self

    def __pos__(self):
        return self

    def __abs__(self):
        if self.is_negative():
            return -self
        return self

    def __and__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._and(rhs)

    __rand__ = __and__

    def __or__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._or(rhs)

    __ror__ = __or__

    def __xor__(self, other):
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._xor(rhs)

    __rxor__ = __xor__

    def __lshift__(self, amount):
        """Smart shift: negative amounts shift right, oversized ones evict every bit."""
        n: int = shift_amount(amount)
        if n < 0:
            return self >> (0 - n)
        if n >= self.bit_width:
            return type(self).ZERO
        return self._shift_left_within(n)

    def __rshift__(self, amount):
        """Arithmetic for signed kinds, logical for unsigned ones."""
        n: int = shift_amount(amount)
        if n < 0:
            return self << (0 - n)
        if n >= self.bit_width:
            return self._sign_fill(self.is_negative())
        return self._shift_right_within(n)

    def _shift_left_within(self: F, n: int) -> F:
        return self.masked_shift_left(n)

    def _shift_right_within(self: F, n: int) -> F:
        return self.masked_shift_right(n)

    # -----------------------------------------------------------------------
    # Comparison and conversion
    # -----------------------------------------------------------------------

    def __eq__(self, other):
        if type(other) is type(self):
            return self._eq(other)
        if isinstance(other, int) and not isinstance(other, FixedWidthInteger):
            return int(self) == other
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        if type(other) is type(self):
            return self._lt(other)
        if isinstance(other, int) and not isinstance(other, FixedWidthInteger):
            return int(self) < other
        return NotImplemented

    def __le__(self, other):
        if type(other) is type(self):
            return not other._lt(self)
        if isinstance(other, int) and not isinstance(other, FixedWidthInteger):
            return int(self) <= other
        return NotImplemented

    def __gt__(self, other):
        if type(other) is type(self):
            return other._lt(self)
        if isinstance(other, int) and not isinstance(other, FixedWidthInteger):
            return int(self) > other
        return NotImplemented

    def __ge__(self, other):
        if type(other) is type(self):
            return not self._lt(other)
        if isinstance(other, int) and not isinstance(other, FixedWidthInteger):
            return int(self) >= other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(int(self))

    def __index__(self) -> int:
        return int(self)

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __str__(self) -> str:
        return str(int(self))

    @property
    def words(self) -> tuple[int, ...]:
        return self.to_words(WORD_BITS)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_restore, (type(self)._lineage(), int(self)))


# ---------------------------------------------------------------------------
# Native leaf kinds
# ---------------------------------------------------------------------------


class NativeInt(FixedWidthInteger):
    """A machine-sized integer; the leaf every doubled type bottoms out in."""

    __slots__ = ("value",)

    _lo: ClassVar[int]
    _hi: ClassVar[int]

    def __init__(self, value: object = 0):
        if type(value) is int and self._lo <= value <= self._hi:
            object.__setattr__(self, "value", value)
        else:
            object.__setattr__(self, "value", type(self).converting(value).value)

    @classmethod
    def _make(cls, value: int):
        obj = object.__new__(cls)
        object.__setattr__(obj, "value", value)
        return obj

    @classmethod
    def _lineage(cls) -> tuple[int, bool, int]:
        return (cls.bit_width, cls.is_signed, 0)

    @classmethod
    def _exactly_int(cls, source: int):
        if cls._lo <= source <= cls._hi:
            return cls._make(source)
        return None

    @classmethod
    def from_truncating_bits(cls, bits: int):
        return cls._make(wrap(bits, cls.bit_width, cls.is_signed))

    @classmethod
    def from_bit_pattern(cls, pattern: FixedWidthInteger):
        return cls.from_truncating_bits(pattern.value)

    @property
    def bit_pattern(self):
        return self.Magnitude._make(self.value & mask(self.bit_width))

    @property
    def magnitude(self):
        return self.Magnitude._make(abs(self.value))

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return str(self.value)

    def _eq(self, rhs) -> bool:
        return self.value == rhs.value

    def _lt(self, rhs) -> bool:
        return self.value < rhs.value

    def is_zero(self) -> bool:
        return self.value == 0

    def is_negative(self) -> bool:
        return self.value < 0

    def _wrapped(self, result: int):
        wrapped: int = wrap(result, self.bit_width, self.is_signed)
        return (self._make(wrapped), wrapped != result)

    def adding_reporting_overflow(self, rhs):
        return self._wrapped(self.value + rhs.value)

    def subtracting_reporting_overflow(self, rhs):
        return self._wrapped(self.value - rhs.value)

    def multiplied_full_width(self, rhs):
        product: int = self.value * rhs.value
        low = self.Magnitude._make(product & mask(self.bit_width))
        return (self._make(product >> self.bit_width), low)

    def dividing_full_width(self, dividend):
        high, low = dividend
        if self.value == 0:
            raise trap_arithmetic("division by zero", "dividing_full_width")
        wide: int = (high.value << self.bit_width) | low.value
        quotient, remainder = _divmod_trunc(wide, self.value)
        if not self._lo <= quotient <= self._hi:
            raise trap_arithmetic("quotient overflow", "dividing_full_width")
        return (self._make(quotient), self._make(remainder))

    def _quotient_and_remainder(self, rhs):
        quotient, remainder = _divmod_trunc(self.value, rhs.value)
        return (self._make(quotient), self._make(remainder))

    def _and(self, rhs):
        return self._make(self.value & rhs.value)

    def _or(self, rhs):
        return self._make(self.value | rhs.value)

    def _xor(self, rhs):
        return self._make(self.value ^ rhs.value)

    def __invert__(self):
        return self.from_truncating_bits(~self.value)

    def masked_shift_left(self, amount):
        n: int = shift_amount(amount) & (self.bit_width - 1)
        return self.from_truncating_bits(self.value << n)

    def masked_shift_right(self, amount):
        n: int = shift_amount(amount) & (self.bit_width - 1)
        return self._make(self.value >> n)

    @property
    def leading_zero_bit_count(self) -> int:
        return count_leading_zeros(self.value, self.bit_width)

    @property
    def trailing_zero_bit_count(self) -> int:
        return count_trailing_zeros(self.value, self.bit_width)

    @property
    def nonzero_bit_count(self) -> int:
        return popcount(self.value, self.bit_width)

    @property
    def byte_swapped(self):
        return self.from_truncating_bits(byte_swap(self.value, self.bit_width))

    def to_words(self, word_bits: int = WORD_BITS) -> tuple[int, ...]:
        if self.bit_width <= word_bits:
            return (word_image(self.value, word_bits),)
        if self.bit_width % word_bits != 0:
            raise trap_words(
                f"{self.bit_width}-bit value does not split into {word_bits}-bit words",
                "words",
            )
        return split_words(self.value, self.bit_width, word_bits)


def _divmod_trunc(a: int, b: int) -> tuple[int, int]:
    """Quotient rounds toward zero; remainder takes the dividend's sign."""
    q: int = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = 0 - q
    return (q, a - q * b)


_NATIVE_KINDS: dict[tuple[int, bool], type[NativeInt]] = {}


def fixed_int(bits: int, signed: bool) -> type[NativeInt]:
    """Return the native kind of the given width, creating it on first use."""
    key = (bits, signed)
    cached = _NATIVE_KINDS.get(key)
    if cached is not None:
        return cached
    if bits < 8 or bits & (bits - 1):
        raise ValueError(f"native width must be a power of two >= 8, got {bits}")
    lo, hi = value_range(bits, signed)
    name: str = f"Int{bits}" if signed else f"UInt{bits}"
    cls = type(
        name,
        (NativeInt,),
        {
            "__slots__": (),
            "__module__": __name__,
            "bit_width": bits,
            "is_signed": signed,
            "_lo": lo,
            "_hi": hi,
        },
    )
    _NATIVE_KINDS[key] = cls
    cls.Magnitude = fixed_int(bits, False) if signed else cls
    cls.ZERO = cls._make(0)
    cls.ONE = cls._make(1)
    cls.MIN = cls._make(lo)
    cls.MAX = cls._make(hi)
    if signed:
        cls.MINUS_ONE = cls._make(-1)
    return cls


def _restore(lineage: tuple[int, bool, int], value: int) -> FixedWidthInteger:
    """Unpickle a value whose kind may be a doubled one built at runtime."""
    from .double import double_width

    bits, signed, doublings = lineage
    kind: type[FixedWidthInteger] = fixed_int(bits, signed)
    for _ in range(doublings):
        kind = double_width(kind)
    return kind.from_truncating_bits(value)


Int8 = fixed_int(8, True)
Int16 = fixed_int(16, True)
Int32 = fixed_int(32, True)
Int64 = fixed_int(64, True)
UInt8 = fixed_int(8, False)
UInt16 = fixed_int(16, False)
UInt32 = fixed_int(32, False)
UInt64 = fixed_int(64, False)
