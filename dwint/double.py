"""DoubleWidth: a fixed-width integer built from two limbs of a narrower one.

A value is the pair (high, low) standing for high * 2^W + low, where W is the
base width. `high` has the base's signedness and carries the sign of the
whole value; `low` is always the base's unsigned counterpart. Every
operation is written against the `FixedWidthInteger` primitives of the base,
so the base may itself be a DoubleWidth:

    UInt256 = double_width(double_width(UInt64))

Division at any level is the same shift-and-subtract loop; full-width
division promotes one level up and narrows the result back.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from .bits import WORD_BITS, mask
from .fixed import (
    FixedWidthInteger,
    Int64,
    UInt64,
    shift_amount,
    trap_arithmetic,
    trap_words,
)

logger = logging.getLogger(__name__)


class DoubleWidth(FixedWidthInteger):
    """Integer of twice the base width. Use `double_width(base)` to get a concrete type.

    Construction:
        T()            zero
        T(high, low)   explicit limbs (ints are converted to the limb types)
        T((high, low)) the same, as a pair
        T(x)           trapping conversion from int, float or another kind
    """

    __slots__ = ("high", "low")

    Base: ClassVar[type[FixedWidthInteger]]
    Low: ClassVar[type[FixedWidthInteger]]

    def __init__(self, high: object = None, low: object = None):
        if isinstance(high, tuple) and low is None:
            high, low = high
        if low is not None:
            object.__setattr__(self, "high", self._limb(self.Base, high))
            object.__setattr__(self, "low", self._limb(self.Low, low))
        elif high is None:
            object.__setattr__(self, "high", self.Base.ZERO)
            object.__setattr__(self, "low", self.Low.ZERO)
        else:
            value = type(self).converting(high)
            object.__setattr__(self, "high", value.high)
            object.__setattr__(self, "low", value.low)

    @staticmethod
    def _limb(kind: type[FixedWidthInteger], value: object) -> FixedWidthInteger:
        if type(value) is kind:
            return value
        if isinstance(value, int):
            return kind(value)
        raise TypeError(f"limb must be {kind.__name__} or int, got {type(value).__name__}")

    @classmethod
    def _make(cls, high: FixedWidthInteger, low: FixedWidthInteger) -> DoubleWidth:
        obj = object.__new__(cls)
        object.__setattr__(obj, "high", high)
        object.__setattr__(obj, "low", low)
        return obj

    @classmethod
    def _lineage(cls) -> tuple[int, bool, int]:
        bits, signed, doublings = cls.Base._lineage()
        return (bits, signed, doublings + 1)

    def __repr__(self) -> str:
        return f"({self.high!r}, {self.low!r})"

    # -----------------------------------------------------------------------
    # Representation and construction
    # -----------------------------------------------------------------------

    @classmethod
    def _exactly_int(cls, source: int):
        # Python's >> is arithmetic, so a negative source yields a negative
        # high slice and the two's-complement image in low.
        high = cls.Base._exactly_int(source >> cls.Base.bit_width)
        if high is None:
            return None
        return cls._make(high, cls.Low.from_truncating_bits(source))

    @classmethod
    def from_truncating_bits(cls, bits: int):
        return cls._make(
            cls.Base.from_truncating_bits(bits >> cls.Base.bit_width),
            cls.Low.from_truncating_bits(bits),
        )

    @classmethod
    def from_bit_pattern(cls, pattern):
        return cls._make(cls.Base.from_bit_pattern(pattern.high), pattern.low)

    @property
    def bit_pattern(self):
        if not self.is_signed:
            return self
        return self.Magnitude._make(self.high.bit_pattern, self.low)

    def __int__(self) -> int:
        return (int(self.high) << self.Base.bit_width) + int(self.low)

    def is_zero(self) -> bool:
        return self.high.is_zero() and self.low.is_zero()

    def is_negative(self) -> bool:
        return self.high.is_negative()

    # -----------------------------------------------------------------------
    # Ordering
    # -----------------------------------------------------------------------

    def _eq(self, rhs) -> bool:
        return self.high._eq(rhs.high) and self.low._eq(rhs.low)

    def _lt(self, rhs) -> bool:
        if not self.high._eq(rhs.high):
            return self.high._lt(rhs.high)
        return self.low._lt(rhs.low)

    # -----------------------------------------------------------------------
    # Additive arithmetic
    # -----------------------------------------------------------------------

    @property
    def magnitude(self):
        if not self.is_signed:
            return self
        if self._eq(type(self).MIN):
            # 2^(2W-1) is one past MAX; only the unsigned pattern holds it.
            return self.Magnitude._make(self.high.bit_pattern, self.low)
        value = self
        if self.high.is_negative():
            value = (~self).wrapping_add(type(self).ONE)
        return self.Magnitude._make(value.high.magnitude, value.low)

    def adding_reporting_overflow(self, rhs):
        low, low_carry = self.low.adding_reporting_overflow(rhs.low)
        high, high_overflow = self.high.adding_reporting_overflow(rhs.high)
        carry_overflow: bool = False
        if low_carry:
            high, carry_overflow = high.adding_reporting_overflow(self.Base.ONE)
        # A signed high limb can wrap on the limb sum and wrap back on the
        # carry; the two overflows then cancel.
        return (self._make(high, low), high_overflow != carry_overflow)

    def subtracting_reporting_overflow(self, rhs):
        low, low_borrow = self.low.subtracting_reporting_overflow(rhs.low)
        high, high_overflow = self.high.subtracting_reporting_overflow(rhs.high)
        borrow_overflow: bool = False
        if low_borrow:
            high, borrow_overflow = high.subtracting_reporting_overflow(self.Base.ONE)
        return (self._make(high, low), high_overflow != borrow_overflow)

    # -----------------------------------------------------------------------
    # Multiplication
    # -----------------------------------------------------------------------

    def multiplied_full_width(self, rhs):
        """Exact product as (high, low); high has this type, low its magnitude type."""
        Low = self.Low
        negative: bool = self.is_negative() != rhs.is_negative()
        lhs_mag = self.magnitude
        rhs_mag = rhs.magnitude

        def mul(x, y):
            carry, partial = x.multiplied_full_width(y)
            return (partial, carry)

        def add3(x, y, z):
            s1, o1 = x.adding_reporting_overflow(y)
            s2, o2 = s1.adding_reporting_overflow(z)
            return (s2, Low(int(o1) + int(o2)))

        a = mul(rhs_mag.low, lhs_mag.low)
        b = mul(rhs_mag.low, lhs_mag.high)
        c = mul(rhs_mag.high, lhs_mag.low)
        d = mul(rhs_mag.high, lhs_mag.high)

        mid1 = add3(a[1], b[0], c[0])
        mid2 = add3(b[1], c[1], d[0])
        limb2, limb2_carry = mid2[0].adding_reporting_overflow(mid1[1])
        limb3 = mid2[1] + d[1]
        if limb2_carry:
            limb3 = limb3 + Low.ONE

        low = self.Magnitude._make(mid1[0], a[0])
        high = self._make(self.Base.from_bit_pattern(limb3), limb2)
        if not negative:
            return (high, low)
        # Two's complement across all four limbs.
        low, carry = (~low).adding_reporting_overflow(self.Magnitude.ONE)
        high = ~high
        if carry:
            high = high.wrapping_add(type(self).ONE)
        return (high, low)

    # -----------------------------------------------------------------------
    # Division
    # -----------------------------------------------------------------------

    def _long_divide(self, divisor):
        """Shift-and-subtract division of unsigned values; divisor is non-zero."""
        cls = type(self)
        if divisor.leading_zero_bit_count < self.leading_zero_bit_count:
            return (cls.ZERO, self)
        shift: int = divisor.leading_zero_bit_count - self.leading_zero_bit_count
        quotient = cls.ZERO
        remainder = self >> (shift + 1)
        for i in range(shift, -1, -1):
            remainder = (remainder << 1) | ((self >> i) & cls.ONE)
            if not remainder._lt(divisor):
                remainder = remainder - divisor
                quotient = quotient | (cls.ONE << i)
        return (quotient, remainder)

    def _quotient_and_remainder(self, rhs):
        quotient, remainder = self.magnitude._long_divide(rhs.magnitude)
        if not self.is_signed:
            return (quotient, remainder)
        cls = type(self)
        # A quotient of 2^(2W-1) reinterprets as MIN and negates to itself.
        q = cls.from_bit_pattern(quotient)
        if self.is_negative() != rhs.is_negative():
            q = q.wrapping_neg()
        r = cls.from_bit_pattern(remainder)
        if self.is_negative():
            r = -r
        return (q, r)

    def _widen(self):
        wide = double_width(type(self))
        return wide._make(self._sign_fill(self.is_negative()), self.bit_pattern)

    @classmethod
    def _narrow(cls, wide):
        value = cls.from_bit_pattern(wide.low)
        if not wide.high._eq(value._sign_fill(value.is_negative())):
            return None
        return value

    def dividing_full_width(self, dividend):
        """Divide the 4W-bit value (high, low) by self, at one level up."""
        high, low = dividend
        if self.is_zero():
            raise trap_arithmetic("division by zero", "dividing_full_width")
        wide = double_width(type(self))
        quotient, remainder = wide._make(high, low)._quotient_and_remainder(
            self._widen()
        )
        narrow_quotient = self._narrow(quotient)
        if narrow_quotient is None:
            logger.debug("full-width quotient %r does not fit %s", quotient, type(self).__name__)
            raise trap_arithmetic("quotient overflow", "dividing_full_width")
        return (narrow_quotient, self._narrow(remainder))

    # -----------------------------------------------------------------------
    # Bitwise and shifts
    # -----------------------------------------------------------------------

    def _and(self, rhs):
        return self._make(self.high._and(rhs.high), self.low._and(rhs.low))

    def _or(self, rhs):
        return self._make(self.high._or(rhs.high), self.low._or(rhs.low))

    def _xor(self, rhs):
        return self._make(self.high._xor(rhs.high), self.low._xor(rhs.low))

    def __invert__(self):
        return self._make(~self.high, ~self.low)

    def _shift_left_within(self, n: int):
        if n == self.Base.bit_width:
            return self._make(self.Base.from_bit_pattern(self.low), self.Low.ZERO)
        return self.masked_shift_left(n)

    def _shift_right_within(self, n: int):
        if n == self.Base.bit_width:
            fill = self.high._sign_fill(self.high.is_negative())
            return self._make(fill, self.high.bit_pattern)
        return self.masked_shift_right(n)

    def masked_shift_left(self, amount):
        n: int = shift_amount(amount) & (self.bit_width - 1)
        width: int = self.Base.bit_width
        if n == 0:
            return self
        if n >= width:
            # Never shift a limb by its own width; the n == width case is a move.
            moved = self.low if n == width else self.low.masked_shift_left(n - width)
            return self._make(self.Base.from_bit_pattern(moved), self.Low.ZERO)
        carried = self.Base.from_bit_pattern(self.low.masked_shift_right(width - n))
        high = self.high.masked_shift_left(n)._or(carried)
        return self._make(high, self.low.masked_shift_left(n))

    def masked_shift_right(self, amount):
        n: int = shift_amount(amount) & (self.bit_width - 1)
        width: int = self.Base.bit_width
        if n == 0:
            return self
        fill = self.high._sign_fill(self.high.is_negative())
        if n >= width:
            moved = self.high if n == width else self.high.masked_shift_right(n - width)
            return self._make(fill, moved.bit_pattern)
        carried = self.high.masked_shift_left(width - n).bit_pattern
        low = self.low.masked_shift_right(n)._or(carried)
        return self._make(self.high.masked_shift_right(n), low)

    # -----------------------------------------------------------------------
    # Bit introspection
    # -----------------------------------------------------------------------

    @property
    def leading_zero_bit_count(self) -> int:
        high: int = self.high.leading_zero_bit_count
        if high < self.Base.bit_width:
            return high
        return self.Base.bit_width + self.low.leading_zero_bit_count

    @property
    def trailing_zero_bit_count(self) -> int:
        low: int = self.low.trailing_zero_bit_count
        if low < self.Base.bit_width:
            return low
        return self.Base.bit_width + self.high.trailing_zero_bit_count

    @property
    def nonzero_bit_count(self) -> int:
        return self.high.nonzero_bit_count + self.low.nonzero_bit_count

    @property
    def byte_swapped(self):
        return self._make(
            self.Base.from_bit_pattern(self.low.byte_swapped),
            self.high.byte_swapped.bit_pattern,
        )

    def to_words(self, word_bits: int = WORD_BITS) -> tuple[int, ...]:
        """Native words, least significant first.

        Limbs narrower than a word are packed into one word; wider limbs
        contribute their own words. Widths that do not tile the word trap.
        """
        width: int = self.Base.bit_width
        if width < word_bits:
            if word_bits % width != 0:
                raise trap_words(
                    f"{width}-bit limbs do not pack into {word_bits}-bit words",
                    "words",
                )
            low_word: int = self.low.to_words(word_bits)[0]
            high_word: int = self.high.to_words(word_bits)[0]
            return ((low_word | (high_word << width)) & mask(word_bits),)
        if width % word_bits != 0:
            raise trap_words(
                f"{width}-bit limbs do not split into {word_bits}-bit words", "words"
            )
        return self.low.to_words(word_bits) + self.high.to_words(word_bits)


_DOUBLE_WIDTH_KINDS: dict[type, type[DoubleWidth]] = {}


def double_width(base: type[FixedWidthInteger]) -> type[DoubleWidth]:
    """Return the integer type twice as wide as base, creating it on first use."""
    cached = _DOUBLE_WIDTH_KINDS.get(base)
    if cached is not None:
        return cached
    if not (isinstance(base, type) and issubclass(base, FixedWidthInteger)):
        raise TypeError(f"base must be a fixed-width integer type, got {base!r}")
    low = base.Magnitude
    cls = type(
        f"DoubleWidth[{base.__name__}]",
        (DoubleWidth,),
        {
            "__slots__": (),
            "__module__": __name__,
            "Base": base,
            "Low": low,
            "bit_width": 2 * base.bit_width,
            "is_signed": base.is_signed,
        },
    )
    _DOUBLE_WIDTH_KINDS[base] = cls
    cls.Magnitude = double_width(low) if base.is_signed else cls
    cls.ZERO = cls._make(base.ZERO, low.ZERO)
    cls.ONE = cls._make(base.ZERO, low.ONE)
    cls.MAX = cls._make(base.MAX, low.MAX)
    cls.MIN = cls._make(base.MIN, low.ZERO)
    if base.is_signed:
        cls.MINUS_ONE = cls._make(base.MINUS_ONE, low.MAX)
    logger.debug("created %s (%d bits)", cls.__name__, cls.bit_width)
    return cls


Int128 = double_width(Int64)
UInt128 = double_width(UInt64)
Int256 = double_width(Int128)
UInt256 = double_width(UInt128)
