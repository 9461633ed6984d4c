"""Algebraic properties of doubled integers, checked with hypothesis."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dwint import Int8, Int64, UInt8, UInt64, double_width

I16 = double_width(Int8)
U16 = double_width(UInt8)
I32 = double_width(I16)
U32 = double_width(U16)
Int128 = double_width(Int64)
UInt128 = double_width(UInt64)

KINDS = [I16, U16, I32, U32, Int128, UInt128]


def values(kind):
    return st.integers(int(kind.MIN), int(kind.MAX)).map(kind)


def pairs(kind):
    return st.tuples(values(kind), values(kind))


@pytest.mark.parametrize("kind", KINDS, ids=lambda k: k.__name__)
def test_add_then_subtract_restores(kind):
    @given(pairs(kind))
    def check(pair):
        a, b = pair
        total, overflow = a.adding_reporting_overflow(b)
        if not overflow:
            assert total - b == a

    check()


@pytest.mark.parametrize("kind", KINDS, ids=lambda k: k.__name__)
def test_magnitude_is_absolute_value(kind):
    @given(values(kind))
    def check(a):
        assert int(a.magnitude) == abs(int(a))

    check()


@pytest.mark.parametrize("kind", KINDS, ids=lambda k: k.__name__)
def test_full_width_product(kind):
    @given(pairs(kind))
    def check(pair):
        a, b = pair
        high, low = a.multiplied_full_width(b)
        assert (int(high) << kind.bit_width) + int(low) == int(a) * int(b)

    check()


@pytest.mark.parametrize("kind", KINDS, ids=lambda k: k.__name__)
def test_division_identity(kind):
    @settings(max_examples=50)
    @given(pairs(kind))
    def check(pair):
        a, b = pair
        if b == 0 or (kind.is_signed and a == kind.MIN and b == -1):
            return
        q, r = a.quotient_and_remainder(b)
        assert int(b) * int(q) + int(r) == int(a)
        assert abs(int(r)) < abs(int(b))
        assert int(r) == 0 or (int(r) < 0) == (int(a) < 0)

    check()


@pytest.mark.parametrize("kind", KINDS, ids=lambda k: k.__name__)
def test_shift_round_trip(kind):
    @given(values(kind), st.integers(0, kind.bit_width + 8))
    def check(a, n):
        bits = kind.bit_width
        if n >= bits:
            assert a << n == 0
            assert a >> n == (-1 if a < 0 else 0)
            return
        kept = (a << n) >> n
        mask = (1 << (bits - n)) - 1
        assert int(kept) & mask == int(a) & mask

    check()


@pytest.mark.parametrize("kind", KINDS, ids=lambda k: k.__name__)
def test_integer_round_trip(kind):
    @given(st.integers(int(kind.MIN), int(kind.MAX)))
    def check(x):
        assert int(kind(x)) == x
        assert int(kind.from_truncating_bits(x)) == x

    check()


@pytest.mark.parametrize("kind", [I16, U16, I32, Int128], ids=lambda k: k.__name__)
def test_float_conversion_matches_int(kind):
    @given(st.floats(allow_nan=False, allow_infinity=False))
    def check(f):
        exact = kind.exactly(f)
        if f == int(f) and int(kind.MIN) <= int(f) <= int(kind.MAX):
            assert exact is not None and int(exact) == int(f)
        else:
            assert exact is None

    check()
