"""Native word helpers: bit-pattern operations on plain Python ints.

Patterns are non-negative ints holding a two's-complement bit image of a
fixed width. Callers keep values inside the width; these helpers only mask.
"""

from __future__ import annotations

WORD_BITS: int = 64


# ---------------------------------------------------------------------------
# Layer 1: Masks and sign interpretation
# ---------------------------------------------------------------------------


def mask(bits: int) -> int:
    return (1 << bits) - 1


def to_signed(pattern: int, bits: int) -> int:
    pattern = pattern & mask(bits)
    if pattern >> (bits - 1):
        return pattern - (1 << bits)
    return pattern


def wrap(value: int, bits: int, signed: bool) -> int:
    """Reduce value modulo 2^bits into the signed or unsigned range."""
    if signed:
        return to_signed(value, bits)
    return value & mask(bits)


def value_range(bits: int, signed: bool) -> tuple[int, int]:
    if signed:
        return (-(1 << (bits - 1)), (1 << (bits - 1)) - 1)
    return (0, mask(bits))


# ---------------------------------------------------------------------------
# Layer 2: Bit counts
# ---------------------------------------------------------------------------


def count_leading_zeros(pattern: int, bits: int) -> int:
    return bits - (pattern & mask(bits)).bit_length()


def count_trailing_zeros(pattern: int, bits: int) -> int:
    pattern = pattern & mask(bits)
    if pattern == 0:
        return bits
    return (pattern & -pattern).bit_length() - 1


def popcount(pattern: int, bits: int) -> int:
    return bin(pattern & mask(bits)).count("1")


# ---------------------------------------------------------------------------
# Layer 3: Byte order and words
# ---------------------------------------------------------------------------


def byte_swap(pattern: int, bits: int) -> int:
    """Reverse the byte order of a pattern whose width is a whole number of bytes."""
    nbytes: int = bits // 8
    raw: bytes = (pattern & mask(bits)).to_bytes(nbytes, "little")
    return int.from_bytes(raw, "big")


def split_words(pattern: int, bits: int, word_bits: int) -> tuple[int, ...]:
    """Split a pattern into word_bits chunks, least significant first.

    bits must be a multiple of word_bits.
    """
    count: int = bits // word_bits
    word_mask: int = mask(word_bits)
    return tuple((pattern >> (i * word_bits)) & word_mask for i in range(count))


def word_image(value: int, word_bits: int) -> int:
    """Two's-complement word of a value narrower than a word.

    Negative Python ints are already sign-extended, so masking is enough.
    """
    return value & mask(word_bits)
