"""Tests for the native word helpers."""

import pytest

from dwint.bits import (
    byte_swap,
    count_leading_zeros,
    count_trailing_zeros,
    mask,
    popcount,
    split_words,
    to_signed,
    value_range,
    word_image,
    wrap,
)


def test_mask_and_sign():
    assert mask(8) == 0xFF
    assert to_signed(0xFF, 8) == -1
    assert to_signed(0x7F, 8) == 127
    assert to_signed(0x180, 8) == -128
    assert value_range(8, True) == (-128, 127)
    assert value_range(8, False) == (0, 255)


@pytest.mark.parametrize(
    "value,bits,signed,expected",
    [
        (256, 8, False, 0),
        (-1, 8, False, 255),
        (128, 8, True, -128),
        (-129, 8, True, 127),
        (2**64, 64, False, 0),
    ],
)
def test_wrap(value: int, bits: int, signed: bool, expected: int):
    assert wrap(value, bits, signed) == expected


def test_counts():
    assert count_leading_zeros(0, 16) == 16
    assert count_leading_zeros(1, 16) == 15
    assert count_leading_zeros(-1, 16) == 0
    assert count_trailing_zeros(0, 16) == 16
    assert count_trailing_zeros(0x100, 16) == 8
    assert popcount(0xF0F0, 16) == 8
    assert popcount(-1, 32) == 32


def test_byte_swap_and_words():
    assert byte_swap(0x1234, 16) == 0x3412
    assert byte_swap(0xAB, 8) == 0xAB
    assert byte_swap(0x0102030405060708, 64) == 0x0807060504030201
    assert split_words(0x0102030405060708, 64, 16) == (0x0708, 0x0506, 0x0304, 0x0102)


def test_word_image():
    assert word_image(-1, 64) == 0xFFFFFFFFFFFFFFFF
    assert word_image(-128, 16) == 0xFF80
    assert word_image(200, 64) == 200
