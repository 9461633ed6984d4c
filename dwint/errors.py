"""Diagnostics for fixed-width integer operations."""

from __future__ import annotations


class FixedWidthError(Exception):
    """Base error for fixed-width integer operations."""

    def __init__(self, msg: str, op: str | None = None):
        if op is None:
            super().__init__(msg)
        else:
            super().__init__(f"{op}: {msg}")
        self.msg = msg
        self.op = op


class ArithmeticTrap(FixedWidthError, ArithmeticError):
    """Overflow or division by zero in a trapping operation."""


class ConversionTrap(FixedWidthError, ValueError):
    """Source value not representable in the target type."""


class UnsupportedWordSize(FixedWidthError):
    """Word extraction requested for a width that does not tile the word."""
