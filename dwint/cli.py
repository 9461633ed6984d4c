"""dwint CLI: evaluate one fixed-width integer operation."""

from __future__ import annotations

import logging
import sys
from typing import Callable

from . import integer_type
from .errors import FixedWidthError
from .fixed import FixedWidthInteger

logger = logging.getLogger(__name__)


USAGE: str = """\
dwint [OPTIONS] OP A [B [C]]

Evaluate a fixed-width integer operation and print the result.
Operands are decimal, 0x/0o/0b integers, or floats (truncated toward zero).

Operations:
  add sub mul div rem        trapping arithmetic (reporting with --wrapping)
  mulfull A B                full-width product as HIGH LOW
  divfull HIGH LOW DIVISOR   full-width quotient and remainder
  shl shr                    smart shifts by B
  mshl mshr                  masked shifts by B
  and or xor not neg abs
  clz ctz popcount bswap words repr

Options:
  --bits N      Total width: 8, 16, 32, 64, 128 or 256 (default 128)
  --unsigned    Use the unsigned kind
  --wrapping    Print VALUE OVERFLOW instead of trapping
  --verbose     Log at debug level
  --help        Show this help message
"""

ARITY: dict[str, int] = {
    "add": 2,
    "sub": 2,
    "mul": 2,
    "div": 2,
    "rem": 2,
    "mulfull": 2,
    "divfull": 3,
    "shl": 2,
    "shr": 2,
    "mshl": 2,
    "mshr": 2,
    "and": 2,
    "or": 2,
    "xor": 2,
    "not": 1,
    "neg": 1,
    "abs": 1,
    "clz": 1,
    "ctz": 1,
    "popcount": 1,
    "bswap": 1,
    "words": 1,
    "repr": 1,
}

REPORTING: dict[str, Callable] = {
    "add": lambda a, b: a.adding_reporting_overflow(b),
    "sub": lambda a, b: a.subtracting_reporting_overflow(b),
    "mul": lambda a, b: a.multiplied_reporting_overflow(b),
    "div": lambda a, b: a.divided_reporting_overflow(b),
    "rem": lambda a, b: a.remainder_reporting_overflow(b),
}


def parse_operand(text: str, kind: type[FixedWidthInteger]) -> FixedWidthInteger:
    try:
        source: int | float = int(text, 0)
    except ValueError:
        source = float(text)
    return kind(source)


def evaluate(op: str, kind: type[FixedWidthInteger], texts: list[str], wrapping: bool) -> str:
    if op in ("shl", "shr", "mshl", "mshr"):
        value = parse_operand(texts[0], kind)
        amount: int = int(texts[1], 0)
        if op == "shl":
            return str(value << amount)
        if op == "shr":
            return str(value >> amount)
        if op == "mshl":
            return str(value.masked_shift_left(amount))
        return str(value.masked_shift_right(amount))
    if op == "divfull":
        high = parse_operand(texts[0], kind)
        low = kind.Magnitude(int(texts[1], 0))
        divisor = parse_operand(texts[2], kind)
        quotient, remainder = divisor.dividing_full_width((high, low))
        return f"{quotient} {remainder}"
    args = [parse_operand(t, kind) for t in texts]
    a = args[0]
    if wrapping and op in REPORTING:
        value, overflow = REPORTING[op](a, args[1])
        return f"{value} {overflow}"
    if op == "add":
        return str(a + args[1])
    if op == "sub":
        return str(a - args[1])
    if op == "mul":
        return str(a * args[1])
    if op == "div":
        return str(a // args[1])
    if op == "rem":
        return str(a % args[1])
    if op == "mulfull":
        high, low = a.multiplied_full_width(args[1])
        return f"{high} {low}"
    if op == "and":
        return str(a & args[1])
    if op == "or":
        return str(a | args[1])
    if op == "xor":
        return str(a ^ args[1])
    if op == "not":
        return str(~a)
    if op == "neg":
        return str(a.wrapping_neg() if wrapping else -a)
    if op == "abs":
        return str(abs(a))
    if op == "clz":
        return str(a.leading_zero_bit_count)
    if op == "ctz":
        return str(a.trailing_zero_bit_count)
    if op == "popcount":
        return str(a.nonzero_bit_count)
    if op == "bswap":
        return str(a.byte_swapped)
    if op == "words":
        return " ".join(f"{w:#x}" for w in a.words)
    return repr(a)


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    bits: int = 128
    signed = True
    wrapping = False
    verbose = False
    positional: list[str] = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--bits":
            if i + 1 >= len(args):
                print("dwint: --bits requires a value", file=sys.stderr)
                return 2
            try:
                bits = int(args[i + 1])
            except ValueError:
                print("dwint: invalid width '" + args[i + 1] + "'", file=sys.stderr)
                return 2
            i += 2
        elif arg == "--unsigned":
            signed = False
            i += 1
        elif arg == "--wrapping":
            wrapping = True
            i += 1
        elif arg == "--verbose":
            verbose = True
            i += 1
        elif arg.startswith("--"):
            print("dwint: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        else:
            positional.append(arg)
            i += 1

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if bits not in (8, 16, 32, 64, 128, 256):
        print("dwint: unsupported width " + str(bits), file=sys.stderr)
        return 2
    if not positional:
        print("dwint: missing operation", file=sys.stderr)
        return 2
    op = positional[0]
    if op not in ARITY:
        print("dwint: unknown operation '" + op + "'", file=sys.stderr)
        return 2
    operands = positional[1:]
    if len(operands) != ARITY[op]:
        print(
            "dwint: " + op + " expects " + str(ARITY[op]) + " operand(s)",
            file=sys.stderr,
        )
        return 2

    kind = integer_type(bits, signed)
    logger.debug("evaluating %s on %s", op, kind.__name__)
    try:
        print(evaluate(op, kind, operands, wrapping))
    except FixedWidthError as e:
        print("dwint: " + str(e), file=sys.stderr)
        return 1
    except ValueError as e:
        print("dwint: invalid operand: " + str(e), file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
