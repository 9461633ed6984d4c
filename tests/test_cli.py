"""Tests for the dwint command line."""

import pytest

from dwint.cli import main


@pytest.mark.parametrize(
    "argv,expected",
    [
        (["add", "1", "2"], "3"),
        (["--bits", "16", "--unsigned", "add", "256", "255"], "511"),
        (["--bits", "16", "div", "-1", "1"], "-1"),
        (["--bits", "16", "rem", "-7", "2"], "-1"),
        (["--bits", "256", "mul", "0x100000000000000000000", "-3"], str(-3 * 2**80)),
        (["--bits", "16", "--wrapping", "add", "32767", "1"], "-32768 True"),
        (["--bits", "16", "--wrapping", "sub", "5", "1"], "4 False"),
        (["--bits", "8", "mulfull", "-128", "-128"], "64 0"),
        (["--bits", "16", "divfull", "1", "0", "3"], "21845 1"),
        (["--bits", "16", "shl", "1", "15"], "-32768"),
        (["--bits", "16", "shr", "-32768", "100"], "-1"),
        (["--bits", "16", "mshl", "1", "17"], "2"),
        (["--bits", "16", "mshr", "-32768", "15"], "-1"),
        (["--bits", "16", "and", "0xF0", "0x3C"], "48"),
        (["--bits", "16", "not", "0"], "-1"),
        (["--bits", "128", "clz", "1"], "127"),
        (["--bits", "128", "ctz", "0"], "128"),
        (["--bits", "128", "popcount", "-1"], "128"),
        (["--bits", "16", "--unsigned", "bswap", "0x1234"], str(0x3412)),
        (["--bits", "128", "words", "-1"], "0xffffffffffffffff 0xffffffffffffffff"),
        (["repr", "-1"], "(-1, 18446744073709551615)"),
        (["--bits", "16", "add", "1.75", "1"], "2"),
        (["--bits", "16", "--wrapping", "neg", "-32768"], "-32768"),
    ],
)
def test_evaluates(argv: list[str], expected: str, capsys):
    assert main(argv) == 0
    assert capsys.readouterr().out.strip() == expected


@pytest.mark.parametrize(
    "argv",
    [
        ["--bits", "16", "add", "32767", "1"],
        ["--bits", "16", "div", "1", "0"],
        ["--bits", "16", "neg", "-32768"],
        ["--bits", "16", "--unsigned", "add", "-1", "0"],
        ["--bits", "8", "divfull", "1", "0", "1"],
    ],
)
def test_traps_exit_one(argv: list[str], capsys):
    assert main(argv) == 1
    assert capsys.readouterr().err.startswith("dwint: ")


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["frobnicate", "1"],
        ["add", "1"],
        ["--bits", "24", "add", "1", "2"],
        ["--bits"],
        ["--nope", "add", "1", "2"],
        ["add", "one", "2"],
    ],
)
def test_usage_errors_exit_two(argv: list[str], capsys):
    assert main(argv) == 2
    assert "dwint:" in capsys.readouterr().err


def test_help(capsys):
    assert main(["--help"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("dwint [OPTIONS]")
    assert "floats (truncated toward zero)" in out
