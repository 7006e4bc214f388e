"""Tests for elm327diag.unit_converter."""

from __future__ import annotations

import pytest

from elm327diag.unit_converter import DecodeRule, decode, identity, rpm_formula


def test_rpm_formula_reference_value() -> None:
    assert rpm_formula(0x1A, 0x2C) == 1675.0


def test_rpm_formula_bounds() -> None:
    assert rpm_formula(0, 0) == 0.0
    assert rpm_formula(255, 255) == 16383.75


def test_identity_ignores_second_byte() -> None:
    assert identity(100, 0) == 100.0
    assert identity(100, 255) == 100.0
    assert isinstance(identity(100, 7), float)


@pytest.mark.parametrize(
    "rule, a, b, expected",
    [
        (DecodeRule.IDENTITY, 95, 0, 95.0),
        (DecodeRule.IDENTITY, 0x1A, 0x2C, 26.0),
        (DecodeRule.RPM, 0x1A, 0x2C, 1675.0),
        (DecodeRule.RPM, 0x0B, 0xB8, 750.0),
    ],
)
def test_decode_dispatches_on_rule(rule: DecodeRule, a: int, b: int, expected: float) -> None:
    assert decode(rule, a, b) == expected


def test_decode_accepts_rule_value_string() -> None:
    assert decode(DecodeRule("rpm"), 0x1A, 0x2C) == 1675.0


def test_decode_unknown_rule_raises() -> None:
    with pytest.raises(ValueError, match="Unknown decode rule"):
        decode("bogus", 1, 2)  # type: ignore[arg-type]
