"""Raw payload byte -> physical value conversions.

Both conversions are pure and total over ``[0, 255]`` for each byte.
``identity`` deliberately ignores the second byte even for two-byte
PIDs: only engine speed has a dedicated multi-byte formula.
"""

from __future__ import annotations

from enum import Enum


class DecodeRule(str, Enum):
    """Closed set of decoding rules a catalog entry may select."""

    IDENTITY = "identity"
    RPM = "rpm"


def identity(a: int, b: int) -> float:
    """Return the first payload byte unchanged."""
    return float(a)


def rpm_formula(a: int, b: int) -> float:
    """Engine speed: ``((A * 256) + B) / 4`` rpm."""
    return ((a * 256) + b) / 4


def decode(rule: DecodeRule, a: int, b: int) -> float:
    """Apply *rule* to payload bytes *a* and *b*."""
    if rule is DecodeRule.RPM:
        return rpm_formula(a, b)
    if rule is DecodeRule.IDENTITY:
        return identity(a, b)
    raise ValueError(f"Unknown decode rule: {rule!r}")
