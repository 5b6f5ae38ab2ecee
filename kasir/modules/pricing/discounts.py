"""
pricing/discounts.py

Effective discount per line.

A line carries its own percent. A checkout session may also carry a
special-customer policy; when active, its percent replaces (never adds to)
every line's own percent. Out-of-range percents are clamped, not rejected,
since they come straight from cashier input.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ...utils.validators import clamp, try_parse_float
from .calculations import InvalidInput, LineInput

__all__ = ["DiscountPolicy", "clamp_percent", "resolve_discount", "apply_policy"]


@dataclass(frozen=True)
class DiscountPolicy:
    global_percent: float = 0.0
    applies_to_all_lines: bool = True

    @property
    def is_active(self) -> bool:
        return bool(self.applies_to_all_lines) and clamp_percent(self.global_percent) > 0


def clamp_percent(value) -> float:
    """Parse a percent and clamp it to 0..100. Non-numeric input raises InvalidInput."""
    ok, pct = try_parse_float(value)
    if not ok:
        raise InvalidInput("discount_percent", value, "not a number")
    return clamp(pct, 0.0, 100.0)


def resolve_discount(line_discount, policy: Optional[DiscountPolicy] = None) -> float:
    if policy is not None and policy.is_active:
        return clamp_percent(policy.global_percent)
    return clamp_percent(line_discount)


def apply_policy(lines: Iterable[LineInput], policy: Optional[DiscountPolicy]) -> list[LineInput]:
    """Return copies of `lines` with their discount replaced by the effective one."""
    return [
        replace(ln, discount_percent=resolve_discount(ln.discount_percent, policy))
        for ln in lines
    ]
