# tests/test_discounts.py
import math

import pytest

from kasir.modules.pricing import (
    DiscountPolicy,
    InvalidInput,
    LineInput,
    aggregate,
    apply_policy,
    clamp_percent,
    compute,
    resolve_discount,
)


def test_active_policy_overrides_every_line_discount():
    policy = DiscountPolicy(global_percent=20, applies_to_all_lines=True)
    lines = [LineInput(111000, 1, 0), LineInput(111000, 1, 50)]

    results, totals = aggregate(lines, policy)

    expected = compute(111000, 1, 20)
    assert results[0] == expected
    assert results[1] == expected
    assert totals.grand_total == expected.line_total * 2


def test_policy_does_not_stack_with_line_discount():
    policy = DiscountPolicy(global_percent=20)
    assert resolve_discount(50, policy) == 20
    assert resolve_discount(0, policy) == 20


def test_inactive_policy_leaves_line_discounts_alone():
    assert resolve_discount(15, DiscountPolicy(global_percent=0)) == 15
    assert resolve_discount(15, DiscountPolicy(global_percent=20, applies_to_all_lines=False)) == 15
    assert resolve_discount(15, None) == 15
    assert not DiscountPolicy().is_active
    assert DiscountPolicy(global_percent=5).is_active


def test_policy_percent_is_clamped():
    assert resolve_discount(10, DiscountPolicy(global_percent=250)) == 100
    assert not DiscountPolicy(global_percent=-5).is_active


@pytest.mark.parametrize("raw, expected", [(-10, 0), (0, 0), (12.5, 12.5), (100, 100), (150, 100), ("30", 30)])
def test_clamp_percent(raw, expected):
    assert clamp_percent(raw) == expected


@pytest.mark.parametrize("raw", ["abc", None, math.nan, True])
def test_non_numeric_discount_is_invalid(raw):
    with pytest.raises(InvalidInput):
        resolve_discount(raw)


def test_apply_policy_returns_new_inputs():
    lines = [LineInput(1000, 2, 5)]
    out = apply_policy(lines, DiscountPolicy(global_percent=30))
    assert out == [LineInput(1000, 2, 30)]
    assert lines == [LineInput(1000, 2, 5)]


def test_apply_policy_without_policy_only_clamps():
    out = apply_policy([LineInput(1000, 1, 120)], None)
    assert out[0].discount_percent == 100
