# tests/test_reconciliation.py
import pytest

from kasir.modules.pricing import Drifted, Equal, LineInput, aggregate, reconcile


def test_same_total_is_equal():
    _, t = aggregate([LineInput(111000, 2, 10)])
    assert reconcile(t.grand_total, t.grand_total) == Equal()


def test_hundred_rupiah_difference_is_drift():
    assert reconcile(199800.0, 199900.0) == Drifted(100.0)


def test_delta_is_recomputed_minus_stored():
    outcome = reconcile(200000.0, 199800.0)
    assert outcome.drifted
    assert outcome.delta == pytest.approx(-200.0)


def test_float_noise_below_half_rupiah_is_equal():
    assert reconcile(199800.0, 199800.0000001) == Equal()
    assert reconcile(199800.0, 199800.49) == Equal()
    assert reconcile(199800.0, 199800.5).drifted


def test_missing_stored_total_counts_as_zero():
    assert reconcile(None, 0.0) == Equal()
    assert reconcile(None, 1000.0) == Drifted(1000.0)


def test_tighter_epsilon():
    assert reconcile(100.0, 100.2, epsilon=0.1).drifted
    assert not reconcile(100.0, 100.05, epsilon=0.1).drifted


@pytest.mark.parametrize("eps", [0, -0.1, 0.51, 1])
def test_epsilon_must_be_within_half_rupiah(eps):
    with pytest.raises(ValueError):
        reconcile(1.0, 1.0, epsilon=eps)
