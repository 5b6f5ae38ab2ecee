"""
pricing/reconciliation.py

Compare a sale's stored total with one recomputed from its persisted lines.

The recomputed figure is authoritative: the stored one is a cached result of
the same engine and is overwritten on edit, never the other way round.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ...constants import RECONCILE_EPSILON

__all__ = ["Equal", "Drifted", "Reconciliation", "reconcile"]


@dataclass(frozen=True)
class Equal:
    @property
    def drifted(self) -> bool:
        return False


@dataclass(frozen=True)
class Drifted:
    delta: float  # recomputed - stored

    @property
    def drifted(self) -> bool:
        return True


Reconciliation = Union[Equal, Drifted]


def reconcile(stored_total: float, recomputed_total: float, epsilon: float = RECONCILE_EPSILON) -> Reconciliation:
    """
    Equal() when the totals differ by less than `epsilon`, else Drifted(delta).

    Rupiah totals have no minor unit, so epsilon may not exceed half a rupiah.
    """
    if not 0 < epsilon <= 0.5:
        raise ValueError(f"epsilon must be within (0, 0.5], got {epsilon!r}")
    stored = float(stored_total or 0.0)
    delta = float(recomputed_total) - stored
    if abs(delta) < epsilon:
        return Equal()
    return Drifted(delta)

