# kasir/utils/validators.py
import math


# ---- Numeric parsing ----

def try_parse_float(x):
    """
    Best-effort parse to a finite float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed (or gave NaN/inf) and value is None.
    Booleans are not numbers here.
    """
    if isinstance(x, bool):
        return False, None
    try:
        val = float(x)
    except (TypeError, ValueError):
        return False, None
    if not math.isfinite(val):
        return False, None
    return True, val


def try_parse_int(x):
    """
    Parse a whole number. Integral floats (3.0, as sqlite REAL columns
    return them) are accepted; 2.5 is not.

    Returns:
        (ok: bool, value: int|None)
    """
    if isinstance(x, bool):
        return False, None
    if isinstance(x, int):
        return True, x
    ok, val = try_parse_float(x)
    if not ok or val is None or not float(val).is_integer():
        return False, None
    return True, int(val)


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))
