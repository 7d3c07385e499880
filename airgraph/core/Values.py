import math
from typing import Any, Optional

# Tolerance for every mismatch and balance decision in the engine.
EPSILON = 1e-6


def parse_optional_number(raw: Any) -> Optional[float]:
    """
    Convert a raw stored field into a float, or None when it is empty or not
    a finite number. Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        candidate = raw
    else:
        candidate = str(raw).strip()
        if not candidate:
            return None

    try:
        value = float(candidate)
    except (TypeError, ValueError, OverflowError):
        return None

    if not math.isfinite(value):
        return None
    return value


def number_or_zero(raw: Any) -> float:
    value = parse_optional_number(raw)
    return value if value is not None else 0.0


def nearly_equal(a: float, b: float, eps: float = EPSILON) -> bool:
    return abs(a - b) <= eps
