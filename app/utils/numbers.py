from __future__ import annotations

import math
from typing import Any, Iterable, Optional


def safe_number(value: Any) -> Optional[float]:
    """
    Coerce an upstream field to float.
    Returns None for missing, non-numeric or non-finite input.
    """
    if value is None:
        return None
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None


def median(values: Iterable[Any]) -> Optional[float]:
    arr = sorted(x for x in (safe_number(v) for v in values) if x is not None)

    if not arr:
        return None

    mid = len(arr) // 2
    if len(arr) % 2 == 0:
        return (arr[mid - 1] + arr[mid]) / 2
    return arr[mid]
