import math
from typing import Any, Optional


def to_float(v: Any) -> Optional[float]:
    """Return a finite number or None; booleans and blanks are not numbers."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        v = v.strip()
        if not v or v.lower() == "null":
            return None
    elif not isinstance(v, (int, float)):
        return None
    try:
        number = float(v)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def to_str(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def to_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "yes", "on"}
    return bool(v)
