# retail_pos/utils/validators.py
from __future__ import annotations

from datetime import date

from ..errors import ValidationError


def non_empty(text) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


def clean_optional(text) -> str | None:
    """Strip; empty strings become None (stored as NULL)."""
    if text is None:
        return None
    s = str(text).strip()
    return s or None


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float. Accepts a decimal comma ("10,50").

    Returns:
        (ok: bool, value: float|None)
    """
    if isinstance(x, bool):
        return False, None
    if isinstance(x, str):
        x = x.strip().replace(",", ".")
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def try_parse_int(x):
    if isinstance(x, bool):
        return False, None
    if isinstance(x, float):
        return (True, int(x)) if x.is_integer() else (False, None)
    try:
        return True, int(str(x).strip())
    except (TypeError, ValueError):
        return False, None


def require_text(value, label: str) -> str:
    if not non_empty(value):
        raise ValidationError(f"{label} cannot be empty.")
    return str(value).strip()


def require_positive_float(value, label: str) -> float:
    ok, val = try_parse_float(value)
    if not ok or val is None or val <= 0:
        raise ValidationError(f"{label} must be a number greater than zero.")
    return val


def require_non_negative_float(value, label: str) -> float:
    ok, val = try_parse_float(value)
    if not ok or val is None or val < 0:
        raise ValidationError(f"{label} must be a number greater than or equal to zero.")
    return val


def require_non_negative_int(value, label: str) -> int:
    ok, val = try_parse_int(value)
    if not ok or val is None or val < 0:
        raise ValidationError(f"{label} must be a whole number greater than or equal to zero.")
    return val


def require_positive_int(value, label: str) -> int:
    ok, val = try_parse_int(value)
    if not ok or val is None or val <= 0:
        raise ValidationError(f"{label} must be a whole number greater than zero.")
    return val


def optional_id(value, label: str) -> int | None:
    """Empty → None; otherwise a positive integer id."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_positive_int(value, label)


def require_iso_date(value, label: str) -> str:
    """'YYYY-MM-DD' calendar date, returned normalised."""
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a date in YYYY-MM-DD format.") from None
