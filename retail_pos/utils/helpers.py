# retail_pos/utils/helpers.py
from datetime import date, datetime, timedelta
import logging
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def timestamp_str(moment: datetime) -> str:
    """Local wall-clock timestamp as stored in sales.sold_at."""
    return moment.strftime(TIMESTAMP_FORMAT)


def day_bounds(date_from: str, date_to: str) -> tuple[str, str]:
    """
    Translate an inclusive calendar range into [start, end) timestamp bounds
    comparable against sales.sold_at.
    """
    start = date.fromisoformat(date_from)
    end = date.fromisoformat(date_to) + timedelta(days=1)
    return f"{start.isoformat()} 00:00:00", f"{end.isoformat()} 00:00:00"


def to_cents(v: float) -> float:
    return round(float(v), 2)


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    On parse failure returns str(v), or `sentinel` if given, or raises
    ValueError when strict=True.
    """
    try:
        x = float(v)
    except Exception as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_brl(v: NumberLike) -> str:
    """R$ 1.234,56: fmt_money with the separators swapped."""
    s = fmt_money(v, sentinel="0.00")
    return "R$ " + s.replace(",", "_").replace(".", ",").replace("_", ".")
