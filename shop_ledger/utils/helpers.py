# utils/helpers.py
from datetime import datetime
import logging
import uuid
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def now() -> datetime:
    """Local wall-clock time, truncated to whole milliseconds."""
    t = datetime.now()
    return t.replace(microsecond=(t.microsecond // 1000) * 1000)


def new_id() -> str:
    """Opaque record id."""
    return uuid.uuid4().hex


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number with thousands separators and a fixed number of decimals.

    On parse failure returns str(v), or `sentinel` when given; with
    strict=True a ValueError is raised instead.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"
