# utils/validators.py
import re

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)
    """
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_hhmm(text: str) -> bool:
    """True for a 24h clock time written as 'HH:MM' (e.g. '18:00')."""
    return bool(text and _HHMM.match(str(text).strip()))
