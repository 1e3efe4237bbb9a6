import unicodedata
from typing import Any

def round_currency(value: Any) -> float:
    try:
        return round(float(value), 2)
    except (TypeError, ValueError):
        return 0.0

def format_currency(value: Any) -> str:
    """2 decimals with thousands separators, e.g. 12,604.00"""
    return f"{round_currency(value):,.2f}"

def safe_float(value: Any, default: float = 0.0) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return float(default)
    if f != f:  # NaN from spreadsheets / bad JSON
        return float(default)
    return f

def safe_int(value: Any, default: int = 0) -> int:
    f = safe_float(value, default)
    try:
        return int(f)
    except (OverflowError, ValueError):
        return int(default)

def text_sort_key(value: Any) -> str:
    """Case-insensitive, normalization-stable ordering for codes and names."""
    s = "" if value is None else str(value)
    return unicodedata.normalize("NFC", s).casefold()
