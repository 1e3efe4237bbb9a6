import re

_DIGITS_RE = re.compile(r"\d")

def clean_str(val, max_len: int = 255) -> str | None:
    """
    Collapse whitespace, trim, enforce max length. Returns None if empty after cleaning.
    """
    if val is None:
        return None
    s = re.sub(r"\s+", " ", str(val)).strip()
    if not s:
        return None
    return s[:max_len]

def normalize_phone(val: str | None) -> str | None:
    """
    Keep digits plus a leading '+'; Thai numbers are 9-10 digits.
    Returns None if empty or implausible.
    """
    if not val:
        return None
    digits = "".join(_DIGITS_RE.findall(val))
    if not 9 <= len(digits) <= 12:
        return None
    return ("+" if str(val).strip().startswith("+") else "") + digits

def parse_price(val) -> float | None:
    """Non-negative number, 2 decimals; None when invalid."""
    if isinstance(val, bool):
        return None
    try:
        f = round(float(val), 2)
    except (TypeError, ValueError):
        return None
    if f != f or f < 0:
        return None
    return f
