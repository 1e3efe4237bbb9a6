from __future__ import annotations

from typing import Iterable, List, Sequence, TypeVar

from quotation.constants import DEPARTMENTS
from quotation.utils.helpers import text_sort_key

T = TypeVar("T")


def order_departments(present: Iterable[str], canonical: Sequence[str] = DEPARTMENTS) -> List[str]:
    """
    Canonical departments first (in canonical order), then custom ones A→Z.
    Every grouped view (breakdown, quotation, usage summary) goes through here.
    """
    seen = {d for d in present if d}
    standard = [d for d in canonical if d in seen]
    custom = sorted((d for d in seen if d not in canonical), key=text_sort_key)
    return standard + custom


def department_rank(department: str, canonical: Sequence[str] = DEPARTMENTS) -> tuple:
    try:
        return (0, canonical.index(department), "")
    except ValueError:
        return (1, 0, text_sort_key(department))


def sort_equipment(items: Iterable[T], canonical: Sequence[str] = DEPARTMENTS) -> List[T]:
    # stable: keeps entry order inside a department
    return sorted(items, key=lambda e: department_rank(getattr(e, "department", "") or "", canonical))
