from __future__ import annotations

import logging
import numbers
import re
import uuid
from dataclasses import dataclass, replace
from typing import IO, Dict, List, Tuple, Union

import pandas as pd

from quotation.constants import DEPARTMENTS
from quotation.domain import EquipmentItem
from quotation.services.departments import sort_equipment
from quotation.services.errors import SpreadsheetError

logger = logging.getLogger("importer.equipment")

# header (lower/trimmed) -> canonical column
COLUMN_ALIASES = {
    "code": "code",
    "รหัสพัสดุ": "code",
    "รหัส": "code",
    "name": "name",
    "ชื่ออุปกรณ์": "name",
    "รายการ": "name",
    "price": "price",
    "ราคา": "price",
    "ราคาต่อหน่วย": "price",
    "unit": "unit",
    "หน่วย": "unit",
    "department": "department",
    "แผนก": "department",
}


@dataclass(frozen=True)
class ImportResult:
    added: int = 0
    updated: int = 0
    skipped: int = 0

    def to_dict(self) -> dict:
        return dict(added=self.added, updated=self.updated, skipped=self.skipped)


def _norm_header(val: object) -> str:
    s = "" if val is None else str(val)
    return re.sub(r"\s+", " ", s.strip().lower())


def _cell_text(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        # part numbers typed into Excel come back as floats
        f = float(value)
        return str(int(f)) if f.is_integer() else str(value)
    return str(value).strip()


def _is_price(value) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and not pd.isna(value)
        and float(value) >= 0
    )


def read_sheet(source: Union[str, IO]) -> pd.DataFrame:
    """First sheet, first row as headers, columns mapped to canonical names."""
    try:
        df = pd.read_excel(source, sheet_name=0, engine="openpyxl")
    except Exception as e:
        raise SpreadsheetError("Could not read the spreadsheet (expected .xlsx with name, price, unit, department columns).") from e

    rename: Dict[str, str] = {}
    for col in df.columns:
        canonical = COLUMN_ALIASES.get(_norm_header(col))
        if canonical and canonical not in rename.values():
            rename[col] = canonical
    df = df.rename(columns=rename)
    for col in ("code", "name", "price", "unit", "department"):
        if col not in df.columns:
            df[col] = None
    return df[["code", "name", "price", "unit", "department"]]


def merge_rows(df: pd.DataFrame, equipment: List[EquipmentItem]) -> Tuple[List[EquipmentItem], ImportResult]:
    """
    Upsert rows into the catalog by case-insensitive trimmed name.
    Invalid rows (no name, bad price, non-canonical department) are skipped;
    new rows also need a unit.
    """
    by_name: Dict[str, EquipmentItem] = {}
    for item in equipment:
        by_name.setdefault(item.name.strip().lower(), item)
    order = [item.id for item in equipment]
    items = {item.id: item for item in equipment}

    added = updated = skipped = 0
    for _, row in df.iterrows():
        name = row.get("name")
        price = row.get("price")
        department = _cell_text(row.get("department"))
        unit = _cell_text(row.get("unit"))
        code = _cell_text(row.get("code"))

        if not (isinstance(name, str) and name.strip() and _is_price(price) and department in DEPARTMENTS):
            skipped += 1
            continue

        key = name.strip().lower()
        existing = by_name.get(key)
        if existing is not None:
            changed = replace(
                existing,
                price=float(price),
                department=department,
                unit=unit or existing.unit,
                code=code or existing.code,
            )
            items[changed.id] = changed
            by_name[key] = changed
            updated += 1
        elif unit:
            new = EquipmentItem(
                id=uuid.uuid4().hex,
                code=code,
                name=name.strip(),
                price=float(price),
                unit=unit,
                department=department,
            )
            items[new.id] = new
            order.append(new.id)
            by_name[key] = new
            added += 1
        else:
            skipped += 1

    result = ImportResult(added=added, updated=updated, skipped=skipped)
    logger.info("equipment import", extra=result.to_dict())
    return sort_equipment(items[i] for i in order), result


def import_equipment_sheet(source: Union[str, IO], equipment: List[EquipmentItem]) -> Tuple[List[EquipmentItem], ImportResult]:
    return merge_rows(read_sheet(source), equipment)
