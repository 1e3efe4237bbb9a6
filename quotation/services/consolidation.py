from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from quotation.domain import EquipmentItem, Job
from quotation.services.departments import order_departments
from quotation.utils.helpers import safe_float, text_sort_key


@dataclass(frozen=True)
class QuotationLine:
    item: EquipmentItem
    quantity: int

    @property
    def line_total(self) -> float:
        return safe_float(self.item.price, 0) * self.quantity

    def to_dict(self, with_prices: bool = True) -> dict:
        d = dict(
            id=self.item.id,
            code=self.item.code,
            name=self.item.name,
            unit=self.item.unit,
            quantity=self.quantity,
        )
        if with_prices:
            d["price"] = self.item.price
            d["line_total"] = self.line_total
        return d


@dataclass(frozen=True)
class DepartmentLines:
    department: str
    chargeable: List[QuotationLine]
    non_chargeable: List[QuotationLine]

    def to_dict(self) -> dict:
        return dict(
            department=self.department,
            chargeable=[ln.to_dict() for ln in self.chargeable],
            # utility assets: not billed, so no price columns
            non_chargeable=[ln.to_dict(with_prices=False) for ln in self.non_chargeable],
        )


def effective_item(item: EquipmentItem, catalog: Mapping[str, EquipmentItem]) -> EquipmentItem:
    """Sub-items are attributed to their parent; a missing parent keeps the item itself."""
    if item.parent_id:
        parent = catalog.get(item.parent_id)
        if parent is not None:
            return parent
    return item


def consolidate_jobs(jobs: Iterable[Job], catalog: Mapping[str, EquipmentItem]) -> List[QuotationLine]:
    """
    Merge install quantities of the given jobs keyed by effective item id.
    The first occurrence fixes the item reference; result is ordered by code.
    """
    acc: Dict[str, Dict] = {}
    for job in jobs:
        for item_id, qty in job.items.items():
            if qty is None or qty.install <= 0:
                continue
            item = catalog.get(item_id)
            if item is None:
                continue
            target = effective_item(item, catalog)
            entry = acc.setdefault(target.id, {"item": target, "quantity": 0})
            entry["quantity"] += qty.install

    lines = [QuotationLine(item=e["item"], quantity=e["quantity"]) for e in acc.values()]
    lines.sort(key=lambda ln: text_sort_key(ln.item.code))
    return lines


def consolidate(jobs: Iterable[Job], catalog: Mapping[str, EquipmentItem], department: Optional[str] = None) -> List[DepartmentLines]:
    """
    Customer-facing view, one block per department in display order.
    Chargeable = any investment other than utility-funded.
    """
    jobs = list(jobs)
    departments = [department] if department else order_departments(j.department for j in jobs)

    out: List[DepartmentLines] = []
    for dep in departments:
        dep_jobs = [j for j in jobs if j.department == dep]
        chargeable = consolidate_jobs((j for j in dep_jobs if j.is_chargeable), catalog)
        non_chargeable = consolidate_jobs((j for j in dep_jobs if not j.is_chargeable), catalog)
        if not chargeable and not non_chargeable:
            continue
        out.append(DepartmentLines(department=dep, chargeable=chargeable, non_chargeable=non_chargeable))
    return out


def usage_summary(jobs: Iterable[Job], catalog: Mapping[str, EquipmentItem]) -> List[Dict]:
    """
    Equipment usage per department with install/remove/reuse totals, both
    buckets together, children folded into parents. No money involved.
    """
    jobs = list(jobs)
    out = []
    for dep in order_departments(j.department for j in jobs):
        acc: Dict[str, Dict] = {}
        for job in (j for j in jobs if j.department == dep):
            for item_id, qty in job.items.items():
                item = catalog.get(item_id)
                if item is None or qty is None or qty.is_empty:
                    continue
                target = effective_item(item, catalog)
                entry = acc.setdefault(target.id, {"item": target, "install": 0, "remove": 0, "reuse": 0})
                entry["install"] += qty.install
                entry["remove"] += qty.remove
                entry["reuse"] += qty.reuse
        if not acc:
            continue
        rows = sorted(acc.values(), key=lambda e: text_sort_key(e["item"].code))
        out.append({"department": dep, "items": rows})
    return out
