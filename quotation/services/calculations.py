from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from quotation.constants import (
    COFUNDED_SHARE,
    INVESTMENT_COFUNDED,
    INVESTMENT_CUSTOMER,
    VAT_RATE,
)
from quotation.domain import EquipmentItem, ItemQuantities, Job
from quotation.services.departments import order_departments
from quotation.utils.helpers import safe_float, text_sort_key

Catalog = Mapping[str, EquipmentItem]


def resolve_job_items(job: Job, catalog: Catalog) -> List[Tuple[EquipmentItem, ItemQuantities]]:
    """
    Pair each entry with its catalog item. Ids no longer in the catalog and
    empty quantity records are skipped, never raised on.
    """
    pairs = []
    for item_id, qty in job.items.items():
        item = catalog.get(item_id)
        if item is None or qty is None or qty.is_empty:
            continue
        pairs.append((item, qty))
    return pairs


def charged_share(investment: str) -> float:
    if investment == INVESTMENT_CUSTOMER:
        return 1.0
    if investment == INVESTMENT_COFUNDED:
        return COFUNDED_SHARE
    return 0.0


def calc_job(job: Job, catalog: Catalog) -> Dict:
    base_cost = sum(safe_float(item.price, 0) * qty.install for item, qty in resolve_job_items(job, catalog))
    charged_cost = base_cost * charged_share(job.investment)

    # profit always runs off the full base cost
    profit = 0.0
    if job.is_profit_eligible:
        profit = base_cost * (safe_float(job.profit_margin, 0) / 100.0)

    total = 0.0 if job.is_donated else charged_cost + profit
    return {
        "job_id": job.id,
        "name": job.name,
        "department": job.department,
        "investment": job.investment,
        "asset": job.asset,
        "profit_margin": job.profit_margin,
        "base_cost": base_cost,
        "charged_cost": charged_cost,
        "profit": profit,
        "total": total,
    }


def job_lines(job: Job, catalog: Catalog) -> List[Dict]:
    """Resolved lines of one job, ordered by item code."""
    lines = []
    for item, qty in resolve_job_items(job, catalog):
        lines.append({
            "item": item,
            "install": qty.install,
            "remove": qty.remove,
            "reuse": qty.reuse,
            "price": item.price,
            "line_total": safe_float(item.price, 0) * qty.install,
        })
    lines.sort(key=lambda li: text_sort_key(li["item"].code))
    return lines


def calc_departments(jobs: Iterable[Job], catalog: Catalog, job_costs: Optional[Dict[str, Dict]] = None) -> Dict[str, Dict]:
    """
    {department: {"subtotal", "profit", "job_ids"}} in display order.
    Department profit only counts jobs with a positive profit.
    """
    jobs = list(jobs)
    job_costs = job_costs or {j.id: calc_job(j, catalog) for j in jobs}

    result: Dict[str, Dict] = {}
    for dep in order_departments(j.department for j in jobs):
        dep_jobs = [j for j in jobs if j.department == dep]
        costs = [job_costs[j.id] for j in dep_jobs]
        result[dep] = {
            "subtotal": sum(c["total"] for c in costs),
            "profit": sum(c["profit"] for c in costs if c["profit"] > 0),
            "job_ids": [j.id for j in dep_jobs],
        }
    return result


def calc_totals(jobs: Iterable[Job], catalog: Catalog, job_costs: Optional[Dict[str, Dict]] = None) -> Dict:
    jobs = list(jobs)
    job_costs = job_costs or {j.id: calc_job(j, catalog) for j in jobs}

    sub_total = sum(job_costs[j.id]["charged_cost"] for j in jobs)
    profit_amount = sum(job_costs[j.id]["profit"] for j in jobs)
    total_before_vat = sub_total + profit_amount
    vat_amount = total_before_vat * VAT_RATE
    return {
        "sub_total": sub_total,
        "profit_amount": profit_amount,
        "total_before_vat": total_before_vat,
        "vat_amount": vat_amount,
        "grand_total": total_before_vat + vat_amount,
    }


def summarize(jobs: Iterable[Job], catalog: Catalog) -> Dict:
    """Everything the summary view, the exports and the CLI need in one pass."""
    jobs = list(jobs)
    job_costs = {j.id: calc_job(j, catalog) for j in jobs}
    return {
        "jobs": job_costs,
        "departments": calc_departments(jobs, catalog, job_costs),
        "totals": calc_totals(jobs, catalog, job_costs),
    }
