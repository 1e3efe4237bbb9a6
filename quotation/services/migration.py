"""
Upgrade saved project blobs to the current ProjectData shape.

Historical shapes, oldest first:

  v0  equipment rows may lack ``department``/``code``; prices may be strings
  v1  flat ``quotation: {itemId: qty}`` with a single ``profitMargin`` or a
      per-department ``profitMargins`` map, no jobs
  v2  ``jobs`` present but item values may be bare numbers and
      classification/profit fields may be missing or inconsistent
  v3  current shape (``schemaVersion: 3``)

Each step takes the looser dict and returns the next one; nothing here
raises on bad data. Unusable entries are dropped or coerced.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import Callable, Dict, List

from quotation.constants import (
    ASSET_CUSTOMER,
    ASSET_TYPES,
    ASSET_UTILITY,
    DEPARTMENTS,
    FALLBACK_DEPARTMENT,
    INITIAL_EQUIPMENT_ITEMS,
    INVESTMENT_CUSTOMER,
    INVESTMENT_TYPES,
    QUANTITY_ACTIONS,
    SCHEMA_VERSION,
)
from quotation.domain import Project, ProjectData, ProjectStore
from quotation.services.departments import sort_equipment, order_departments
from quotation.utils.helpers import safe_float, safe_int

logger = logging.getLogger(__name__)


def _clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _positive_int(value) -> int:
    n = safe_int(value, 0)
    return n if n > 0 else 0


def upgrade_v0_equipment(raw: dict) -> dict:
    equipment = raw.get("equipment")
    if not isinstance(equipment, list):
        equipment = copy.deepcopy(INITIAL_EQUIPMENT_ITEMS)

    rows = []
    seen = set()
    for e in equipment:
        if not isinstance(e, dict) or e.get("id") in (None, "") or not _clean_text(e.get("name")):
            continue
        item_id = str(e["id"])
        if item_id in seen:
            continue
        seen.add(item_id)
        price = safe_float(e.get("price"), 0)
        rows.append({
            "id": item_id,
            "code": _clean_text(e.get("code")),
            "name": _clean_text(e.get("name")),
            "price": price if price > 0 else 0.0,
            "unit": _clean_text(e.get("unit")),
            "department": _clean_text(e.get("department")) or FALLBACK_DEPARTMENT,
            "parentId": str(e["parentId"]) if e.get("parentId") not in (None, "") else None,
        })

    # parents must exist and be top-level themselves, whatever the row order
    ids = {r["id"] for r in rows}
    for r in rows:
        pid = r["parentId"]
        if pid and (pid == r["id"] or pid not in ids):
            r["parentId"] = None
    top_level = {r["id"] for r in rows if not r["parentId"]}
    for r in rows:
        if r["parentId"] and r["parentId"] not in top_level:
            r["parentId"] = None

    out = dict(raw)
    out["equipment"] = rows
    return out


def upgrade_v1_quotation_to_jobs(raw: dict) -> dict:
    """One customer job per department out of the flat quotation map."""
    out = dict(raw)
    quotation = out.pop("quotation", None)
    margins = out.pop("profitMargins", None)
    single_margin = out.pop("profitMargin", None)

    if isinstance(out.get("jobs"), list):
        return out

    dept_of = {e["id"]: e["department"] for e in out.get("equipment") or []}
    per_dep: Dict[str, Dict[str, dict]] = {}
    for item_id, qty in (quotation or {}).items() if isinstance(quotation, dict) else []:
        item_id = str(item_id)
        n = _positive_int(qty)
        if not n or item_id not in dept_of:
            continue
        per_dep.setdefault(dept_of[item_id], {})[item_id] = {"install": n}

    def _margin_for(dep: str) -> float:
        # a per-department map replaces the single margin outright
        if isinstance(margins, dict):
            return max(safe_float(margins.get(dep), 0), 0.0)
        # the single margin was only ever seeded for the canonical departments
        if dep in DEPARTMENTS and isinstance(single_margin, (int, float)) and not isinstance(single_margin, bool):
            return max(float(single_margin), 0.0)
        return 0.0

    out["jobs"] = [
        {
            "id": f"legacy-{i + 1}",
            "name": dep,
            "department": dep,
            "investment": INVESTMENT_CUSTOMER,
            "asset": ASSET_CUSTOMER,
            "profitMargin": _margin_for(dep),
            "items": per_dep[dep],
        }
        for i, dep in enumerate(order_departments(per_dep))
    ]
    return out


def _normalize_quantities(value) -> dict:
    if isinstance(value, dict):
        q = {k: _positive_int(value.get(k)) for k in QUANTITY_ACTIONS}
    else:
        q = {"install": _positive_int(value)}
    return {k: v for k, v in q.items() if v}


def upgrade_v2_normalize_jobs(raw: dict) -> dict:
    out = dict(raw)
    jobs = []
    seen = set()
    for i, j in enumerate(out.get("jobs") or []):
        if not isinstance(j, dict):
            continue
        job_id = str(j.get("id") or f"job-{i + 1}")
        if job_id in seen:
            continue
        seen.add(job_id)

        investment = j.get("investment") if j.get("investment") in INVESTMENT_TYPES else INVESTMENT_CUSTOMER
        asset = j.get("asset") if j.get("asset") in ASSET_TYPES else ASSET_CUSTOMER
        if investment != INVESTMENT_CUSTOMER:
            asset = ASSET_UTILITY

        eligible = investment == INVESTMENT_CUSTOMER and asset == ASSET_CUSTOMER
        margin = max(safe_float(j.get("profitMargin"), 0), 0.0) if eligible else None

        items = {}
        raw_items = j.get("items") if isinstance(j.get("items"), dict) else {}
        for item_id, qty in raw_items.items():
            q = _normalize_quantities(qty)
            if q:
                items[str(item_id)] = q

        jobs.append({
            "id": job_id,
            "name": _clean_text(j.get("name")) or _clean_text(j.get("department")) or FALLBACK_DEPARTMENT,
            "department": _clean_text(j.get("department")) or FALLBACK_DEPARTMENT,
            "investment": investment,
            "asset": asset,
            "profitMargin": margin,
            "items": items,
        })
    out["jobs"] = jobs
    return out


UPGRADES: List[Callable[[dict], dict]] = [
    upgrade_v0_equipment,
    upgrade_v1_quotation_to_jobs,
    upgrade_v2_normalize_jobs,
]


def upgrade_project_dict(raw) -> dict:
    data = dict(raw) if isinstance(raw, dict) else {}
    version = safe_int(data.get("schemaVersion"), 0)
    if version > SCHEMA_VERSION:
        logger.warning("project blob newer than this build", extra={"schema_version": version})
    # every step is idempotent, so current blobs go through the same chain
    for step in UPGRADES:
        data = step(data)
    data["schemaVersion"] = SCHEMA_VERSION
    return data


def migrate_project_data(raw) -> ProjectData:
    project = ProjectData.from_dict(upgrade_project_dict(raw))
    return replace(project, equipment=sort_equipment(project.equipment))


def migrate_store(raw) -> ProjectStore:
    """Normalize the whole persisted blob; unusable projects are dropped."""
    if not isinstance(raw, dict):
        return ProjectStore()
    projects = []
    for p in raw.get("projects") or []:
        if not isinstance(p, dict) or not p.get("id"):
            continue
        projects.append(Project(
            id=str(p["id"]),
            name=_clean_text(p.get("name")) or str(p["id"]),
            last_modified=_clean_text(p.get("lastModified")),
            data=migrate_project_data(p.get("data")),
        ))
    last_id = raw.get("lastProjectId")
    if last_id is not None and not any(p.id == last_id for p in projects):
        logger.info("last project missing from store", extra={"project_id": last_id})
        last_id = None
    return ProjectStore(projects=projects, last_project_id=last_id)
