from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Tuple

from quotation.constants import INITIAL_EQUIPMENT_ITEMS
from quotation.domain import EquipmentItem, ProjectData
from quotation.services.departments import sort_equipment
from quotation.services.errors import NotFoundError, ValidationError
from quotation.services.jobs import new_id
from quotation.utils.validators import clean_str, parse_price

logger = logging.getLogger(__name__)


def initial_catalog() -> List[EquipmentItem]:
    return sort_equipment(EquipmentItem.from_dict(d) for d in INITIAL_EQUIPMENT_ITEMS)


def list_equipment(project: ProjectData, department: Optional[str] = None) -> List[EquipmentItem]:
    if not department:
        return list(project.equipment)
    return [e for e in project.equipment if e.department == department]


def find_by_name(equipment: List[EquipmentItem], name: str) -> Optional[EquipmentItem]:
    key = (name or "").strip().lower()
    return next((e for e in equipment if e.name.strip().lower() == key), None)


def _parent_errors(catalog: Mapping[str, EquipmentItem], item_id: Optional[str], parent_id: Optional[str]) -> Dict[str, str]:
    if not parent_id:
        return {}
    parent = catalog.get(parent_id)
    if parent is None:
        return {"parent_id": "Parent item does not exist."}
    if parent_id == item_id:
        return {"parent_id": "An item cannot be its own parent."}
    if parent.parent_id:
        return {"parent_id": "Parent item is itself a sub-item (single level only)."}
    if item_id and any(e.parent_id == item_id for e in catalog.values()):
        return {"parent_id": "Item has sub-items and cannot become a sub-item."}
    return {}


def _validated_fields(data: Mapping, *, require_code: bool) -> Tuple[dict, Dict[str, str]]:
    errors = {}
    code = clean_str(data.get("code")) or ""
    name = clean_str(data.get("name"))
    unit = clean_str(data.get("unit"))
    department = clean_str(data.get("department"))
    price = parse_price(data.get("price"))

    if require_code and not code:
        errors["code"] = "Code is required."
    if not name:
        errors["name"] = "Name is required."
    if not unit:
        errors["unit"] = "Unit is required."
    if not department:
        errors["department"] = "Department is required."
    if price is None:
        errors["price"] = "Price must be a non-negative number."

    fields = dict(code=code, name=name, unit=unit, department=department, price=price,
                  parent_id=clean_str(data.get("parent_id") or data.get("parentId")))
    return fields, errors


def add_equipment(project: ProjectData, data: Mapping) -> Tuple[ProjectData, EquipmentItem]:
    fields, errors = _validated_fields(data, require_code=True)
    errors.update(_parent_errors(project.catalog(), None, fields["parent_id"]))
    if errors:
        raise ValidationError("Invalid equipment.", errors)

    item = EquipmentItem(id=new_id(), **fields)
    equipment = sort_equipment([*project.equipment, item])
    logger.info("equipment added", extra={"item_id": item.id, "department": item.department})
    return replace(project, equipment=equipment), item


def update_equipment(project: ProjectData, item_id: str, data: Mapping) -> Tuple[ProjectData, EquipmentItem]:
    catalog = project.catalog()
    existing = catalog.get(item_id)
    if existing is None:
        raise NotFoundError(f"Equipment {item_id} not found")

    # legacy rows may carry no code; only insist when one was set before
    fields, errors = _validated_fields(data, require_code=bool(existing.code))
    errors.update(_parent_errors(catalog, item_id, fields["parent_id"]))
    if errors:
        raise ValidationError("Invalid equipment.", errors)

    item = replace(existing, **fields)
    equipment = sort_equipment(item if e.id == item_id else e for e in project.equipment)
    return replace(project, equipment=equipment), item


def _prune_jobs(project: ProjectData, keep_ids) -> list:
    jobs = []
    for job in project.jobs:
        if all(k in keep_ids for k in job.items):
            jobs.append(job)
        else:
            jobs.append(replace(job, items={k: v for k, v in job.items.items() if k in keep_ids}))
    return jobs


def delete_equipment(project: ProjectData, item_id: str) -> ProjectData:
    """Remove an item, drop it from every job and detach its sub-items."""
    if item_id not in project.catalog():
        raise NotFoundError(f"Equipment {item_id} not found")

    equipment = [
        replace(e, parent_id=None) if e.parent_id == item_id else e
        for e in project.equipment
        if e.id != item_id
    ]
    keep = {e.id for e in equipment}
    logger.info("equipment deleted", extra={"item_id": item_id})
    return replace(project, equipment=equipment, jobs=_prune_jobs(project, keep))


def replace_catalog(project: ProjectData, equipment: List[EquipmentItem]) -> ProjectData:
    equipment = sort_equipment(equipment)
    keep = {e.id for e in equipment}
    return replace(project, equipment=equipment, jobs=_prune_jobs(project, keep))


def restore_defaults(project: ProjectData) -> ProjectData:
    """Back to the built-in catalog; job lines for items that vanish are dropped."""
    return replace_catalog(project, initial_catalog())
