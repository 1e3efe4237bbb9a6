"""
Job ledger operations.

Every function takes the current ProjectData and returns a new one; inputs
are never mutated. Validation failures raise ValidationError before any
change is made.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Dict, Mapping, Optional, Tuple

from quotation.constants import (
    ASSET_TYPES,
    ASSET_UTILITY,
    INVESTMENT_COFUNDED,
    INVESTMENT_TYPES,
    INVESTMENT_UTILITY,
)
from quotation.domain import ItemQuantities, Job, ProjectData
from quotation.services.breakdown import apply_breakdown
from quotation.services.errors import NotFoundError, ValidationError
from quotation.utils.helpers import safe_float, safe_int
from quotation.utils.validators import clean_str

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def _classification_errors(investment: str, asset: str) -> Dict[str, str]:
    errors = {}
    if investment not in INVESTMENT_TYPES:
        errors["investment"] = "Unknown investment type."
    if asset not in ASSET_TYPES:
        errors["asset"] = "Unknown asset type."
    if not errors and investment in (INVESTMENT_UTILITY, INVESTMENT_COFUNDED) and asset != ASSET_UTILITY:
        errors["asset"] = "Utility-funded and co-funded jobs must be utility-owned."
    return errors


def _parse_margin(value) -> float:
    margin = safe_float(value, -1)
    if margin < 0:
        raise ValidationError("Profit margin must be a non-negative number.", {"profit_margin": "must be >= 0"})
    return margin


def _parse_quantities(install=0, remove=0, reuse=0) -> ItemQuantities:
    errors = {}
    counts = {}
    for key, raw in (("install", install), ("remove", remove), ("reuse", reuse)):
        n = safe_int(raw, -1) if raw not in (None, "") else 0
        if n < 0 or safe_float(raw, 0) != n:
            errors[key] = "must be a non-negative integer"
        counts[key] = n
    if errors:
        raise ValidationError("Invalid quantity.", errors)
    return ItemQuantities(**counts)


def get_job(project: ProjectData, job_id: str) -> Job:
    job = project.find_job(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


def _replace_job(project: ProjectData, job: Job) -> ProjectData:
    return replace(project, jobs=[job if j.id == job.id else j for j in project.jobs])


def create_job(
    project: ProjectData,
    *,
    name: str,
    department: str,
    investment: str,
    asset: str,
    profit_margin=None,
) -> Tuple[ProjectData, Job]:
    errors = {}
    name = clean_str(name)
    department = clean_str(department)
    if not name:
        errors["name"] = "Job name is required."
    if not department:
        errors["department"] = "Department is required."
    errors.update(_classification_errors(investment, asset))
    if errors:
        raise ValidationError("Invalid job.", errors)

    job = Job(id=new_id(), name=name, department=department, investment=investment, asset=asset)
    if profit_margin not in (None, ""):
        if not job.is_profit_eligible:
            raise ValidationError(
                "Profit applies only to customer-funded, customer-owned jobs.",
                {"profit_margin": "not allowed for this classification"},
            )
        job = replace(job, profit_margin=_parse_margin(profit_margin))

    logger.info("job created", extra={"job_id": job.id, "department": department})
    return replace(project, jobs=[*project.jobs, job]), job


def delete_job(project: ProjectData, job_id: str) -> ProjectData:
    get_job(project, job_id)
    return replace(project, jobs=[j for j in project.jobs if j.id != job_id])


def rename_job(project: ProjectData, job_id: str, name: str) -> ProjectData:
    job = get_job(project, job_id)
    name = clean_str(name)
    if not name:
        raise ValidationError("Job name is required.", {"name": "required"})
    return _replace_job(project, replace(job, name=name))


def reclassify_job(project: ProjectData, job_id: str, investment: str, asset: str) -> ProjectData:
    job = get_job(project, job_id)
    errors = _classification_errors(investment, asset)
    if errors:
        raise ValidationError("Invalid classification.", errors)
    updated = replace(job, investment=investment, asset=asset)
    if not updated.is_profit_eligible:
        updated = replace(updated, profit_margin=None)
    return _replace_job(project, updated)


def set_profit_margin(project: ProjectData, job_id: str, margin) -> ProjectData:
    job = get_job(project, job_id)
    if not job.is_profit_eligible:
        raise ValidationError(
            "Profit applies only to customer-funded, customer-owned jobs.",
            {"profit_margin": "not allowed for this classification"},
        )
    return _replace_job(project, replace(job, profit_margin=_parse_margin(margin)))


def apply_global_profit(project: ProjectData, margin) -> Tuple[ProjectData, int]:
    """Set the same margin on every profit-eligible job; returns (project, jobs touched)."""
    value = _parse_margin(margin)
    touched = 0
    jobs = []
    for job in project.jobs:
        if job.is_profit_eligible:
            job = replace(job, profit_margin=value)
            touched += 1
        jobs.append(job)
    return replace(project, jobs=jobs), touched


def add_item(project: ProjectData, job_id: str, item_id: str, *, install=0, remove=0, reuse=0) -> ProjectData:
    """Add quantities to a job line (merged with what is already there)."""
    job = get_job(project, job_id)
    item = project.catalog().get(item_id)
    if item is None:
        raise NotFoundError(f"Equipment {item_id} not found")
    if item.department != job.department:
        raise ValidationError("Equipment belongs to another department.", {"item_id": "department mismatch"})

    added = _parse_quantities(install, remove, reuse)
    if added.is_empty:
        raise ValidationError("Enter at least one positive quantity.", {"install": "quantity must be positive"})

    current = job.items.get(item_id) or ItemQuantities()
    merged = ItemQuantities(
        install=current.install + added.install,
        remove=current.remove + added.remove,
        reuse=current.reuse + added.reuse,
    )
    return _replace_job(project, replace(job, items={**job.items, item_id: merged}))


def set_item_quantities(project: ProjectData, job_id: str, item_id: str, *, install=0, remove=0, reuse=0) -> ProjectData:
    """Overwrite a job line; all-zero quantities drop the line."""
    job = get_job(project, job_id)
    qty = _parse_quantities(install, remove, reuse)
    items = dict(job.items)
    if qty.is_empty:
        items.pop(item_id, None)
    else:
        if item_id not in project.catalog():
            raise NotFoundError(f"Equipment {item_id} not found")
        items[item_id] = qty
    return _replace_job(project, replace(job, items=items))


def remove_item(project: ProjectData, job_id: str, item_id: str) -> ProjectData:
    job = get_job(project, job_id)
    if item_id not in job.items:
        raise NotFoundError(f"Equipment {item_id} is not on job {job_id}")
    items = {k: v for k, v in job.items.items() if k != item_id}
    return _replace_job(project, replace(job, items=items))


def breakdown_item(project: ProjectData, job_id: str, parent_id: str, allocations: Mapping[str, object]) -> ProjectData:
    job = get_job(project, job_id)
    return _replace_job(project, apply_breakdown(job, project.catalog(), parent_id, allocations))


def jobs_for_department(project: ProjectData, department: Optional[str]):
    if not department:
        return list(project.jobs)
    return [j for j in project.jobs if j.department == department]
