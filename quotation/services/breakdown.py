from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Mapping

from quotation.domain import EquipmentItem, ItemQuantities, Job
from quotation.services.errors import BreakdownError
from quotation.utils.helpers import safe_float, safe_int

logger = logging.getLogger(__name__)


def _share(raw) -> int:
    # whole, non-bool counts only; anything else reads as -1
    if isinstance(raw, bool):
        return -1
    n = safe_int(raw, -1)
    if safe_float(raw, -1) != n:
        return -1
    return n


def children_of(parent_id: str, catalog: Mapping[str, EquipmentItem]) -> List[EquipmentItem]:
    return [e for e in catalog.values() if e.parent_id == parent_id]


def apply_breakdown(job: Job, catalog: Mapping[str, EquipmentItem], parent_id: str, allocations: Mapping[str, object]) -> Job:
    """
    Move the parent's install quantity onto its registered children.

    ``allocations`` maps child id -> share. Shares must add up to the parent's
    current install count exactly. Each child's install is incremented (not
    replaced); the parent keeps its remove/reuse counts. Returns a new Job.
    """
    parent_qty = job.items.get(parent_id)
    if parent_qty is None or parent_qty.install <= 0:
        raise BreakdownError("Parent item has no install quantity in this job.", {"parent_id": "nothing to break down"})

    child_ids = {c.id for c in children_of(parent_id, catalog)}
    if not child_ids:
        raise BreakdownError("Item has no registered sub-items.", {"parent_id": "no sub-items"})

    shares: Dict[str, int] = {}
    errors: Dict[str, str] = {}
    for child_id, raw in allocations.items():
        n = _share(raw)
        if child_id not in child_ids:
            errors[child_id] = "not a sub-item of this parent"
        elif n < 0:
            errors[child_id] = "quantity must be a non-negative integer"
        elif n > 0:
            shares[child_id] = n
    if errors:
        raise BreakdownError("Invalid breakdown allocation.", errors)

    allocated = sum(shares.values())
    if allocated != parent_qty.install:
        raise BreakdownError(
            f"Sub-item quantities add up to {allocated}, expected {parent_qty.install}.",
            {"allocations": f"must sum to {parent_qty.install}"},
        )

    items = dict(job.items)
    remaining = replace(parent_qty, install=0)
    if remaining.is_empty:
        del items[parent_id]
    else:
        items[parent_id] = remaining

    for child_id, n in shares.items():
        current = items.get(child_id) or ItemQuantities()
        items[child_id] = replace(current, install=current.install + n)

    logger.info("breakdown applied", extra={"job_id": job.id, "parent_id": parent_id, "quantity": allocated})
    return replace(job, items=items)
