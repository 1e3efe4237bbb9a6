from flask import current_app, jsonify, request

from quotation.services import store
from quotation.services.calculations import calc_job, job_lines
from quotation.services.jobs import (
    add_item,
    apply_global_profit,
    breakdown_item,
    create_job,
    delete_job,
    get_job,
    jobs_for_department,
    reclassify_job,
    remove_item,
    rename_job,
    set_item_quantities,
    set_profit_margin,
)
from . import bp

def _job_json(job, catalog, with_lines=False):
    d = job.to_dict()
    d["cost"] = calc_job(job, catalog)
    if with_lines:
        d["lines"] = [
            {
                "id": li["item"].id,
                "code": li["item"].code,
                "name": li["item"].name,
                "unit": li["item"].unit,
                "parentId": li["item"].parent_id,
                "install": li["install"],
                "remove": li["remove"],
                "reuse": li["reuse"],
                "price": li["price"],
                "line_total": li["line_total"],
            }
            for li in job_lines(job, catalog)
        ]
    return d

def _respond(data, job_id, status=200):
    job = get_job(data, job_id)
    return jsonify(ok=True, job=_job_json(job, data.catalog(), with_lines=True)), status

def _quantities(payload):
    return dict(
        install=payload.get("install", 0),
        remove=payload.get("remove", 0),
        reuse=payload.get("reuse", 0),
    )

@bp.get("/")
def list_json():
    department = (request.args.get("department") or "").strip() or None
    data, _ = store.load_workspace()
    catalog = data.catalog()
    rows = [_job_json(j, catalog) for j in jobs_for_department(data, department)]
    return jsonify(ok=True, rows=rows)

@bp.post("/")
def create():
    payload = request.get_json(silent=True) or {}
    data, current_id = store.load_workspace()
    data, job = create_job(
        data,
        name=payload.get("name"),
        department=payload.get("department") or current_app.config.get("DEFAULT_DEPARTMENT"),
        investment=payload.get("investment"),
        asset=payload.get("asset"),
        profit_margin=payload.get("profit_margin"),
    )
    store.save_workspace(data, current_id)
    return _respond(data, job.id, 201)

@bp.get("/<job_id>")
def detail(job_id: str):
    data, _ = store.load_workspace()
    return _respond(data, job_id)

@bp.delete("/<job_id>")
def delete(job_id: str):
    store.update_workspace(lambda d: delete_job(d, job_id))
    return jsonify(ok=True, id=job_id)

@bp.put("/<job_id>/name")
def rename(job_id: str):
    payload = request.get_json(silent=True) or {}
    data = store.update_workspace(lambda d: rename_job(d, job_id, payload.get("name")))
    return _respond(data, job_id)

@bp.put("/<job_id>/classification")
def reclassify(job_id: str):
    payload = request.get_json(silent=True) or {}
    data = store.update_workspace(
        lambda d: reclassify_job(d, job_id, payload.get("investment"), payload.get("asset"))
    )
    return _respond(data, job_id)

@bp.put("/<job_id>/profit")
def profit(job_id: str):
    payload = request.get_json(silent=True) or {}
    data = store.update_workspace(lambda d: set_profit_margin(d, job_id, payload.get("profit_margin")))
    return _respond(data, job_id)

@bp.post("/global-profit")
def global_profit():
    """Same margin on every customer-funded, customer-owned job."""
    payload = request.get_json(silent=True) or {}
    data, current_id = store.load_workspace()
    data, touched = apply_global_profit(data, payload.get("profit_margin"))
    store.save_workspace(data, current_id)
    return jsonify(ok=True, updated=touched)

@bp.post("/<job_id>/items")
def add(job_id: str):
    payload = request.get_json(silent=True) or {}
    item_id = str(payload.get("item_id") or "")
    data = store.update_workspace(lambda d: add_item(d, job_id, item_id, **_quantities(payload)))
    return _respond(data, job_id)

@bp.put("/<job_id>/items/<item_id>")
def set_quantities(job_id: str, item_id: str):
    payload = request.get_json(silent=True) or {}
    data = store.update_workspace(lambda d: set_item_quantities(d, job_id, item_id, **_quantities(payload)))
    return _respond(data, job_id)

@bp.delete("/<job_id>/items/<item_id>")
def remove(job_id: str, item_id: str):
    data = store.update_workspace(lambda d: remove_item(d, job_id, item_id))
    return _respond(data, job_id)

@bp.post("/<job_id>/items/<parent_id>/breakdown")
def breakdown(job_id: str, parent_id: str):
    """Body: {"allocations": {child_id: quantity, ...}}"""
    payload = request.get_json(silent=True) or {}
    allocations = payload.get("allocations")
    if not isinstance(allocations, dict):
        return jsonify({"ok": False, "errors": {"allocations": "Expected an object of child id -> quantity."}}), 400
    data = store.update_workspace(lambda d: breakdown_item(d, job_id, parent_id, allocations))
    return _respond(data, job_id)
