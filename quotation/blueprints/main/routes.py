from flask import current_app, jsonify

from quotation.constants import ASSET_TYPES, DEPARTMENTS, INVESTMENT_TYPES, VAT_RATE
from quotation.services import store
from quotation.services.departments import order_departments
from . import bp

@bp.get("/")
def home():
    """Landing JSON: what the client needs to render its pickers."""
    data, current_id = store.load_workspace()
    return jsonify(
        ok=True,
        site_name=current_app.config.get("SITE_NAME"),
        current_project_id=current_id,
        current_project_name=store.current_project_name(),
        departments=order_departments([*DEPARTMENTS, *(e.department for e in data.equipment)]),
        default_department=current_app.config.get("DEFAULT_DEPARTMENT"),
        investment_types=list(INVESTMENT_TYPES),
        asset_types=list(ASSET_TYPES),
        vat_rate=VAT_RATE,
        counts={"equipment": len(data.equipment), "jobs": len(data.jobs)},
    )

@bp.get("/healthz")
def healthz():
    return {"status": "ok"}, 200
