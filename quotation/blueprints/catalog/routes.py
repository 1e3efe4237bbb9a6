from io import BytesIO

from flask import current_app, jsonify, request, send_file

from quotation.services import store
from quotation.services.catalog import (
    add_equipment,
    delete_equipment,
    list_equipment,
    replace_catalog,
    restore_defaults,
    update_equipment,
)
from quotation.services.exports import catalog_workbook, export_filename
from quotation.services.importer import import_equipment_sheet
from . import bp

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ALLOWED_UPLOADS = (".xlsx",)

@bp.get("/")
def list_json():
    department = (request.args.get("department") or "").strip() or None
    data, _ = store.load_workspace()
    rows = [e.to_dict() for e in list_equipment(data, department)]
    return jsonify(ok=True, rows=rows)

@bp.post("/")
def create():
    payload = request.get_json(silent=True) or {}
    data, current_id = store.load_workspace()
    data, item = add_equipment(data, payload)
    store.save_workspace(data, current_id)
    return jsonify(ok=True, item=item.to_dict()), 201

@bp.put("/<item_id>")
def update(item_id: str):
    payload = request.get_json(silent=True) or {}
    data, current_id = store.load_workspace()
    data, item = update_equipment(data, item_id, payload)
    store.save_workspace(data, current_id)
    return jsonify(ok=True, item=item.to_dict())

@bp.delete("/<item_id>")
def delete(item_id: str):
    store.update_workspace(lambda d: delete_equipment(d, item_id))
    return jsonify(ok=True, id=item_id)

@bp.post("/import")
def import_xlsx():
    """Multipart upload (field ``file``); rows are merged by equipment name."""
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return jsonify({"ok": False, "errors": {"file": "Choose an .xlsx file to import."}}), 400
    if not upload.filename.lower().endswith(ALLOWED_UPLOADS):
        return jsonify({"ok": False, "errors": {"file": "Only .xlsx files are supported."}}), 400

    data, current_id = store.load_workspace()
    equipment, result = import_equipment_sheet(BytesIO(upload.read()), data.equipment)
    store.save_workspace(replace_catalog(data, equipment), current_id)
    current_app.logger.info("catalog import from %s", upload.filename)
    return jsonify(ok=True, result=result.to_dict())

@bp.get("/export.xlsx")
def export_xlsx():
    data, _ = store.load_workspace()
    return send_file(
        BytesIO(catalog_workbook(data.equipment)),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=export_filename("equipment-list", store.current_project_name(), "xlsx"),
    )

@bp.post("/restore-defaults")
def restore():
    data = store.update_workspace(restore_defaults)
    return jsonify(ok=True, count=len(data.equipment))
