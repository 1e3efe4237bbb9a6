from io import BytesIO

from flask import jsonify, render_template, request, send_file
from weasyprint import HTML

from quotation.services import store
from quotation.services.calculations import summarize
from quotation.services.consolidation import consolidate
from quotation.services.exports import (
    export_filename,
    quotation_print_context,
    quotation_workbook,
    usage_workbook,
)
from quotation.services.project_info import update_info
from . import bp

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

def _title(data):
    return data.client_info.project or store.current_project_name() or "ใบเสนอราคา"

@bp.get("/summary.json")
def summary_json():
    """Per-job, per-department and grand totals. Lists keep display order."""
    data, _ = store.load_workspace()
    summary = summarize(data.jobs, data.catalog())
    departments = [
        {"department": dep, **row}
        for dep, row in summary["departments"].items()
    ]
    jobs = [summary["jobs"][j.id] for j in data.jobs]
    return jsonify(ok=True, jobs=jobs, departments=departments, totals=summary["totals"])

@bp.get("/lines.json")
def lines_json():
    department = (request.args.get("department") or "").strip() or None
    data, _ = store.load_workspace()
    blocks = consolidate(data.jobs, data.catalog(), department)
    return jsonify(ok=True, departments=[b.to_dict() for b in blocks])

@bp.get("/info")
def get_info():
    data, _ = store.load_workspace()
    return jsonify(ok=True, companyInfo=data.company_info.to_dict(), clientInfo=data.client_info.to_dict())

@bp.put("/info")
def put_info():
    payload = request.get_json(silent=True) or {}
    company = payload.get("companyInfo")
    client = payload.get("clientInfo")
    if (company is not None and not isinstance(company, dict)) or (client is not None and not isinstance(client, dict)):
        return jsonify({"ok": False, "errors": {"__all__": "companyInfo/clientInfo must be objects"}}), 400
    data = store.update_workspace(lambda d: update_info(d, company, client))
    return jsonify(ok=True, companyInfo=data.company_info.to_dict(), clientInfo=data.client_info.to_dict())

@bp.get("/export/quotation.xlsx")
def export_quotation_xlsx():
    data, _ = store.load_workspace()
    return send_file(
        BytesIO(quotation_workbook(data, _title(data))),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=export_filename("quotation", store.current_project_name(), "xlsx"),
    )

@bp.get("/export/usage.xlsx")
def export_usage_xlsx():
    data, _ = store.load_workspace()
    return send_file(
        BytesIO(usage_workbook(data, _title(data))),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=export_filename("equipment-summary", store.current_project_name(), "xlsx"),
    )

@bp.get("/export/quotation.pdf")
def export_quotation_pdf():
    data, _ = store.load_workspace()
    html = render_template("exports/quotation_pdf.html", **quotation_print_context(data, _title(data)))
    pdf_bytes = HTML(string=html, base_url=request.host_url).write_pdf()
    return send_file(
        BytesIO(pdf_bytes),
        mimetype="application/pdf",
        as_attachment=False,
        download_name=export_filename("quotation", store.current_project_name(), "pdf"),
    )
