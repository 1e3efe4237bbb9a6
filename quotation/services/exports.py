"""
Workbook exports. Layout is presentation only; every money figure in the
totals block comes straight from calculations.summarize().
"""
from __future__ import annotations

import re
from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from quotation.constants import VAT_RATE
from quotation.domain import EquipmentItem, ProjectData
from quotation.services.calculations import job_lines, summarize
from quotation.services.consolidation import consolidate, usage_summary

MONEY = "#,##0.00"
BOLD = Font(bold=True)

QUOTATION_HEADERS = ["ลำดับ", "รหัสพัสดุ", "รายการ", "หน่วย", "ติดตั้ง", "รื้อถอน", "นำกลับมาใช้", "ราคาต่อหน่วย", "ราคารวม"]
QUOTATION_WIDTHS = [6, 16, 48, 10, 10, 10, 12, 15, 15]
USAGE_HEADERS = QUOTATION_HEADERS[:7]
CATALOG_HEADERS = ["code", "name", "price", "unit", "department"]


def export_filename(prefix: str, name: Optional[str], ext: str) -> str:
    stamp = datetime.now().strftime("%Y-%m-%d")
    safe = re.sub(r"[\s()/\\]+", "_", (name or "").strip()) or "project"
    return f"{prefix}-{safe}-{stamp}.{ext}"


def _to_bytes(wb: Workbook) -> bytes:
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _title(ws, text: str, width: int) -> None:
    ws.append([text])
    ws.merge_cells(start_row=ws.max_row, start_column=1, end_row=ws.max_row, end_column=width)
    ws.cell(row=ws.max_row, column=1).font = Font(bold=True, size=14)
    ws.append([])


def _header(ws, headers: List[str], widths: List[int]) -> None:
    ws.append(headers)
    for idx, w in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = w
        ws.cell(row=ws.max_row, column=idx).font = BOLD
        ws.cell(row=ws.max_row, column=idx).alignment = Alignment(horizontal="center")


def _group_row(ws, text: str, width: int) -> None:
    ws.append([text])
    ws.merge_cells(start_row=ws.max_row, start_column=1, end_row=ws.max_row, end_column=width)
    ws.cell(row=ws.max_row, column=1).font = BOLD


def _label_value(ws, label: str, value: float, bold: bool = False) -> None:
    ws.append([None] * 7 + [label, value])
    ws.cell(row=ws.max_row, column=9).number_format = MONEY
    if bold:
        ws.cell(row=ws.max_row, column=8).font = BOLD
        ws.cell(row=ws.max_row, column=9).font = BOLD


def quotation_workbook(project: ProjectData, title: str) -> bytes:
    """Department → job → item lines, then the totals block."""
    catalog = project.catalog()
    summary = summarize(project.jobs, catalog)
    width = len(QUOTATION_HEADERS)

    wb = Workbook()
    ws = wb.active
    ws.title = "ใบเสนอราคา"
    _title(ws, f"ใบเสนอราคา: {title}", width)
    _header(ws, QUOTATION_HEADERS, QUOTATION_WIDTHS)

    seq = 1
    for dep, dep_totals in summary["departments"].items():
        _group_row(ws, dep, width)
        for job in (project.find_job(jid) for jid in dep_totals["job_ids"]):
            cost = summary["jobs"][job.id]
            _group_row(ws, f"{job.name} (เงินลงทุน: {job.investment} / ทรัพย์สิน: {job.asset})", width)
            for line in job_lines(job, catalog):
                item = line["item"]
                ws.append([
                    seq, item.code, item.name, item.unit,
                    line["install"] or None, line["remove"] or None, line["reuse"] or None,
                    item.price, line["line_total"],
                ])
                ws.cell(row=ws.max_row, column=8).number_format = MONEY
                ws.cell(row=ws.max_row, column=9).number_format = MONEY
                seq += 1
            _label_value(ws, f"ราคาทุน {job.name}", cost["base_cost"])
            if cost["profit"]:
                _label_value(ws, f"กำไร {job.profit_margin or 0:g}%", cost["profit"])
            _label_value(ws, f"ยอดเรียกเก็บ {job.name}", cost["total"])
        _label_value(ws, f"รวมยอด {dep}", dep_totals["subtotal"], bold=True)
        ws.append([])

    totals = summary["totals"]
    ws.append([])
    _label_value(ws, "ราคาทุน", totals["sub_total"], bold=True)
    _label_value(ws, "กำไรรวม", totals["profit_amount"], bold=True)
    _label_value(ws, "รวมก่อน VAT", totals["total_before_vat"], bold=True)
    _label_value(ws, f"VAT ({VAT_RATE * 100:g}%)", totals["vat_amount"], bold=True)
    _label_value(ws, "ยอดรวมสุทธิ", totals["grand_total"], bold=True)
    return _to_bytes(wb)


def usage_workbook(project: ProjectData, title: str) -> bytes:
    """Flat equipment usage per department; no money columns."""
    width = len(USAGE_HEADERS)
    wb = Workbook()
    ws = wb.active
    ws.title = "สรุปอุปกรณ์"
    _title(ws, f"สรุปรายการอุปกรณ์: {title}", width)
    _header(ws, USAGE_HEADERS, QUOTATION_WIDTHS[:width])

    seq = 1
    for block in usage_summary(project.jobs, project.catalog()):
        _group_row(ws, block["department"], width)
        for row in block["items"]:
            item = row["item"]
            ws.append([
                seq, item.code, item.name, item.unit,
                row["install"] or None, row["remove"] or None, row["reuse"] or None,
            ])
            seq += 1
        ws.append([])
    return _to_bytes(wb)


def catalog_workbook(equipment: Iterable[EquipmentItem]) -> bytes:
    """Catalog in the importer's own column layout, so it round-trips."""
    wb = Workbook()
    ws = wb.active
    ws.title = "รายการอุปกรณ์"
    ws.append(CATALOG_HEADERS)
    for idx, w in enumerate([16, 50, 15, 10, 25], start=1):
        ws.column_dimensions[get_column_letter(idx)].width = w
    for e in equipment:
        ws.append([e.code, e.name, e.price, e.unit, e.department])
    return _to_bytes(wb)


def quotation_print_context(project: ProjectData, title: str) -> dict:
    """Data for the printable quotation template."""
    catalog = project.catalog()
    summary = summarize(project.jobs, catalog)
    return {
        "title": title,
        "company": project.company_info,
        "client": project.client_info,
        "departments": consolidate(project.jobs, catalog),
        "department_totals": summary["departments"],
        "totals": summary["totals"],
        "vat_percent": f"{VAT_RATE * 100:g}",
        "printed_at": datetime.now().strftime("%d/%m/%Y"),
    }
