"""Ledger export to CSV and Excel."""

import csv
import io
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font

from sfms.core.enums import ExportFormat, FeeView
from sfms.core.fees import status_label

from .schemas import LedgerEntry, LedgerResponse

SHEET_NAME = "Master Ledger"

MEDIA_TYPES = {
    ExportFormat.csv: "text/csv; charset=utf-8",
    ExportFormat.xlsx: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def export_headers(view: FeeView) -> List[str]:
    return [
        "Student Name",
        "Class",
        "Roll No",
        "Due Fees" if view == FeeView.due else "Total Fees",
        "Paid",
        "Balance",
        "Status",
        "Last Payment Date",
        "Last Payment Amount",
        "Last Payment Mode",
        "Academic Year",
        "Last Receipt No",
    ]


def _money(val) -> str:
    return f"{val:.2f}"


def _row(entry: LedgerEntry) -> List[str]:
    last = entry.last_payment
    return [
        entry.name,
        entry.class_name,
        entry.roll_no or "-",
        _money(entry.fee_total),
        _money(entry.total_paid),
        _money(entry.balance),
        status_label(entry.status),
        last.date.date().isoformat() if last else "-",
        _money(last.amount_paid) if last else "-",
        last.mode_of_payment.value.replace("_", " ") if last else "-",
        entry.academic_year or "-",
        last.receipt_number if last else "-",
    ]


def export_filename(ledger: LedgerResponse, fmt: ExportFormat) -> str:
    scope = "class" if ledger.class_id else "school"
    class_part = str(ledger.class_id) if ledger.class_id else "all"
    return f"master-ledger-{scope}-{class_part}-{ledger.view.value}-{ledger.as_of.isoformat()}.{fmt.value}"


def build_csv(ledger: LedgerResponse) -> bytes:
    """Header row plus one row per student; fields with commas or quotes are double-quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(export_headers(ledger.view))
    for entry in ledger.entries:
        writer.writerow(_row(entry))
    return buf.getvalue().encode("utf-8")


def build_xlsx(ledger: LedgerResponse) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    ws.append(export_headers(ledger.view))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for entry in ledger.entries:
        row = _row(entry)
        # Amount columns as numbers so they can be summed in Excel
        row[3], row[4], row[5] = entry.fee_total, entry.total_paid, entry.balance
        if entry.last_payment:
            row[8] = entry.last_payment.amount_paid
        ws.append(row)
    ws.freeze_panes = "A2"

    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


def build_export(ledger: LedgerResponse, fmt: ExportFormat) -> bytes:
    if fmt == ExportFormat.xlsx:
        return build_xlsx(ledger)
    return build_csv(ledger)
