"""Spreadsheet export for the inventory, sales and financial reports."""
import csv
import io
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from openpyxl import Workbook

from pharmacare.core.exceptions import ValidationError
from pharmacare.services.report_service import revenue_by_date, sale_date

REPORT_TYPES = ("inventory", "sales", "financial")
EXPORT_FORMATS = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
}


def _dollars(value) -> str:
    return f"${value}"


def prepare_inventory_rows(medicines: Iterable) -> List[Dict]:
    return [
        {
            "Medicine Name": m.name,
            "Manufacturer": m.manufacturer,
            "Category": m.category,
            "Stock": m.stock,
            "Price": _dollars(m.price),
            "Expiry Date": m.expiry_date.isoformat() if m.expiry_date else "",
        }
        for m in medicines
    ]


def prepare_sales_rows(sales: Iterable, medicines: Sequence) -> List[Dict]:
    by_id = {m.id: m for m in medicines}
    rows = []
    for s in sales:
        medicine = by_id.get(s.medicine_id)
        d = sale_date(s)
        rows.append({
            "Date": d.isoformat() if d else "",
            "Medicine": medicine.name if medicine else "Unknown",
            "Quantity": s.quantity,
            "Total Amount": _dollars(s.total_amount),
            "Manufacturer": medicine.manufacturer if medicine else "Unknown",
        })
    return rows


def prepare_financial_rows(sales: Sequence) -> List[Dict]:
    """One row per distinct sale date."""
    counts: Dict[Optional[date], int] = {}
    for s in sales:
        d = sale_date(s)
        counts[d] = counts.get(d, 0) + 1
    return [
        {
            "Date": d.isoformat() if d else "",
            "Revenue": _dollars(amount),
            "Transactions": counts[d],
        }
        for d, amount in revenue_by_date(sales).items()
    ]


def prepare_rows(report_type: str, medicines: Sequence, sales: Sequence) -> List[Dict]:
    if report_type == "inventory":
        return prepare_inventory_rows(medicines)
    if report_type == "sales":
        return prepare_sales_rows(sales, medicines)
    if report_type == "financial":
        return prepare_financial_rows(sales)
    raise ValidationError(f"Report type must be one of {', '.join(REPORT_TYPES)}")


def export_filename(report_type: str, fmt: str, on: Optional[date] = None) -> str:
    """<reportType>-report-<isoDate>.<ext>"""
    on = on or date.today()
    return f"{report_type}-report-{on.isoformat()}.{fmt}"


def render(rows: List[Dict], fmt: str) -> bytes:
    """Serialize flat rows; header comes from the first row's keys."""
    if fmt not in EXPORT_FORMATS:
        raise ValidationError(f"Format must be one of {', '.join(EXPORT_FORMATS)}")
    headers = list(rows[0].keys()) if rows else []

    if fmt == "csv":
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=headers)
        if headers:
            writer.writeheader()
            writer.writerows(rows)
        return output.getvalue().encode("utf-8")

    wb = Workbook()
    ws = wb.active
    ws.title = "Report"
    if headers:
        ws.append(headers)
        for row in rows:
            ws.append([row.get(h) for h in headers])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
