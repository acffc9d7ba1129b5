"""
Spreadsheet export tests: column mappings, csv/xlsx output and file names.
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from openpyxl import load_workbook

from pharmacare.core.exceptions import ValidationError
from pharmacare.services import export_service

MEDICINES = [
    SimpleNamespace(id=1, name="Paracetamol", manufacturer="PharmaCorp", category="Pain Relief",
                    stock=150, price=Decimal("9.99"), expiry_date=date(2025, 12, 31)),
    SimpleNamespace(id=2, name="Amoxicillin", manufacturer="MediLabs", category="Antibiotics",
                    stock=80, price=Decimal("24.99"), expiry_date=date(2025, 6, 30)),
]

SALES = [
    SimpleNamespace(medicine_id=1, quantity=5, total_amount=Decimal("49.95"), created_at=datetime(2024, 3, 15, 10, 0)),
    SimpleNamespace(medicine_id=2, quantity=2, total_amount=Decimal("49.98"), created_at=datetime(2024, 3, 15, 11, 0)),
    SimpleNamespace(medicine_id=99, quantity=1, total_amount=Decimal("5.00"), created_at=datetime(2024, 3, 16, 9, 0)),
]


def test_inventory_rows():
    rows = export_service.prepare_inventory_rows(MEDICINES)
    assert rows[0] == {
        "Medicine Name": "Paracetamol",
        "Manufacturer": "PharmaCorp",
        "Category": "Pain Relief",
        "Stock": 150,
        "Price": "$9.99",
        "Expiry Date": "2025-12-31",
    }
    assert len(rows) == len(MEDICINES)


def test_sales_rows_mark_unknown_medicine():
    rows = export_service.prepare_sales_rows(SALES, MEDICINES)
    assert len(rows) == len(SALES)
    assert list(rows[0]) == ["Date", "Medicine", "Quantity", "Total Amount", "Manufacturer"]
    assert rows[1]["Total Amount"] == "$49.98"
    assert rows[2]["Medicine"] == "Unknown"
    assert rows[2]["Manufacturer"] == "Unknown"


def test_financial_rows_one_per_date():
    rows = export_service.prepare_financial_rows(SALES)
    assert rows == [
        {"Date": "2024-03-15", "Revenue": "$99.93", "Transactions": 2},
        {"Date": "2024-03-16", "Revenue": "$5.00", "Transactions": 1},
    ]


def test_unknown_report_type():
    with pytest.raises(ValidationError):
        export_service.prepare_rows("payroll", MEDICINES, SALES)


def test_render_csv():
    rows = export_service.prepare_rows("inventory", MEDICINES, SALES)
    content = export_service.render(rows, "csv").decode("utf-8")

    parsed = list(csv.DictReader(io.StringIO(content)))
    assert [r["Medicine Name"] for r in parsed] == ["Paracetamol", "Amoxicillin"]
    assert parsed[1]["Price"] == "$24.99"


def test_render_xlsx():
    rows = export_service.prepare_rows("sales", MEDICINES, SALES)
    content = export_service.render(rows, "xlsx")

    sheet = load_workbook(io.BytesIO(content)).active
    values = list(sheet.iter_rows(values_only=True))
    assert values[0] == ("Date", "Medicine", "Quantity", "Total Amount", "Manufacturer")
    assert values[1] == ("2024-03-15", "Paracetamol", 5, "$49.95", "PharmaCorp")
    assert len(values) == len(SALES) + 1


def test_render_empty_and_bad_format():
    assert export_service.render([], "csv") == b""
    with pytest.raises(ValidationError):
        export_service.render([], "pdf")


def test_export_filename():
    assert export_service.export_filename("financial", "xlsx", on=date(2024, 3, 15)) == \
        "financial-report-2024-03-15.xlsx"
