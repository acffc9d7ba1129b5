"""Barcode and invoice number generator tests."""
import re
from datetime import datetime

from pharmacare.services.codes import generate_barcode, generate_invoice_number


def test_barcode_layout():
    now = datetime(2024, 3, 15, 12, 30, 45, 678000)
    code = generate_barcode(now)

    assert re.fullmatch(r"\d{13}", code)
    assert code.startswith("240315")
    assert code[-3:] == str(int(now.timestamp() * 1000))[-3:]


def test_barcode_default_clock():
    code = generate_barcode()
    assert re.fullmatch(r"\d{13}", code)
    assert code.startswith(datetime.now().strftime("%y%m"))


def test_invoice_number_format():
    number = generate_invoice_number(datetime(2024, 3, 15))
    assert re.fullmatch(r"INV-202403-\d{4}", number)
