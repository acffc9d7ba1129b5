"""Barcode and invoice number generators."""
import random
from datetime import datetime
from typing import Optional


def generate_barcode(now: Optional[datetime] = None) -> str:
    """
    13-digit catalog barcode: YYMMDD + 4 random digits + last 3 digits of the
    millisecond clock.

    Not globally unique. At high volume two entries created the same day can
    collide; the catalog's unique constraint rejects the second one.
    """
    now = now or datetime.now()
    rand = random.randint(0, 9999)
    millis = int(now.timestamp() * 1000)
    return f"{now:%y%m%d}{rand:04d}{str(millis)[-3:]}"


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """Purchase invoice number: INV-<yyyymm>-<4 random digits>."""
    now = now or datetime.now()
    return f"INV-{now:%Y%m}-{random.randint(0, 9999):04d}"

