"""
Reporting over already-loaded collections. Pure functions, no store access.

Medicines need .id, .name, .stock, .expiry_date, .price; sales need
.medicine_id, .quantity, .total_amount, .created_at. Both ORM rows and
plain objects work.
"""
import calendar
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from pharmacare.core.config import settings


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _amount(value) -> Decimal:
    return Decimal(str(value or 0))


def sale_date(sale) -> Optional[date]:
    return _as_date(getattr(sale, "created_at", None))


def low_stock(medicines: Iterable, threshold: Optional[int] = None) -> List:
    """Medicines with stock strictly below the threshold (default 100)."""
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return [m for m in medicines if m.stock < threshold]


def days_until_expiry(medicine, today: date) -> Optional[int]:
    expiry = _as_date(medicine.expiry_date)
    if expiry is None:
        return None
    return (expiry - today).days


def expiring_soon(medicines: Iterable, today: Optional[date] = None, days: Optional[int] = None) -> List:
    """Dashboard alert set: expiry within the next `days` days (default 5), already expired excluded."""
    today = today or date.today()
    days = settings.DASHBOARD_EXPIRY_DAYS if days is None else days
    result = []
    for m in medicines:
        remaining = days_until_expiry(m, today)
        if remaining is not None and 0 < remaining <= days:
            result.append(m)
    return result


def expiring_before(medicines: Iterable, today: Optional[date] = None, days: Optional[int] = None) -> List:
    """Inventory report flag: expiry before today + `days` (default 90), already expired included."""
    today = today or date.today()
    days = settings.INVENTORY_EXPIRY_DAYS if days is None else days
    cutoff = today + timedelta(days=days)
    return [m for m in medicines if _as_date(m.expiry_date) is not None and _as_date(m.expiry_date) < cutoff]


def total_revenue(sales: Iterable) -> Decimal:
    return sum((_amount(s.total_amount) for s in sales), Decimal("0"))


def revenue_by_date(sales: Iterable) -> "OrderedDict[date, Decimal]":
    """Summed sale totals per calendar day, oldest first."""
    buckets: Dict[date, Decimal] = {}
    for s in sales:
        d = sale_date(s)
        buckets[d] = buckets.get(d, Decimal("0")) + _amount(s.total_amount)
    return OrderedDict(sorted(buckets.items(), key=lambda kv: (kv[0] is None, kv[0] or date.min)))


def revenue_between(sales: Iterable, start: date, end: date) -> Decimal:
    """Precise revenue for start <= sale date <= end."""
    return sum(
        (_amount(s.total_amount) for s in sales if sale_date(s) and start <= sale_date(s) <= end),
        Decimal("0"),
    )


def sales_projection(sales: Sequence) -> Dict[str, Decimal]:
    """Approximate figures from a single period's sales.

    daily = sum / 7, weekly = sum, monthly = sum * 4. These are projections
    from whatever period was loaded, not period queries; use revenue_between
    for exact figures.
    """
    total = total_revenue(sales)
    return {
        "daily": (total / 7).quantize(Decimal("0.01")),
        "weekly": total,
        "monthly": total * 4,
    }


def quantity_sold(sales: Iterable) -> Dict[int, int]:
    totals: Dict[int, int] = {}
    for s in sales:
        totals[s.medicine_id] = totals.get(s.medicine_id, 0) + s.quantity
    return totals


def top_selling(medicines: Sequence, sales: Iterable, limit: Optional[int] = None) -> List[dict]:
    """Medicines by cumulative sold quantity, descending, first `limit` (default 5).

    Ties keep catalog order (stable sort). Medicines that never sold are left out.
    """
    limit = settings.TOP_SELLING_LIMIT if limit is None else limit
    sales = list(sales)
    sold = quantity_sold(sales)
    revenue: Dict[int, Decimal] = {}
    for s in sales:
        revenue[s.medicine_id] = revenue.get(s.medicine_id, Decimal("0")) + _amount(s.total_amount)
    ranked = sorted((m for m in medicines if sold.get(m.id, 0) > 0), key=lambda m: sold[m.id], reverse=True)
    return [
        {"medicine": m, "quantity_sold": sold[m.id], "revenue": revenue.get(m.id, Decimal("0"))}
        for m in ranked[:limit]
    ]


def period_start(range_name: str, today: Optional[date] = None) -> date:
    """Start of a named reporting range: week (7 days), month (1 month), year (1 year)."""
    today = today or date.today()
    if range_name == "week":
        return today - timedelta(days=7)
    if range_name == "month":
        year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
        return _clamp_day(year, month, today.day)
    if range_name == "year":
        return _clamp_day(today.year - 1, today.month, today.day)
    raise ValueError(f"Unknown range {range_name!r}")


def _clamp_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def dashboard_summary(medicines: Sequence, sales: Sequence, today: Optional[date] = None) -> dict:
    today = today or date.today()
    revenue = total_revenue(sales)
    return {
        "total_sales": revenue,
        "revenue": revenue,
        "sales_count": len(sales),
        "low_stock_count": len(low_stock(medicines)),
        "expiring_count": len(expiring_soon(medicines, today)),
        "weekly_revenue": revenue_between(sales, period_start("week", today), today),
        "monthly_revenue": revenue_between(sales, period_start("month", today), today),
        "projection": sales_projection(sales),
    }


def inventory_summary(medicines: Sequence, today: Optional[date] = None) -> dict:
    today = today or date.today()
    return {
        "total_items": len(medicines),
        "low_stock": len(low_stock(medicines)),
        "expiring_soon": len(expiring_before(medicines, today)),
        "stock_value": sum((_amount(m.price) * m.stock for m in medicines), Decimal("0")),
    }
