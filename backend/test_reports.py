"""
Reporting tests over in-memory collections.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pharmacare.services import report_service as rs

TODAY = date(2024, 3, 15)


def med(id, stock=150, expiry=None, price="9.99", name=None):
    return SimpleNamespace(id=id, name=name or f"Med {id}", stock=stock, expiry_date=expiry, price=Decimal(price))


def sale(medicine_id, quantity, total, on=TODAY):
    return SimpleNamespace(
        medicine_id=medicine_id,
        quantity=quantity,
        total_amount=Decimal(total),
        created_at=datetime.combine(on, datetime.min.time()),
    )


def test_low_stock_threshold_is_strict():
    medicines = [med(1, stock=99), med(2, stock=100), med(3, stock=101), med(4, stock=0)]
    assert [m.id for m in rs.low_stock(medicines)] == [1, 4]
    assert [m.id for m in rs.low_stock(medicines, threshold=101)] == [1, 2, 4]


def test_dashboard_expiry_window():
    medicines = [
        med(1, expiry=TODAY - timedelta(days=1)),
        med(2, expiry=TODAY),
        med(3, expiry=TODAY + timedelta(days=1)),
        med(4, expiry=TODAY + timedelta(days=5)),
        med(5, expiry=TODAY + timedelta(days=6)),
        med(6, expiry=None),
    ]
    assert [m.id for m in rs.expiring_soon(medicines, TODAY)] == [3, 4]


def test_inventory_expiry_window_includes_expired():
    medicines = [
        med(1, expiry=TODAY - timedelta(days=30)),
        med(2, expiry=TODAY + timedelta(days=89)),
        med(3, expiry=TODAY + timedelta(days=90)),
        med(4, expiry=None),
    ]
    assert [m.id for m in rs.expiring_before(medicines, TODAY)] == [1, 2]


def test_revenue_by_date_and_between():
    sales = [
        sale(1, 5, "49.95", TODAY),
        sale(2, 2, "49.98", TODAY),
        sale(1, 1, "9.99", TODAY - timedelta(days=10)),
    ]
    by_day = rs.revenue_by_date(sales)
    assert list(by_day.items()) == [
        (TODAY - timedelta(days=10), Decimal("9.99")),
        (TODAY, Decimal("99.93")),
    ]
    assert rs.total_revenue(sales) == Decimal("109.92")
    assert rs.revenue_between(sales, TODAY - timedelta(days=7), TODAY) == Decimal("99.93")


def test_projection_formulas():
    sales = [sale(1, 1, "70.00"), sale(2, 1, "0.07")]
    projection = rs.sales_projection(sales)
    assert projection["daily"] == Decimal("10.01")
    assert projection["weekly"] == Decimal("70.07")
    assert projection["monthly"] == Decimal("280.28")


def test_top_selling_order_and_ties():
    medicines = [med(1), med(2), med(3), med(4)]
    sales = [
        sale(2, 3, "30.00"),
        sale(3, 5, "50.00"),
        sale(1, 3, "30.00"),
        sale(2, 2, "20.00"),
    ]
    ranked = rs.top_selling(medicines, sales, limit=3)

    # med 2 (5) and med 3 (5) tie; catalog order keeps 2 ahead of 3
    assert [(r["medicine"].id, r["quantity_sold"]) for r in ranked] == [(2, 5), (3, 5), (1, 3)]
    assert ranked[0]["revenue"] == Decimal("50.00")


def test_top_selling_default_limit_and_unsold():
    medicines = [med(i) for i in range(1, 8)]
    sales = [sale(i, i, "1.00") for i in range(1, 7)]
    ranked = rs.top_selling(medicines, sales)
    assert [r["medicine"].id for r in ranked] == [6, 5, 4, 3, 2]
    assert all(r["medicine"].id != 7 for r in rs.top_selling(medicines, sales, limit=10))


@pytest.mark.parametrize("name,today,expected", [
    ("week", date(2024, 3, 15), date(2024, 3, 8)),
    ("month", date(2024, 3, 31), date(2024, 2, 29)),
    ("month", date(2024, 1, 10), date(2023, 12, 10)),
    ("year", date(2024, 2, 29), date(2023, 2, 28)),
])
def test_period_start(name, today, expected):
    assert rs.period_start(name, today) == expected


def test_period_start_unknown_range():
    with pytest.raises(ValueError):
        rs.period_start("decade", TODAY)


def test_dashboard_summary():
    medicines = [
        med(1, stock=150, expiry=TODAY + timedelta(days=3)),
        med(2, stock=80, expiry=TODAY + timedelta(days=60)),
    ]
    sales = [sale(1, 5, "49.95"), sale(2, 2, "49.98", TODAY - timedelta(days=20))]
    summary = rs.dashboard_summary(medicines, sales, TODAY)

    assert summary["total_sales"] == Decimal("99.93")
    assert summary["sales_count"] == 2
    assert summary["low_stock_count"] == 1
    assert summary["expiring_count"] == 1
    assert summary["weekly_revenue"] == Decimal("49.95")
    assert summary["monthly_revenue"] == Decimal("99.93")


def test_inventory_summary():
    medicines = [
        med(1, stock=10, price="2.50", expiry=TODAY + timedelta(days=30)),
        med(2, stock=200, price="1.00", expiry=TODAY + timedelta(days=365)),
    ]
    summary = rs.inventory_summary(medicines, TODAY)
    assert summary == {
        "total_items": 2,
        "low_stock": 1,
        "expiring_soon": 1,
        "stock_value": Decimal("225.00"),
    }
