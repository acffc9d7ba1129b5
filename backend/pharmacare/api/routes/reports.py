"""Reports: dashboard, sales by range, inventory health, top sellers and spreadsheet export."""
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.permissions import VIEW_REPORTS
from pharmacare.models.medicine import Medicine
from pharmacare.models.sale import SaleTransaction
from pharmacare.models.user import User
from pharmacare.schemas.medicine import MedicineResponse
from pharmacare.services import export_service, report_service

router = APIRouter()

can_view = require_permission(VIEW_REPORTS)


def _medicines(db: Session):
    return db.query(Medicine).order_by(Medicine.id).all()


def _sales(db: Session):
    return db.query(SaleTransaction).order_by(SaleTransaction.created_at, SaleTransaction.id).all()


def _medicine_rows(medicines):
    return [MedicineResponse.model_validate(m).model_dump() for m in medicines]


def _ranked_rows(ranked):
    return [
        {
            "medicine": MedicineResponse.model_validate(row["medicine"]).model_dump(),
            "quantity_sold": row["quantity_sold"],
            "revenue": row["revenue"],
        }
        for row in ranked
    ]


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), current_user: User = Depends(can_view)):
    """Headline figures plus the low-stock and 5-day expiry alert lists."""
    medicines = _medicines(db)
    sales = _sales(db)
    today = date.today()
    summary = report_service.dashboard_summary(medicines, sales, today)
    summary["low_stock"] = _medicine_rows(report_service.low_stock(medicines))
    summary["expiring_soon"] = _medicine_rows(report_service.expiring_soon(medicines, today))
    summary["top_selling"] = _ranked_rows(report_service.top_selling(medicines, sales))
    return summary


@router.get("/sales")
def sales_report(
    range: str = Query("week", pattern="^(week|month|year)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view),
):
    """Sales in the selected range with per-day revenue and the approximate projection."""
    today = date.today()
    start = report_service.period_start(range, today)
    sales = [s for s in _sales(db) if start <= (report_service.sale_date(s) or date.min) <= today]
    by_day = report_service.revenue_by_date(sales)
    return {
        "range": range,
        "start": start.isoformat(),
        "end": today.isoformat(),
        "revenue": report_service.revenue_between(sales, start, today),
        "sales_count": len(sales),
        "units_sold": sum(s.quantity for s in sales),
        "by_date": [{"date": d.isoformat(), "revenue": amount} for d, amount in by_day.items() if d],
        "projection": report_service.sales_projection(sales),
    }


@router.get("/inventory")
def inventory_report(db: Session = Depends(get_db), current_user: User = Depends(can_view)):
    """Stock health with the 90-day expiry flag."""
    medicines = _medicines(db)
    today = date.today()
    flagged = {m.id for m in report_service.expiring_before(medicines, today)}
    low = {m.id for m in report_service.low_stock(medicines)}
    items = []
    for row, m in zip(_medicine_rows(medicines), medicines):
        row["low_stock"] = m.id in low
        row["expiring_soon"] = m.id in flagged
        row["days_until_expiry"] = report_service.days_until_expiry(m, today)
        items.append(row)
    return {"summary": report_service.inventory_summary(medicines, today), "items": items}


@router.get("/top-selling")
def top_selling(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view),
):
    return _ranked_rows(report_service.top_selling(_medicines(db), _sales(db), limit=limit))


@router.get("/export")
def export_report(
    report_type: str = Query("inventory", pattern="^(inventory|sales|financial)$"),
    format: str = Query("xlsx", pattern="^(xlsx|csv)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view),
):
    """Download a report as a spreadsheet."""
    with service_errors(db):
        rows = export_service.prepare_rows(report_type, _medicines(db), _sales(db))
        content = export_service.render(rows, format)
    filename = export_service.export_filename(report_type, format)
    return Response(
        content=content,
        media_type=export_service.EXPORT_FORMATS[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
