"""
Admin reports, as JSON or as CSV downloads
"""
import csv
import io
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session, joinedload

import analytics
import models
import schemas
from auth import auth_service
from database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reports",
    tags=["reports"],
    dependencies=[Depends(auth_service.require_admin)]
)

MAX_REPORT_ROWS = 100


def recent_orders(db: Session, days: int):
    return (
        analytics.orders_since(db, analytics.days_ago(days))
        .options(joinedload(models.Order.user))
        .order_by(models.Order.order_date.desc(), models.Order.id.desc())
    )


def build_sales_report(db: Session, days: int) -> schemas.SalesReport:
    end_date = models.utcnow()
    start_date = analytics.days_ago(days)
    orders = analytics.orders_since(db, start_date).all()

    total_sales = sum(float(o.total_amount) for o in orders)
    rows = analytics.product_sales(db, order_by="revenue", start_date=start_date)

    return schemas.SalesReport(
        report_title=f"Sales Report ({days} days)",
        generated_date=end_date,
        start_date=start_date,
        end_date=end_date,
        total_sales=total_sales,
        total_orders=len(orders),
        average_order_value=analytics.average(total_sales, len(orders)),
        top_products=[
            schemas.SalesProduct(product_name=name, quantity_sold=quantity, revenue=analytics.as_float(revenue))
            for _product_id, name, _count, quantity, revenue in rows
        ]
    )


def build_order_report(db: Session, days: int) -> schemas.OrderReport:
    query = recent_orders(db, days)
    orders = query.limit(MAX_REPORT_ROWS).all()

    return schemas.OrderReport(
        report_title=f"Order Report ({days} days)",
        generated_date=models.utcnow(),
        total_orders=query.count(),
        orders_by_status=analytics.orders_by_status(db, analytics.days_ago(days)),
        orders=[
            schemas.OrderDetail(
                order_id=o.id,
                order_date=o.order_date,
                customer_name=o.user.username,
                total_amount=o.total_amount,
                status=o.status
            )
            for o in orders
        ]
    )


def build_user_report(db: Session) -> schemas.UserReport:
    return schemas.UserReport(
        report_title="User Analytics Report",
        generated_date=models.utcnow(),
        total_users=db.query(models.User).count(),
        active_users=db.query(models.User).filter(models.User.is_active == True).count(),
        purchasing_users=analytics.purchasing_user_count(db),
        reviewing_users=analytics.reviewing_user_count(db),
        average_lifetime_value=analytics.average_lifetime_value(db),
        top_customers=[
            schemas.TopCustomer(customer_name=name, total_spending=analytics.as_float(spending), order_count=count)
            for name, spending, count in analytics.top_customers(db)
        ]
    )


@router.get("/sales", response_model=schemas.SalesReport)
def get_sales_report(days: int = Query(30, ge=1), db: Session = Depends(get_db)):
    return build_sales_report(db, days)


@router.get("/orders", response_model=schemas.OrderReport)
def get_order_report(days: int = Query(30, ge=1), db: Session = Depends(get_db)):
    return build_order_report(db, days)


@router.get("/users", response_model=schemas.UserReport)
def get_user_report(db: Session = Depends(get_db)):
    return build_user_report(db)


def sales_csv_rows(db: Session, days: int):
    rows = analytics.product_sales(db, order_by="revenue", limit=None, start_date=analytics.days_ago(days))
    for _product_id, name, _count, quantity, revenue in rows:
        yield [name, quantity, f"{analytics.as_float(revenue):.2f}"]


def orders_csv_rows(db: Session, days: int):
    for order in recent_orders(db, days).limit(MAX_REPORT_ROWS):
        yield [
            order.id,
            order.order_date.strftime("%Y-%m-%d"),
            order.user.username,
            f"{float(order.total_amount):.2f}",
            order.status
        ]


def users_csv_rows(db: Session):
    """All-time customer spending; the export window does not apply."""
    for name, spending, count in analytics.top_customers(db, limit=MAX_REPORT_ROWS):
        yield [name, f"{analytics.as_float(spending):.2f}", count]


CSV_EXPORTS = {
    "sales": (["Product Name", "Quantity Sold", "Revenue"], sales_csv_rows),
    "orders": (["Order ID", "Order Date", "Customer Name", "Total Amount", "Status"], orders_csv_rows),
    "users": (["Customer Name", "Total Spending", "Order Count"], lambda db, days: users_csv_rows(db)),
}


@router.get("/export")
def export_report(
    report_type: str = Query(..., alias="reportType"),
    days: int = Query(30, ge=1),
    db: Session = Depends(get_db)
):
    """
    Download a report as CSV: sales, orders or users
    """
    report_type = report_type.lower()
    if report_type not in CSV_EXPORTS:
        raise HTTPException(status_code=400, detail="Invalid report type. Use: sales, orders, or users")

    header, rows = CSV_EXPORTS[report_type]
    sio = io.StringIO(newline="")
    writer = csv.writer(sio)
    writer.writerow(header)
    writer.writerows(rows(db, days))

    filename = f"{report_type}_report_{models.utcnow():%Y%m%d}.csv"
    logger.info("Report exported", extra={"report_type": report_type})
    return Response(
        content=sio.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
