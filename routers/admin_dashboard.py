"""
Admin dashboard analytics. Every endpoint requires the Admin role.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

import analytics
import models
import schemas
from auth import auth_service
from database import get_db

router = APIRouter(
    prefix="/api/admin/dashboard",
    tags=["admin-dashboard"],
    dependencies=[Depends(auth_service.require_admin)]
)


def to_top_product(row) -> schemas.TopProduct:
    product_id, name, order_count, _quantity, revenue = row
    return schemas.TopProduct(
        product_id=product_id,
        product_name=name,
        order_count=order_count,
        revenue=analytics.as_float(revenue)
    )


@router.get("/statistics", response_model=schemas.DashboardStatistics)
def get_dashboard_statistics(db: Session = Depends(get_db)):
    """
    Headline numbers for the dashboard
    """
    total_revenue = analytics.total_revenue(db)
    total_orders = db.query(models.Order).count()
    average_rating = db.query(func.avg(models.Review.rating)).scalar()

    return schemas.DashboardStatistics(
        total_revenue=total_revenue,
        total_orders=total_orders,
        total_customers=db.query(models.User).filter(models.User.is_active == True).count(),
        total_products=db.query(models.FoodItem).count(),
        pending_orders=db.query(models.Order).filter(models.Order.status == "Pending").count(),
        shipped_orders=db.query(models.Order).filter(models.Order.status == "Shipped").count(),
        average_order_value=analytics.average(total_revenue, total_orders),
        total_reviews=db.query(models.Review).count(),
        average_product_rating=round(analytics.as_float(average_rating), 2)
    )


@router.get("/revenue", response_model=schemas.RevenueAnalytics)
def get_revenue_analytics(days: int = Query(30, ge=1), db: Session = Depends(get_db)):
    """
    Revenue over the last `days` days, broken down per calendar day
    """
    orders = (
        analytics.orders_since(db, analytics.days_ago(days))
        .order_by(models.Order.order_date)
        .all()
    )

    # day -> (revenue, order count), oldest day first
    daily = {}
    for order in orders:
        day = order.order_date.date().isoformat()
        revenue, count = daily.get(day, (0.0, 0))
        daily[day] = (revenue + float(order.total_amount), count + 1)

    total_revenue = sum(float(o.total_amount) for o in orders)
    return schemas.RevenueAnalytics(
        total_revenue=total_revenue,
        order_count=len(orders),
        average_order_value=analytics.average(total_revenue, len(orders)),
        daily_revenue=[
            schemas.DailyRevenue(date=day, revenue=revenue, order_count=count)
            for day, (revenue, count) in daily.items()
        ]
    )


@router.get("/orders", response_model=schemas.OrderAnalytics)
def get_order_analytics(db: Session = Depends(get_db)):
    rows = analytics.product_sales(db, order_by="order_count")
    return schemas.OrderAnalytics(
        total_orders=db.query(models.Order).count(),
        orders_by_status=analytics.orders_by_status(db),
        top_products=[to_top_product(r) for r in rows]
    )


@router.get("/users", response_model=schemas.UserAnalytics)
def get_user_analytics(db: Session = Depends(get_db)):
    total_users = db.query(models.User).count()
    active_users = db.query(models.User).filter(models.User.is_active == True).count()
    new_users = db.query(models.User).filter(models.User.created_at >= analytics.days_ago(30)).count()

    return schemas.UserAnalytics(
        total_users=total_users,
        active_users=active_users,
        inactive_users=total_users - active_users,
        purchasing_users=analytics.purchasing_user_count(db),
        average_lifetime_value=analytics.average_lifetime_value(db),
        new_users_this_month=new_users
    )


@router.get("/products", response_model=schemas.ProductPerformance)
def get_product_performance(db: Session = Depends(get_db)):
    return schemas.ProductPerformance(
        total_products=db.query(models.FoodItem).count(),
        out_of_stock_products=db.query(models.FoodItem).filter(models.FoodItem.stock_quantity == 0).count(),
        best_selling=[to_top_product(r) for r in analytics.product_sales(db, order_by="revenue")],
        most_reviewed=[
            schemas.ReviewedProduct(
                product_id=product_id,
                product_name=name,
                review_count=count,
                average_rating=round(analytics.as_float(avg), 2)
            )
            for product_id, name, count, avg in analytics.most_reviewed_products(db)
        ],
        rating_distribution={rating: count for rating, count in analytics.rating_distribution(db)}
    )
