"""
Aggregate queries shared by the admin dashboard and the reports
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

import models


def days_ago(days: int) -> datetime:
    return models.utcnow() - timedelta(days=days)


def as_float(value) -> float:
    return float(value) if value is not None else 0.0


def average(total: float, count: int) -> float:
    return round(total / count, 2) if count else 0.0


def orders_since(db: Session, start_date: Optional[datetime] = None):
    query = db.query(models.Order)
    if start_date is not None:
        query = query.filter(models.Order.order_date >= start_date)
    return query


def total_revenue(db: Session) -> float:
    return as_float(db.query(func.sum(models.Order.total_amount)).scalar())


def orders_by_status(db: Session, start_date: Optional[datetime] = None) -> dict:
    query = db.query(models.Order.status, func.count(models.Order.id))
    if start_date is not None:
        query = query.filter(models.Order.order_date >= start_date)
    return {order_status: count for order_status, count in query.group_by(models.Order.status).all()}


def purchasing_user_count(db: Session) -> int:
    return db.query(func.count(distinct(models.Order.user_id))).scalar() or 0


def reviewing_user_count(db: Session) -> int:
    return db.query(func.count(distinct(models.Review.user_id))).scalar() or 0


def average_lifetime_value(db: Session) -> float:
    """Total revenue spread over the users who placed at least one order."""
    return average(total_revenue(db), purchasing_user_count(db))


def product_sales(db: Session, order_by: str = "revenue", limit: Optional[int] = 10,
                  start_date: Optional[datetime] = None):
    """
    Per food item: number of order lines, units sold and revenue.

    Rows are (product_id, product_name, order_count, quantity_sold, revenue),
    sorted by ``order_by`` which is one of "revenue" or "order_count".
    """
    order_count = func.count(models.OrderItem.id).label("order_count")
    quantity_sold = func.sum(models.OrderItem.quantity).label("quantity_sold")
    revenue = func.sum(models.OrderItem.quantity * models.OrderItem.unit_price).label("revenue")

    query = (
        db.query(models.FoodItem.id, models.FoodItem.name, order_count, quantity_sold, revenue)
        .join(models.OrderItem, models.OrderItem.food_item_id == models.FoodItem.id)
    )
    if start_date is not None:
        query = (
            query.join(models.Order, models.Order.id == models.OrderItem.order_id)
            .filter(models.Order.order_date >= start_date)
        )

    sort_key = order_count if order_by == "order_count" else revenue
    query = query.group_by(models.FoodItem.id, models.FoodItem.name).order_by(sort_key.desc(), models.FoodItem.id)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def most_reviewed_products(db: Session, limit: int = 10):
    """Rows are (product_id, product_name, review_count, average_rating)."""
    review_count = func.count(models.Review.id)
    return (
        db.query(models.FoodItem.id, models.FoodItem.name, review_count, func.avg(models.Review.rating))
        .join(models.Review, models.Review.food_item_id == models.FoodItem.id)
        .group_by(models.FoodItem.id, models.FoodItem.name)
        .order_by(review_count.desc(), models.FoodItem.id)
        .limit(limit)
        .all()
    )


def rating_distribution(db: Session):
    """Rows are (rating, count) in ascending rating order."""
    return (
        db.query(models.Review.rating, func.count(models.Review.id))
        .group_by(models.Review.rating)
        .order_by(models.Review.rating)
        .all()
    )


def top_customers(db: Session, limit: int = 10):
    """Rows are (username, total_spending, order_count), biggest spenders first."""
    total_spending = func.sum(models.Order.total_amount)
    return (
        db.query(models.User.username, total_spending, func.count(models.Order.id))
        .join(models.Order, models.Order.user_id == models.User.id)
        .group_by(models.User.id, models.User.username)
        .order_by(total_spending.desc(), models.User.id)
        .limit(limit)
        .all()
    )
