"""
Checkout, order history and order status management
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

import models
import schemas
from auth import auth_service, ensure_owner_or_admin
from database import get_db
from routers.common import get_active_user_or_404, total_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])

CANCELLED = "Cancelled"


def to_order_out(order: models.Order) -> schemas.OrderOut:
    order_items = [
        schemas.OrderItemOut(
            order_item_id=item.id,
            food_item_id=item.food_item_id,
            product_name=item.food_item.name if item.food_item else "Unknown",
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.unit_price * item.quantity
        )
        for item in order.items
    ]
    return schemas.OrderOut(
        order_id=order.id,
        user_id=order.user_id,
        order_date=order.order_date,
        total_amount=order.total_amount,
        status=order.status,
        shipping_address=order.shipping_address,
        special_instructions=order.special_instructions,
        order_items=order_items,
        item_count=len(order_items),
        total_quantity=sum(i.quantity for i in order_items)
    )


def get_order_or_404(db: Session, order_id: int) -> models.Order:
    order = db.query(models.Order).filter(models.Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail=f"Order with ID {order_id} not found")
    return order


def restore_stock(order: models.Order):
    for item in order.items:
        if item.food_item:
            item.food_item.stock_quantity += item.quantity


@router.post("", response_model=schemas.OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    order_data: schemas.OrderCreate,
    user_id: int = Query(..., alias="userId"),
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Turn the user's cart into a pending order.
    Prices are captured at checkout, stock is reserved and the cart emptied,
    all in a single commit.
    """
    ensure_owner_or_admin(claims, user_id, "You can only place orders for your own account")
    get_active_user_or_404(db, user_id)

    if not order_data.shipping_address.strip():
        raise HTTPException(status_code=400, detail="Shipping address is required")

    cart = db.query(models.Cart).filter(models.Cart.user_id == user_id).first()
    if cart is None or not cart.items:
        raise HTTPException(status_code=400, detail="Cannot create order from empty cart")

    order = models.Order(
        user_id=user_id,
        order_date=models.utcnow(),
        total_amount=0,
        status="Pending",
        shipping_address=order_data.shipping_address,
        special_instructions=order_data.special_instructions
    )

    for cart_item in cart.items:
        food_item = cart_item.food_item
        if food_item.stock_quantity < cart_item.quantity:
            raise HTTPException(
                status_code=400,
                detail=f"Not enough stock for {food_item.name}. "
                       f"Available: {food_item.stock_quantity}, Requested: {cart_item.quantity}"
            )

    total = 0
    for cart_item in cart.items:
        food_item = cart_item.food_item
        order.items.append(models.OrderItem(
            food_item_id=food_item.id,
            quantity=cart_item.quantity,
            unit_price=food_item.price
        ))
        food_item.stock_quantity -= cart_item.quantity
        total += food_item.price * cart_item.quantity

    order.total_amount = total
    db.add(order)
    cart.items.clear()
    cart.last_updated = models.utcnow()
    db.commit()
    db.refresh(order)

    logger.info("Order created", extra={"order_id": order.id, "user_id": user_id})
    return to_order_out(order)


@router.get("/user/{user_id}", response_model=schemas.OrderPage)
def get_user_orders(
    user_id: int,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Order history for a user, newest first
    """
    ensure_owner_or_admin(claims, user_id, "You can only view your own orders")
    get_active_user_or_404(db, user_id)

    query = db.query(models.Order).filter(models.Order.user_id == user_id)
    total_count = query.count()
    if total_count == 0:
        raise HTTPException(status_code=404, detail=f"No orders found for user {user_id}")

    orders = (
        query.order_by(models.Order.order_date.desc(), models.Order.id.desc())
        .offset((page_number - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return schemas.OrderPage(
        orders=[to_order_out(o) for o in orders],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size)
    )


@router.get("/user/{user_id}/summary", response_model=List[schemas.OrderSummary])
def get_user_order_summary(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    ensure_owner_or_admin(claims, user_id, "You can only view your own orders")
    get_active_user_or_404(db, user_id)

    orders = (
        db.query(models.Order)
        .filter(models.Order.user_id == user_id)
        .order_by(models.Order.order_date.desc(), models.Order.id.desc())
        .all()
    )
    if not orders:
        raise HTTPException(status_code=404, detail=f"No orders found for user {user_id}")

    return [
        schemas.OrderSummary(
            order_id=o.id,
            order_date=o.order_date,
            total_amount=o.total_amount,
            status=o.status,
            item_count=len(o.items),
            shipping_address=o.shipping_address
        )
        for o in orders
    ]


@router.get("/{order_id}", response_model=schemas.OrderOut)
def get_order_by_id(
    order_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    order = get_order_or_404(db, order_id)
    ensure_owner_or_admin(claims, order.user_id, "You can only view your own orders")
    return to_order_out(order)


@router.put("/{order_id}/status", response_model=schemas.Message)
def update_order_status(
    order_id: int,
    status_update: schemas.OrderStatusUpdate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Move an order to another status - admin only.
    Cancelled is final: its stock has already gone back on the shelf.
    """
    if status_update.status not in models.ORDER_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Valid values: {', '.join(models.ORDER_STATUSES)}"
        )

    order = get_order_or_404(db, order_id)

    if order.status == CANCELLED and status_update.status != CANCELLED:
        raise HTTPException(
            status_code=400,
            detail=f"Order {order_id} is cancelled and cannot be moved to '{status_update.status}'"
        )
    if status_update.status == CANCELLED and order.status != CANCELLED:
        restore_stock(order)

    previous_status = order.status
    order.status = status_update.status
    db.commit()

    logger.info(
        "Order status changed",
        extra={"order_id": order_id, "from_status": previous_status, "to_status": order.status}
    )
    return {"message": f"Order {order_id} status updated to '{order.status}'"}


@router.delete("/{order_id}", response_model=schemas.Message)
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Cancel a pending order and put its items back in stock.
    The order row is kept for history.
    """
    order = get_order_or_404(db, order_id)
    ensure_owner_or_admin(claims, order.user_id, "You can only cancel your own orders")

    if order.status != "Pending":
        raise HTTPException(
            status_code=400,
            detail=f"Can only cancel orders with 'Pending' status. Current status: {order.status}"
        )

    restore_stock(order)
    order.status = CANCELLED
    db.commit()

    logger.info("Order cancelled", extra={"order_id": order_id})
    return {"message": f"Order {order_id} has been cancelled successfully"}
