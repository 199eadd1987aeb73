"""
Lookups and helpers shared by several routers
"""
import math

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

import models


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if total_count else 0


def get_active_user_or_404(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(
        models.User.id == user_id,
        models.User.is_active == True
    ).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Active user with ID {user_id} not found"
        )
    return user


def get_or_create_cart(db: Session, user_id: int) -> models.Cart:
    """Return the user's cart, adding a new one to the session if missing."""
    cart = db.query(models.Cart).filter(models.Cart.user_id == user_id).first()
    if cart is None:
        cart = models.Cart(user_id=user_id, last_updated=models.utcnow())
        db.add(cart)
        db.flush()
    return cart


def add_quantity_to_cart(cart: models.Cart, food_item_id: int, quantity: int) -> models.CartItem:
    """Merge into an existing line for the same food item, or append a new one."""
    for item in cart.items:
        if item.food_item_id == food_item_id:
            item.quantity += quantity
            break
    else:
        item = models.CartItem(food_item_id=food_item_id, quantity=quantity)
        cart.items.append(item)

    cart.last_updated = models.utcnow()
    return item
