"""
Shopping carts, one per user, created on first use
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

import models
import schemas
from auth import auth_service, ensure_owner_or_admin
from database import get_db
from routers.common import add_quantity_to_cart, get_active_user_or_404, get_or_create_cart

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/carts", tags=["carts"])


def to_cart_out(cart: models.Cart) -> schemas.CartOut:
    cart_items = [
        schemas.CartItemOut(
            cart_item_id=item.id,
            food_item_id=item.food_item_id,
            product_name=item.food_item.name,
            price=item.food_item.price,
            quantity=item.quantity,
            image_url=item.food_item.image_url,
            line_total=item.food_item.price * item.quantity
        )
        for item in cart.items
    ]
    return schemas.CartOut(
        cart_id=cart.id,
        user_id=cart.user_id,
        last_updated=cart.last_updated,
        cart_items=cart_items,
        total_items=sum(i.quantity for i in cart_items),
        cart_total=sum(i.line_total for i in cart_items),
        is_empty=not cart_items
    )


def check_cart_access(db: Session, claims: schemas.TokenClaims, user_id: int):
    ensure_owner_or_admin(claims, user_id, "You can only access your own cart")
    get_active_user_or_404(db, user_id)


def get_cart_item_or_404(db: Session, user_id: int, cart_item_id: int) -> models.CartItem:
    cart = db.query(models.Cart).filter(models.Cart.user_id == user_id).first()
    if cart is None:
        raise HTTPException(status_code=404, detail=f"Cart not found for user {user_id}")

    cart_item = db.query(models.CartItem).filter(
        models.CartItem.id == cart_item_id,
        models.CartItem.cart_id == cart.id
    ).first()
    if cart_item is None:
        raise HTTPException(status_code=404, detail=f"Cart item with ID {cart_item_id} not found")
    return cart_item


def ensure_in_stock(food_item: models.FoodItem, requested: int):
    if food_item.stock_quantity < requested:
        raise HTTPException(
            status_code=400,
            detail=f"Insufficient stock. Available: {food_item.stock_quantity}, Requested: {requested}"
        )


@router.get("/{user_id}", response_model=schemas.CartOut)
def get_cart(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Get the user's cart, creating an empty one if needed
    """
    check_cart_access(db, claims, user_id)
    cart = get_or_create_cart(db, user_id)
    db.commit()
    db.refresh(cart)
    return to_cart_out(cart)


@router.get("/{user_id}/summary", response_model=schemas.CartSummary)
def get_cart_summary(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    check_cart_access(db, claims, user_id)

    cart = db.query(models.Cart).filter(models.Cart.user_id == user_id).first()
    if cart is None:
        return schemas.CartSummary(total_items=0, cart_total=0, item_count=0, is_empty=True)

    cart_out = to_cart_out(cart)
    return schemas.CartSummary(
        total_items=cart_out.total_items,
        cart_total=cart_out.cart_total,
        item_count=len(cart_out.cart_items),
        is_empty=cart_out.is_empty
    )


@router.post("/{user_id}/items", response_model=schemas.CartOut, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    user_id: int,
    item: schemas.AddToCart,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Add a food item to the cart.
    Adding a food item already in the cart increases that line's quantity.
    """
    check_cart_access(db, claims, user_id)

    food_item = db.query(models.FoodItem).filter(models.FoodItem.id == item.food_item_id).first()
    if not food_item:
        raise HTTPException(status_code=404, detail=f"Food item with ID {item.food_item_id} not found")
    ensure_in_stock(food_item, item.quantity)

    cart = get_or_create_cart(db, user_id)
    add_quantity_to_cart(cart, item.food_item_id, item.quantity)
    db.commit()
    db.refresh(cart)

    logger.info("Item added to cart", extra={"user_id": user_id, "food_item_id": item.food_item_id})
    return to_cart_out(cart)


@router.put("/{user_id}/items/{cart_item_id}", response_model=schemas.CartOut)
def update_cart_item(
    user_id: int,
    cart_item_id: int,
    update: schemas.UpdateCartItem,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Set the quantity of a cart line
    """
    check_cart_access(db, claims, user_id)
    cart_item = get_cart_item_or_404(db, user_id, cart_item_id)
    ensure_in_stock(cart_item.food_item, update.quantity)

    cart_item.quantity = update.quantity
    cart = cart_item.cart
    cart.last_updated = models.utcnow()
    db.commit()
    db.refresh(cart)
    return to_cart_out(cart)


@router.delete("/{user_id}/items/{cart_item_id}", response_model=schemas.CartOut)
def remove_cart_item(
    user_id: int,
    cart_item_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    check_cart_access(db, claims, user_id)
    cart_item = get_cart_item_or_404(db, user_id, cart_item_id)

    cart = cart_item.cart
    cart.items.remove(cart_item)
    cart.last_updated = models.utcnow()
    db.commit()
    db.refresh(cart)
    return to_cart_out(cart)


@router.delete("/{user_id}", response_model=schemas.Message)
def clear_cart(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Remove every line from the cart; the cart itself is kept
    """
    check_cart_access(db, claims, user_id)

    cart = db.query(models.Cart).filter(models.Cart.user_id == user_id).first()
    if cart is None or not cart.items:
        return {"message": "Cart is already empty"}

    cart.items.clear()
    cart.last_updated = models.utcnow()
    db.commit()
    return {"message": "Cart cleared successfully"}
