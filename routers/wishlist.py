"""
Wishlists: saved food items that can be moved into the cart
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

import models
import schemas
from auth import auth_service, ensure_owner_or_admin
from database import get_db
from routers.common import add_quantity_to_cart, get_active_user_or_404, get_or_create_cart

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


def to_wishlist_out(wishlist: models.Wishlist) -> schemas.WishlistOut:
    items = [
        schemas.WishlistItemOut(
            wishlist_item_id=item.id,
            food_item_id=item.food_item_id,
            product_name=item.food_item.name,
            price=item.food_item.price,
            description=item.food_item.description,
            image_url=item.food_item.image_url,
            stock_quantity=item.food_item.stock_quantity,
            is_available=item.food_item.stock_quantity > 0,
            added_date=item.added_date
        )
        for item in wishlist.items
    ]
    return schemas.WishlistOut(
        wishlist_id=wishlist.id,
        user_id=wishlist.user_id,
        created_date=wishlist.created_date,
        last_updated_date=wishlist.last_updated_date,
        items=items,
        item_count=len(items),
        total_value=sum(i.price for i in items),
        available_item_count=sum(1 for i in items if i.is_available)
    )


def get_or_create_wishlist(db: Session, user_id: int) -> models.Wishlist:
    wishlist = db.query(models.Wishlist).filter(models.Wishlist.user_id == user_id).first()
    if wishlist is None:
        now = models.utcnow()
        wishlist = models.Wishlist(user_id=user_id, created_date=now, last_updated_date=now)
        db.add(wishlist)
        db.flush()
    return wishlist


def get_own_wishlist_item(db: Session, claims: schemas.TokenClaims, item_id: int, detail: str) -> models.WishlistItem:
    item = db.query(models.WishlistItem).filter(models.WishlistItem.id == item_id).first()
    if item is None:
        raise HTTPException(status_code=404, detail=f"Wishlist item with ID {item_id} not found")
    if item.wishlist.user_id != claims.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return item


@router.get("", response_model=schemas.WishlistOut)
def get_wishlist(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Get a wishlist, the caller's own unless an admin asks for another user
    """
    target_user_id = user_id if user_id is not None else claims.user_id
    ensure_owner_or_admin(claims, target_user_id, "You can only access your own wishlist")
    get_active_user_or_404(db, target_user_id)

    wishlist = get_or_create_wishlist(db, target_user_id)
    db.commit()
    db.refresh(wishlist)
    return to_wishlist_out(wishlist)


@router.post("/items", response_model=schemas.WishlistOut)
def add_to_wishlist(
    item_data: schemas.AddToWishlist,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    food_item = db.query(models.FoodItem).filter(models.FoodItem.id == item_data.food_item_id).first()
    if food_item is None:
        raise HTTPException(status_code=404, detail=f"Product with ID {item_data.food_item_id} not found")

    wishlist = get_or_create_wishlist(db, claims.user_id)
    if any(i.food_item_id == item_data.food_item_id for i in wishlist.items):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This product is already in your wishlist"
        )

    now = models.utcnow()
    wishlist.items.append(models.WishlistItem(food_item_id=item_data.food_item_id, added_date=now))
    wishlist.last_updated_date = now
    db.commit()
    db.refresh(wishlist)
    return to_wishlist_out(wishlist)


@router.delete("/items/{item_id}", response_model=schemas.Message)
def remove_from_wishlist(
    item_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    item = get_own_wishlist_item(db, claims, item_id, "You can only remove items from your own wishlist")

    wishlist = item.wishlist
    wishlist.items.remove(item)
    wishlist.last_updated_date = models.utcnow()
    db.commit()
    return {"message": "Item removed from wishlist successfully"}


@router.delete("", response_model=schemas.Message)
def clear_wishlist(
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    wishlist = db.query(models.Wishlist).filter(models.Wishlist.user_id == claims.user_id).first()
    if wishlist is None:
        raise HTTPException(status_code=404, detail="Wishlist not found")

    wishlist.items.clear()
    wishlist.last_updated_date = models.utcnow()
    db.commit()
    return {"message": "Wishlist cleared successfully"}


@router.post("/items/{item_id}/move-to-cart", response_model=schemas.Message)
def move_to_cart(
    item_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Put one unit of the item in the cart and drop it from the wishlist
    """
    item = get_own_wishlist_item(db, claims, item_id, "You can only move items from your own wishlist")
    if item.food_item.stock_quantity <= 0:
        raise HTTPException(status_code=400, detail="This product is out of stock")

    cart = get_or_create_cart(db, claims.user_id)
    add_quantity_to_cart(cart, item.food_item_id, 1)
    wishlist = item.wishlist
    wishlist.items.remove(item)
    wishlist.last_updated_date = models.utcnow()
    db.commit()

    logger.info("Wishlist item moved to cart", extra={"user_id": claims.user_id, "food_item_id": item.food_item_id})
    return {"message": "Item moved to cart successfully"}


@router.post("/move-all-to-cart", response_model=schemas.Message)
def move_all_to_cart(
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Move every in-stock wishlist item to the cart.
    Out of stock items stay in the wishlist.
    """
    wishlist = db.query(models.Wishlist).filter(models.Wishlist.user_id == claims.user_id).first()
    if wishlist is None or not wishlist.items:
        raise HTTPException(status_code=404, detail="Your wishlist is empty")

    available = [i for i in wishlist.items if i.food_item.stock_quantity > 0]
    if not available:
        raise HTTPException(status_code=400, detail="No items in your wishlist are currently in stock")
    skipped = len(wishlist.items) - len(available)

    cart = get_or_create_cart(db, claims.user_id)
    for item in available:
        add_quantity_to_cart(cart, item.food_item_id, 1)
        wishlist.items.remove(item)
    wishlist.last_updated_date = models.utcnow()
    db.commit()

    if skipped == 0:
        return {"message": "All items moved to cart successfully"}
    return {"message": f"{len(available)} available items moved to cart. {skipped} items are out of stock"}
