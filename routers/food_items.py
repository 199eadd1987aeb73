"""
Food item catalog: browsing, search and admin maintenance
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

import models
import schemas
from auth import auth_service
from database import get_db
from routers.common import total_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/fooditems", tags=["food-items"])


def to_food_item_out(food_item: models.FoodItem) -> schemas.FoodItemOut:
    return schemas.FoodItemOut(
        food_item_id=food_item.id,
        name=food_item.name,
        description=food_item.description,
        category_id=food_item.category_id,
        category_name=food_item.category.name if food_item.category else None,
        price=food_item.price,
        image_url=food_item.image_url,
        stock_quantity=food_item.stock_quantity,
        is_available=food_item.stock_quantity > 0
    )


def fetch_page(query, page_number: int, page_size: int):
    """Count the filtered query, then load one page of it with categories."""
    total_count = query.count()
    items = (
        query.options(joinedload(models.FoodItem.category))
        .order_by(models.FoodItem.id)
        .offset((page_number - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total_count


def ensure_category_exists(db: Session, category_id: int):
    if not db.query(models.Category).filter(models.Category.id == category_id).first():
        raise HTTPException(status_code=400, detail=f"Category with ID {category_id} does not exist")


def get_food_item_or_404(db: Session, food_item_id: int) -> models.FoodItem:
    food_item = db.query(models.FoodItem).filter(models.FoodItem.id == food_item_id).first()
    if not food_item:
        raise HTTPException(status_code=404, detail=f"Food item with ID {food_item_id} not found")
    return food_item


@router.get("", response_model=schemas.FoodItemPage)
def get_all_food_items(
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    only_available: bool = Query(False, alias="onlyAvailable"),
    db: Session = Depends(get_db)
):
    """
    List food items page by page, optionally only those in stock
    """
    query = db.query(models.FoodItem)
    if only_available:
        query = query.filter(models.FoodItem.stock_quantity > 0)

    items, total_count = fetch_page(query, page_number, page_size)
    if not items:
        raise HTTPException(status_code=404, detail="No food items found")

    return schemas.FoodItemPage(
        items=[to_food_item_out(f) for f in items],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size)
    )


@router.get("/search", response_model=schemas.FoodItemSearchPage)
def search_food_items(
    search_term: str = Query("", alias="searchTerm"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    db: Session = Depends(get_db)
):
    """
    Case-insensitive search on the food item name
    """
    if len(search_term.strip()) < 2:
        raise HTTPException(status_code=400, detail="Search term must be at least 2 characters")

    query = db.query(models.FoodItem).filter(
        func.lower(models.FoodItem.name).contains(search_term.lower(), autoescape=True)
    )
    items, total_count = fetch_page(query, page_number, page_size)
    if total_count == 0:
        raise HTTPException(status_code=404, detail=f"No food items found matching '{search_term}'")

    return schemas.FoodItemSearchPage(
        search_term=search_term,
        items=[to_food_item_out(f) for f in items],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size)
    )


@router.get("/category/{category_id}", response_model=schemas.FoodItemPage)
def get_food_items_by_category(
    category_id: int,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    db: Session = Depends(get_db)
):
    query = db.query(models.FoodItem).filter(models.FoodItem.category_id == category_id)
    items, total_count = fetch_page(query, page_number, page_size)
    if total_count == 0:
        raise HTTPException(status_code=404, detail=f"No food items found in category {category_id}")

    return schemas.FoodItemPage(
        items=[to_food_item_out(f) for f in items],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size)
    )


@router.get("/{food_item_id}", response_model=schemas.FoodItemOut)
def get_food_item_by_id(food_item_id: int, db: Session = Depends(get_db)):
    return to_food_item_out(get_food_item_or_404(db, food_item_id))


@router.post("", response_model=schemas.FoodItemOut, status_code=status.HTTP_201_CREATED)
def create_food_item(
    food_item_data: schemas.FoodItemCreate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Create a food item - admin only
    """
    ensure_category_exists(db, food_item_data.category_id)

    food_item = models.FoodItem(
        name=food_item_data.name,
        description=food_item_data.description,
        category_id=food_item_data.category_id,
        price=food_item_data.price,
        image_url=str(food_item_data.image_url) if food_item_data.image_url else None,
        stock_quantity=food_item_data.stock_quantity
    )
    db.add(food_item)
    db.commit()
    db.refresh(food_item)

    logger.info("Food item created", extra={"food_item_id": food_item.id})
    return to_food_item_out(food_item)


@router.put("/{food_item_id}", response_model=schemas.FoodItemOut)
def update_food_item(
    food_item_id: int,
    update: schemas.FoodItemUpdate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Partially update a food item - admin only
    """
    food_item = get_food_item_or_404(db, food_item_id)

    if update.category_id is not None:
        ensure_category_exists(db, update.category_id)
        food_item.category_id = update.category_id
    if update.name:
        food_item.name = update.name
    if update.description:
        food_item.description = update.description
    if update.price is not None:
        food_item.price = update.price
    if update.image_url:
        food_item.image_url = str(update.image_url)
    if update.stock_quantity is not None:
        food_item.stock_quantity = update.stock_quantity

    db.commit()
    db.refresh(food_item)
    return to_food_item_out(food_item)


@router.delete("/{food_item_id}", response_model=schemas.Message)
def delete_food_item(
    food_item_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Delete a food item - admin only.
    Items that appear in past orders are kept for the order history.
    """
    food_item = get_food_item_or_404(db, food_item_id)

    ordered = db.query(models.OrderItem).filter(models.OrderItem.food_item_id == food_item_id).first()
    if ordered:
        raise HTTPException(
            status_code=400,
            detail=f"Food item with ID {food_item_id} appears in existing orders and cannot be deleted"
        )

    db.query(models.CartItem).filter(
        models.CartItem.food_item_id == food_item_id
    ).delete(synchronize_session=False)
    db.query(models.WishlistItem).filter(
        models.WishlistItem.food_item_id == food_item_id
    ).delete(synchronize_session=False)
    db.delete(food_item)
    db.commit()

    logger.info("Food item deleted", extra={"food_item_id": food_item_id})
    return {"message": f"Food item with ID {food_item_id} has been successfully deleted"}
