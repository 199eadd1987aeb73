"""
Product categories
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

import models
import schemas
from auth import auth_service
from database import get_db

router = APIRouter(prefix="/api/categories", tags=["categories"])


def product_count(db: Session, category_id: int) -> int:
    return db.query(models.FoodItem).filter(models.FoodItem.category_id == category_id).count()


def get_category_or_404(db: Session, category_id: int) -> models.Category:
    category = db.query(models.Category).filter(models.Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=f"Category with ID {category_id} not found")
    return category


def name_taken(db: Session, name: str, exclude_id: int = None) -> bool:
    query = db.query(models.Category).filter(func.lower(models.Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(models.Category.id != exclude_id)
    return query.first() is not None


def to_category_out(category: models.Category, count: int) -> schemas.CategoryOut:
    return schemas.CategoryOut(
        category_id=category.id,
        name=category.name,
        icon_url=category.icon_url,
        product_count=count
    )


@router.get("", response_model=List[schemas.CategoryOut])
def get_all_categories(db: Session = Depends(get_db)):
    """
    List categories with the number of products in each
    """
    rows = (
        db.query(models.Category, func.count(models.FoodItem.id))
        .outerjoin(models.FoodItem, models.FoodItem.category_id == models.Category.id)
        .group_by(models.Category.id)
        .order_by(models.Category.id)
        .all()
    )
    if not rows:
        raise HTTPException(status_code=404, detail="No categories found")
    return [to_category_out(category, count) for category, count in rows]


@router.get("/{category_id}", response_model=schemas.CategoryOut)
def get_category_by_id(category_id: int, db: Session = Depends(get_db)):
    category = get_category_or_404(db, category_id)
    return to_category_out(category, product_count(db, category_id))


@router.get("/{category_id}/product-count", response_model=schemas.CategoryProductCount)
def get_category_product_count(category_id: int, db: Session = Depends(get_db)):
    category = get_category_or_404(db, category_id)
    count = product_count(db, category_id)
    return schemas.CategoryProductCount(
        category_id=category.id,
        category_name=category.name,
        product_count=count,
        has_products=count > 0
    )


@router.post("", response_model=schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: schemas.CategoryCreate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Create a category - admin only. Names are unique regardless of case.
    """
    if name_taken(db, category_data.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category with name '{category_data.name}' already exists"
        )

    category = models.Category(name=category_data.name, icon_url=str(category_data.icon_url))
    db.add(category)
    db.commit()
    db.refresh(category)
    return to_category_out(category, 0)


@router.put("/{category_id}", response_model=schemas.CategoryOut)
def update_category(
    category_id: int,
    update: schemas.CategoryUpdate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    category = get_category_or_404(db, category_id)

    if update.name and update.name.lower() != category.name.lower():
        if name_taken(db, update.name, exclude_id=category_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Category with name '{update.name}' already exists"
            )
        category.name = update.name
    elif update.name:
        # Same name, different casing
        category.name = update.name

    if update.icon_url:
        category.icon_url = str(update.icon_url)

    db.commit()
    db.refresh(category)
    return to_category_out(category, product_count(db, category_id))


@router.delete("/{category_id}", response_model=schemas.Message)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Delete a category - admin only, blocked while products still reference it
    """
    category = get_category_or_404(db, category_id)

    count = product_count(db, category_id)
    if count > 0:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete category with {count} products. Please move or delete products first."
        )

    db.delete(category)
    db.commit()
    return {"message": f"Category with ID {category_id} has been successfully deleted"}
