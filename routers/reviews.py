"""
Product reviews: one review per user and food item
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import analytics
import models
import schemas
from auth import auth_service, ensure_owner_or_admin, is_admin
from database import get_db
from routers.common import total_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"])

DUPLICATE_REVIEW = "You have already reviewed this product. Update your existing review instead."


def to_review_out(review: models.Review, claims: Optional[schemas.TokenClaims]) -> schemas.ReviewOut:
    can_modify = is_admin(claims) or (claims is not None and claims.user_id == review.user_id)
    return schemas.ReviewOut(
        review_id=review.id,
        food_item_id=review.food_item_id,
        product_name=review.food_item.name,
        user_id=review.user_id,
        reviewer_name=review.user.username,
        rating=review.rating,
        comment=review.comment,
        created_date=review.created_date,
        updated_date=review.updated_date,
        can_edit=can_modify,
        can_delete=can_modify
    )


def get_food_item_or_404(db: Session, food_item_id: int) -> models.FoodItem:
    food_item = db.query(models.FoodItem).filter(models.FoodItem.id == food_item_id).first()
    if not food_item:
        raise HTTPException(status_code=404, detail=f"Product with ID {food_item_id} not found")
    return food_item


def get_review_or_404(db: Session, review_id: int) -> models.Review:
    review = db.query(models.Review).filter(models.Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=404, detail=f"Review with ID {review_id} not found")
    return review


def rounded_average(value) -> float:
    return round(float(value), 2) if value is not None else 0.0


@router.get("/product/{product_id}", response_model=schemas.ProductReviewPage)
def get_product_reviews(
    product_id: int,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
    db: Session = Depends(get_db),
    claims: Optional[schemas.TokenClaims] = Depends(auth_service.get_optional_claims)
):
    """
    Reviews of a product, newest first, with the product's average rating
    """
    get_food_item_or_404(db, product_id)

    query = db.query(models.Review).filter(models.Review.food_item_id == product_id)
    total_count = query.count()
    reviews = (
        query.order_by(models.Review.created_date.desc(), models.Review.id.desc())
        .offset((page_number - 1) * page_size)
        .limit(page_size)
        .all()
    )
    average = db.query(func.avg(models.Review.rating)).filter(
        models.Review.food_item_id == product_id
    ).scalar()

    return schemas.ProductReviewPage(
        reviews=[to_review_out(r, claims) for r in reviews],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size),
        average_rating=rounded_average(average)
    )


@router.get("/product/{product_id}/average", response_model=schemas.AverageRating)
def get_product_average_rating(product_id: int, db: Session = Depends(get_db)):
    food_item = get_food_item_or_404(db, product_id)

    average, count = db.query(
        func.avg(models.Review.rating), func.count(models.Review.id)
    ).filter(models.Review.food_item_id == product_id).one()

    return schemas.AverageRating(
        product_id=food_item.id,
        product_name=food_item.name,
        average_rating=rounded_average(average),
        review_count=count,
        has_reviews=count > 0
    )


@router.get("/user/my-reviews", response_model=List[schemas.ReviewOut])
def get_my_reviews(
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    reviews = (
        db.query(models.Review)
        .filter(models.Review.user_id == claims.user_id)
        .order_by(models.Review.created_date.desc(), models.Review.id.desc())
        .all()
    )
    if not reviews:
        raise HTTPException(status_code=404, detail="You haven't written any reviews yet")
    return [to_review_out(r, claims) for r in reviews]


@router.get("/admin/statistics", response_model=schemas.ReviewStatistics)
def get_review_statistics(
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    Review totals, rating distribution and the most reviewed products - admin only
    """
    total_reviews = db.query(models.Review).count()
    average = db.query(func.avg(models.Review.rating)).scalar()

    distribution = analytics.rating_distribution(db)
    top_products = analytics.most_reviewed_products(db)

    return schemas.ReviewStatistics(
        total_reviews=total_reviews,
        average_rating=rounded_average(average),
        rating_distribution=[schemas.RatingCount(rating=r, count=c) for r, c in distribution],
        top_reviewed_products=[
            schemas.ReviewedProduct(
                product_id=product_id,
                product_name=name,
                review_count=count,
                average_rating=rounded_average(avg)
            )
            for product_id, name, count, avg in top_products
        ]
    )


@router.get("", response_model=schemas.ReviewPage)
def get_all_reviews(
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1),
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    query = db.query(models.Review)
    total_count = query.count()
    reviews = (
        query.order_by(models.Review.created_date.desc(), models.Review.id.desc())
        .offset((page_number - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return schemas.ReviewPage(
        reviews=[to_review_out(r, claims) for r in reviews],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages(total_count, page_size)
    )


@router.get("/{review_id}", response_model=schemas.ReviewOut)
def get_review_by_id(
    review_id: int,
    db: Session = Depends(get_db),
    claims: Optional[schemas.TokenClaims] = Depends(auth_service.get_optional_claims)
):
    return to_review_out(get_review_or_404(db, review_id), claims)


@router.post("", response_model=schemas.ReviewOut, status_code=status.HTTP_201_CREATED)
def create_review(
    review_data: schemas.ReviewCreate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Review a food item as the signed-in user
    """
    get_food_item_or_404(db, review_data.food_item_id)

    existing = db.query(models.Review).filter(
        models.Review.user_id == claims.user_id,
        models.Review.food_item_id == review_data.food_item_id
    ).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_REVIEW)

    review = models.Review(
        food_item_id=review_data.food_item_id,
        user_id=claims.user_id,
        rating=review_data.rating,
        comment=review_data.comment,
        created_date=models.utcnow()
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent request won the race
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_REVIEW)
    db.refresh(review)

    logger.info("Review created", extra={"review_id": review.id, "user_id": claims.user_id})
    return to_review_out(review, claims)


@router.put("/{review_id}", response_model=schemas.ReviewOut)
def update_review(
    review_id: int,
    update: schemas.ReviewUpdate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    review = get_review_or_404(db, review_id)
    ensure_owner_or_admin(claims, review.user_id, "You can only update your own reviews")

    if update.rating is not None:
        review.rating = update.rating
    if update.comment is not None:
        review.comment = update.comment
    review.updated_date = models.utcnow()

    db.commit()
    db.refresh(review)
    return to_review_out(review, claims)


@router.delete("/{review_id}", response_model=schemas.Message)
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    review = get_review_or_404(db, review_id)
    ensure_owner_or_admin(claims, review.user_id, "You can only delete your own reviews")

    db.delete(review)
    db.commit()
    return {"message": f"Review with ID {review_id} has been successfully deleted"}
