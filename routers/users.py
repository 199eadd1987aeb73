"""
User accounts: registration, profile, updates and soft deletion
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

import models
import schemas
from auth import auth_service, ensure_owner_or_admin, hash_password
from database import get_db
from routers.common import get_active_user_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def to_user_out(user: models.User) -> schemas.UserOut:
    return schemas.UserOut(
        user_id=user.id,
        username=user.username,
        phone_number=user.phone_number,
        email=user.email,
    )


@router.get("", response_model=List[schemas.UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.require_admin)
):
    """
    List all active users - admin only
    """
    users = db.query(models.User).filter(models.User.is_active == True).order_by(models.User.id).all()
    if not users:
        raise HTTPException(status_code=404, detail="No active users found")
    return [to_user_out(u) for u in users]


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    ensure_owner_or_admin(claims, user_id, "You can only view your own account")
    return to_user_out(get_active_user_or_404(db, user_id))


@router.get("/{user_id}/profile", response_model=schemas.UserProfile)
def get_user_profile(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Get the user with their addresses and order history
    """
    ensure_owner_or_admin(claims, user_id, "You can only view your own profile")
    user = get_active_user_or_404(db, user_id)

    return schemas.UserProfile(
        user_id=user.id,
        username=user.username,
        phone_number=user.phone_number,
        email=user.email,
        is_active=user.is_active,
        addresses=[
            schemas.ProfileAddress(
                address_id=a.id,
                street_address=a.street_address,
                city=a.city,
                state=a.state,
                zip_code=a.zip_code,
                is_default=a.is_default
            )
            for a in user.addresses
        ],
        orders=[
            schemas.ProfileOrder(
                order_id=o.id,
                order_date=o.order_date,
                total_amount=o.total_amount,
                status=o.status
            )
            for o in user.orders
        ],
    )


@router.post("/register", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def register_user(user_data: schemas.UserRegister, db: Session = Depends(get_db)):
    """
    Register a new customer account
    """
    # Email only needs to be unique among active accounts
    existing_user = db.query(models.User).filter(
        func.lower(models.User.email) == user_data.email.lower(),
        models.User.is_active == True
    ).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Email '{user_data.email}' is already registered to an active user"
        )

    db_user = models.User(
        username=user_data.username,
        phone_number=user_data.phone_number,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        role=models.CUSTOMER_ROLE,
        is_active=True
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    logger.info("User registered", extra={"user_id": db_user.id})
    return to_user_out(db_user)


@router.post("/login", response_model=schemas.UserOut)
def login_user(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    """
    Check credentials without issuing a token; see /api/auth/login for that
    """
    user = auth_service.authenticate(db, credentials.email, credentials.password)
    return to_user_out(user)


@router.put("/{user_id}", response_model=schemas.UserOut)
def update_user(
    user_id: int,
    update: schemas.UserUpdate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Update username and/or phone number; empty values are ignored
    """
    ensure_owner_or_admin(claims, user_id, "You can only update your own account")
    user = get_active_user_or_404(db, user_id)

    if update.username:
        user.username = update.username
    if update.phone_number:
        user.phone_number = update.phone_number

    db.commit()
    db.refresh(user)
    return to_user_out(user)


@router.delete("/{user_id}", response_model=schemas.Message)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Soft delete: the account is deactivated, its history is kept
    """
    ensure_owner_or_admin(claims, user_id, "You can only delete your own account")
    user = get_active_user_or_404(db, user_id)

    user.is_active = False
    db.commit()

    logger.info("User deactivated", extra={"user_id": user_id})
    return {"message": f"User with ID {user_id} has been successfully deactivated"}
