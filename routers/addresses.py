"""
Delivery addresses. Every user with addresses has exactly one default.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

import models
import schemas
from auth import auth_service, ensure_owner_or_admin
from database import get_db
from routers.common import get_active_user_or_404

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


def to_address_out(address: models.Address) -> schemas.AddressOut:
    return schemas.AddressOut(
        address_id=address.id,
        user_id=address.user_id,
        street_address=address.street_address,
        city=address.city,
        state=address.state,
        zip_code=address.zip_code,
        is_default=address.is_default,
        full_address=f"{address.street_address}, {address.city}, {address.state} {address.zip_code}"
    )


def get_address_or_404(db: Session, address_id: int) -> models.Address:
    address = db.query(models.Address).filter(models.Address.id == address_id).first()
    if not address:
        raise HTTPException(status_code=404, detail=f"Address with ID {address_id} not found")
    return address


def unset_other_defaults(db: Session, user_id: int, keep_id: int = None):
    query = db.query(models.Address).filter(
        models.Address.user_id == user_id,
        models.Address.is_default == True
    )
    for address in query.all():
        if address.id != keep_id:
            address.is_default = False


def address_count(db: Session, user_id: int) -> int:
    return db.query(models.Address).filter(models.Address.user_id == user_id).count()


@router.post("", response_model=schemas.AddressOut, status_code=status.HTTP_201_CREATED)
def create_address(
    address_data: schemas.AddressCreate,
    user_id: int = Query(..., alias="userId"),
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Add an address. The first address always becomes the default.
    """
    ensure_owner_or_admin(claims, user_id, "You can only create addresses for yourself")
    get_active_user_or_404(db, user_id)

    has_default = db.query(models.Address).filter(
        models.Address.user_id == user_id,
        models.Address.is_default == True
    ).first() is not None
    make_default = address_data.is_default or not has_default

    if make_default:
        unset_other_defaults(db, user_id)

    address = models.Address(
        user_id=user_id,
        street_address=address_data.street_address,
        city=address_data.city,
        state=address_data.state,
        zip_code=address_data.zip_code,
        is_default=make_default
    )
    db.add(address)
    db.commit()
    db.refresh(address)
    return to_address_out(address)


@router.get("/user/{user_id}", response_model=List[schemas.AddressOut])
def get_user_addresses(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    All addresses of a user, default first
    """
    ensure_owner_or_admin(claims, user_id, "You can only view your own addresses")
    get_active_user_or_404(db, user_id)

    addresses = (
        db.query(models.Address)
        .filter(models.Address.user_id == user_id)
        .order_by(models.Address.is_default.desc(), models.Address.id)
        .all()
    )
    if not addresses:
        raise HTTPException(status_code=404, detail=f"No addresses found for user {user_id}")
    return [to_address_out(a) for a in addresses]


@router.get("/user/{user_id}/default", response_model=schemas.AddressOut)
def get_default_address(
    user_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    ensure_owner_or_admin(claims, user_id, "You can only view your own addresses")
    get_active_user_or_404(db, user_id)

    address = db.query(models.Address).filter(
        models.Address.user_id == user_id,
        models.Address.is_default == True
    ).first()
    if not address:
        raise HTTPException(status_code=404, detail=f"No default address found for user {user_id}")
    return to_address_out(address)


@router.get("/{address_id}", response_model=schemas.AddressOut)
def get_address_by_id(
    address_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    address = get_address_or_404(db, address_id)
    ensure_owner_or_admin(claims, address.user_id, "You can only view your own addresses")
    return to_address_out(address)


@router.put("/{address_id}", response_model=schemas.AddressOut)
def update_address(
    address_id: int,
    update: schemas.AddressUpdate,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Partially update an address. Empty values are ignored.
    """
    address = get_address_or_404(db, address_id)
    ensure_owner_or_admin(claims, address.user_id, "You can only update your own addresses")

    if update.street_address:
        address.street_address = update.street_address
    if update.city:
        address.city = update.city
    if update.state:
        address.state = update.state
    if update.zip_code:
        address.zip_code = update.zip_code

    if update.is_default is True and not address.is_default:
        unset_other_defaults(db, address.user_id, keep_id=address.id)
        address.is_default = True
    elif update.is_default is False and address.is_default:
        if address_count(db, address.user_id) == 1:
            raise HTTPException(status_code=400, detail="Cannot unset default address if it's the only address")
        # Hand the default over to the oldest other address
        replacement = (
            db.query(models.Address)
            .filter(models.Address.user_id == address.user_id, models.Address.id != address.id)
            .order_by(models.Address.id)
            .first()
        )
        address.is_default = False
        replacement.is_default = True

    db.commit()
    db.refresh(address)
    return to_address_out(address)


@router.put("/{address_id}/set-default", response_model=schemas.AddressOut)
def set_default_address(
    address_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    address = get_address_or_404(db, address_id)
    ensure_owner_or_admin(claims, address.user_id, "You can only modify your own addresses")

    unset_other_defaults(db, address.user_id, keep_id=address.id)
    address.is_default = True
    db.commit()
    db.refresh(address)
    return to_address_out(address)


@router.delete("/{address_id}", response_model=schemas.Message)
def delete_address(
    address_id: int,
    db: Session = Depends(get_db),
    claims: schemas.TokenClaims = Depends(auth_service.get_current_claims)
):
    """
    Delete an address. A user's last address cannot be deleted; deleting the
    default promotes the remaining address with the lowest id.
    """
    address = get_address_or_404(db, address_id)
    ensure_owner_or_admin(claims, address.user_id, "You can only delete your own addresses")

    if address_count(db, address.user_id) == 1:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete the only address. Users must have at least one address."
        )

    if address.is_default:
        replacement = (
            db.query(models.Address)
            .filter(models.Address.user_id == address.user_id, models.Address.id != address.id)
            .order_by(models.Address.id)
            .first()
        )
        replacement.is_default = True

    db.delete(address)
    db.commit()
    return {"message": f"Address with ID {address_id} has been successfully deleted"}
