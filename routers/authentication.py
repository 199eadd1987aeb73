"""
Login and bearer-token issuance
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import config
import schemas
import token_service
from auth import auth_service
from database import get_db
from routers.users import to_user_out

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/login", response_model=schemas.LoginResponse)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    """
    Verify credentials and return a signed access token.
    Send it back as `Authorization: Bearer <access_token>`.
    """
    user = auth_service.authenticate(db, credentials.email, credentials.password)

    return schemas.LoginResponse(
        access_token=token_service.generate_token(user),
        refresh_token=token_service.generate_refresh_token(),
        expires_in=config.JWT_EXPIRATION_MINUTES * 60,
        user=to_user_out(user),
    )
