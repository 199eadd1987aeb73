import logging
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi import HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import func
from sqlalchemy.orm import Session

import config
import models
import schemas
import token_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)

# bcrypt ignores everything past this many bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def is_admin(claims: Optional[schemas.TokenClaims]) -> bool:
    return claims is not None and claims.role == models.ADMIN_ROLE


def ensure_owner_or_admin(claims: schemas.TokenClaims, owner_id: int, detail: str):
    """Raise 403 unless the caller owns the resource or is an administrator."""
    if not is_admin(claims) and claims.user_id != owner_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class AuthService:
    """Credential checks and bearer-token dependencies for the routers"""

    def authenticate(self, db: Session, email: str, password: str) -> models.User:
        """
        Return the active user owning these credentials.
        Raises 400 for missing fields and 401 for anything else.
        """
        if not email or not password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email and password are required",
            )

        user = db.query(models.User).filter(
            func.lower(models.User.email) == email.strip().lower(),
            models.User.is_active == True
        ).first()

        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed", extra={"email": email})
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials or account is inactive",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return user

    def claims_from_token(self, token: str) -> Optional[schemas.TokenClaims]:
        """
        Decode the token and return its claims.
        Returns None if the token is invalid, expired or lacks a user id.
        """
        try:
            payload = token_service.decode_token(token)
        except jwt.InvalidTokenError:
            return None

        user_id = payload.get("uid")
        if user_id is None:
            return None

        return schemas.TokenClaims(
            user_id=int(user_id),
            name=payload.get("name"),
            email=payload.get("email"),
            role=payload.get("role"),
        )

    def get_current_claims(self, token: str = Depends(oauth2_scheme)) -> schemas.TokenClaims:
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        claims = self.claims_from_token(token)

        if claims is None:
            raise credentials_exception

        return claims

    def get_optional_claims(
        self, token: Optional[str] = Depends(optional_oauth2_scheme)
    ) -> Optional[schemas.TokenClaims]:
        """Claims for endpoints that render differently for signed-in callers."""
        if not token:
            return None
        return self.claims_from_token(token)

    def require_admin(self, token: str = Depends(oauth2_scheme)) -> schemas.TokenClaims:
        claims = self.get_current_claims(token)
        if not is_admin(claims):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Administrator role required",
            )
        return claims


auth_service = AuthService()
