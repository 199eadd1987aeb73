"""
Issues and verifies the bearer tokens handed out at login.
"""
import base64
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

import config
import models

logger = logging.getLogger(__name__)


def generate_token(user: models.User) -> str:
    """
    Build a signed HS256 access token for the user.

    Carries the standard claims (sub, iss, aud, iat, exp) and the custom
    uid, name, email and role claims checked by the route dependencies.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "uid": user.id,
        "name": user.username,
        "email": user.email,
        "role": user.role or models.CUSTOMER_ROLE,
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(minutes=config.JWT_EXPIRATION_MINUTES),
    }
    try:
        token = jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    except Exception as e:
        logger.error("Error generating JWT token", extra={"user_id": user.id, "error": str(e)})
        raise

    logger.info("JWT token generated", extra={"user_id": user.id})
    return token


def generate_refresh_token() -> str:
    # Not persisted anywhere; clients may keep it for a future rotation flow
    return base64.b64encode(secrets.token_bytes(64)).decode("ascii")


def decode_token(token: str) -> Dict[str, Any]:
    """Verify signature, expiry, issuer and audience; raises jwt.InvalidTokenError."""
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        audience=config.JWT_AUDIENCE,
        issuer=config.JWT_ISSUER,
    )
