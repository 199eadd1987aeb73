import os

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "food-ecommerce-development-secret-key-change-me")
JWT_ISSUER = os.getenv("JWT_ISSUER", "FoodEcommerceAPI")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "FoodEcommerceUsers")
JWT_EXPIRATION_MINUTES = int(os.getenv("JWT_EXPIRATION_MINUTES", 60))
JWT_ALGORITHM = "HS256"

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def jwt_settings_valid() -> bool:
    """HS256 needs a secret of at least 32 characters."""
    return bool(
        JWT_SECRET_KEY
        and JWT_ISSUER
        and JWT_AUDIENCE
        and len(JWT_SECRET_KEY) >= 32
        and JWT_EXPIRATION_MINUTES > 0
    )
