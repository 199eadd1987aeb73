import logging
import sys

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
import models  # noqa: F401 registers the tables on Base.metadata
from database import Base, engine
from routers import (
    addresses,
    admin_dashboard,
    authentication,
    carts,
    categories,
    food_items,
    orders,
    reports,
    reviews,
    users,
    wishlist,
)

from pythonjsonlogger import jsonlogger

# JSON logging setup
logHandler = logging.StreamHandler(sys.stdout)
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
logHandler.setFormatter(formatter)

logger = logging.getLogger()
logger.setLevel(config.LOG_LEVEL)
logger.addHandler(logHandler)

if not config.jwt_settings_valid():
    raise RuntimeError("JWT settings are missing or invalid, check JWT_SECRET_KEY, JWT_ISSUER and JWT_AUDIENCE")

API_TITLE = "Food E-Commerce API"
API_VERSION = "1.0.0"

app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    description="Users, catalog, carts, orders, wishlists, reviews and admin analytics for a food shop",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
Base.metadata.create_all(bind=engine)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid input is a plain 400 Bad Request."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


for router_module in (authentication, users, categories, food_items, carts, orders,
                      addresses, reviews, wishlist, admin_dashboard, reports):
    app.include_router(router_module.router)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": API_TITLE}


@app.get("/")
def root():
    return {"name": API_TITLE, "version": API_VERSION, "docs": "/docs"}
