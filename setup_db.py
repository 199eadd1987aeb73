"""
Create the tables and seed the initial data.

An administrator account is created when ADMIN_EMAIL and ADMIN_PASSWORD are
set, and demo categories and food items when SEED_SAMPLE_DATA=true.
"""
import logging
import os
import sys

from pythonjsonlogger import jsonlogger
from sqlalchemy import func

import models
from auth import hash_password
from database import Base, SessionLocal, engine

logger = logging.getLogger("setup_db")

SAMPLE_CATALOG = {
    ("Pizza", "https://example.com/icons/pizza.png"): [
        ("Margherita Pizza", "Classic pizza with tomato sauce, mozzarella and basil", 12.99, 25),
        ("Pepperoni Pizza", "Tomato sauce, mozzarella and spicy pepperoni", 14.49, 20),
    ],
    ("Pasta", "https://example.com/icons/pasta.png"): [
        ("Pasta Carbonara", "Creamy pasta with bacon and parmesan", 14.99, 15),
        ("Penne Arrabbiata", "Penne in a spicy tomato sauce", 11.50, 0),
    ],
    ("Desserts", "https://example.com/icons/desserts.png"): [
        ("Tiramisu", "Coffee soaked ladyfingers with mascarpone", 6.75, 30),
    ],
}


def seed_admin(db):
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.info("ADMIN_EMAIL or ADMIN_PASSWORD not set, skipping administrator account")
        return

    existing = db.query(models.User).filter(
        func.lower(models.User.email) == email.lower(),
        models.User.is_active == True
    ).first()
    if existing:
        if existing.role != models.ADMIN_ROLE:
            existing.role = models.ADMIN_ROLE
            logger.info("Promoted existing user to administrator", extra={"user_id": existing.id})
        return

    admin = models.User(
        username=os.getenv("ADMIN_USERNAME", "admin"),
        phone_number=os.getenv("ADMIN_PHONE", "0000000000"),
        email=email,
        password_hash=hash_password(password),
        role=models.ADMIN_ROLE,
        is_active=True
    )
    db.add(admin)
    db.flush()
    logger.info("Administrator account created", extra={"user_id": admin.id})


def seed_sample_catalog(db):
    if db.query(models.Category).first():
        logger.info("Catalog already has data, skipping sample data")
        return

    for (category_name, icon_url), items in SAMPLE_CATALOG.items():
        category = models.Category(name=category_name, icon_url=icon_url)
        for name, description, price, stock in items:
            category.food_items.append(models.FoodItem(
                name=name,
                description=description,
                price=price,
                stock_quantity=stock
            ))
        db.add(category)
    logger.info("Sample catalog created", extra={"categories": len(SAMPLE_CATALOG)})


def setup_database():
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    db = SessionLocal()
    try:
        seed_admin(db)
        if os.getenv("SEED_SAMPLE_DATA") == "true":
            seed_sample_catalog(db)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Database setup failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    logging.getLogger().addHandler(handler)
    logging.getLogger().setLevel(logging.INFO)

    setup_database()
