import os

os.environ["LOCAL"] = "true"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models
from auth import hash_password
from database import Base, get_db
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Secret123!"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(email, username="customer", role=models.CUSTOMER_ROLE, is_active=True):
        user = models.User(
            username=username,
            phone_number="+40 712 345 678",
            email=email,
            password_hash=hash_password(PASSWORD),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def login(client):
    def _login(email):
        response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _login


@pytest.fixture
def customer(make_user):
    return make_user("alice@example.com", username="alice")


@pytest.fixture
def other_customer(make_user):
    return make_user("bob@example.com", username="bob")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", username="admin", role=models.ADMIN_ROLE)


@pytest.fixture
def customer_headers(customer, login):
    return login(customer.email)


@pytest.fixture
def other_headers(other_customer, login):
    return login(other_customer.email)


@pytest.fixture
def admin_headers(admin, login):
    return login(admin.email)


@pytest.fixture
def category(db):
    category = models.Category(name="Pizza", icon_url="https://example.com/pizza.png")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_food_item(db, category):
    def _make_food_item(name, price, stock_quantity=10, category_id=None):
        food_item = models.FoodItem(
            name=name,
            description=f"Delicious {name}",
            category_id=category_id or category.id,
            price=price,
            stock_quantity=stock_quantity,
        )
        db.add(food_item)
        db.commit()
        db.refresh(food_item)
        return food_item
    return _make_food_item


@pytest.fixture
def margherita(make_food_item):
    return make_food_item("Margherita", 10.00, stock_quantity=10)


@pytest.fixture
def pepperoni(make_food_item):
    return make_food_item("Pepperoni", 7.50, stock_quantity=5)
