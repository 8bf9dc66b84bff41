# backend/tests/conftest.py
import os
import tempfile

# Point the app at throwaway storage before anything imports config.settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="marketplace-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username, password="secret123", **kwargs):
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=get_password_hash(password),
            first_name=kwargs.get("first_name", username.title()),
            last_name=kwargs.get("last_name"),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_product(db):
    def _make(seller, title="Used bike", price=100.0, **kwargs):
        product = Product(
            title=title,
            description=kwargs.pop("description", f"{title} in decent shape"),
            category=kwargs.pop("category", "Sports & Recreation"),
            price=price,
            condition=kwargs.pop("condition", "Good"),
            images=kwargs.pop("images", []),
            tags=kwargs.pop("tags", []),
            seller_id=seller.id,
            **kwargs,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={"sub": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def seller(make_user):
    return make_user("sally")


@pytest.fixture
def buyer(make_user):
    return make_user("bob")
