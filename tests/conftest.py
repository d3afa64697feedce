import os

# Settings are read once (lru_cache); configure the test environment first
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["API_KEY"] = "test-api-key"
os.environ["CACHE_ENABLED"] = "false"
os.environ["TIMEZONE"] = "Asia/Jakarta"
os.environ.pop("NOTIFY_WEBHOOK_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dreampuff.main import app
from dreampuff.database import Base, get_db
from dreampuff.models.product import Product, ProductCategory


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

API_KEY = "test-api-key"


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_KEY}"}


@pytest.fixture
def make_product():
    """Insert a product directly, bypassing the API."""
    def _make(name="Puff Cokelat", stock=10, category=ProductCategory.CREAMPUFF, product_id=None):
        session = TestingSessionLocal()
        try:
            product = Product(name=name, stock=stock, category=category)
            if product_id:
                product.id = product_id
            session.add(product)
            session.commit()
            return product.id
        finally:
            session.close()
    return _make


@pytest.fixture
def cashier():
    return {"name": "Sari", "position": "Kasir"}
