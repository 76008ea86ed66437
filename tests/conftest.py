"""Pytest fixtures for backend tests."""

import io
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ishop.core.config import ImagePolicy
from ishop.core.storage import LocalContentStore, get_content_store
from ishop.database import get_session
from ishop.main import app
from ishop.models.order import Order
from ishop.models.product import Product
from ishop.repositories.image_repo import ImageRepository
from ishop.repositories.product_repo import ProductRepository
from ishop.services.image_service import ImageService, IncomingFile


@pytest.fixture(scope="function")
def test_db_engine():
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    with Session(test_db_engine) as session:
        yield session


@pytest.fixture(scope="function")
def store(tmp_path: Path) -> LocalContentStore:
    """Local content store rooted in a per-test temporary directory."""
    return LocalContentStore(tmp_path / "wwwroot", "images")


@pytest.fixture
def policy() -> ImagePolicy:
    return ImagePolicy(max_bytes=2 * 1024 * 1024, allowed_extensions={".png", ".jpg"})


@pytest.fixture
def image_service(store: LocalContentStore, policy: ImagePolicy) -> ImageService:
    return ImageService(ImageRepository(), ProductRepository(), store, policy)


@pytest.fixture(scope="function")
def test_client(test_db_session: Session, store: LocalContentStore) -> Generator[TestClient, None, None]:
    """Create a test client with database and content store overrides."""

    def override_get_session() -> Generator[Session, None, None]:
        yield test_db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_content_store] = lambda: store

    client = TestClient(app)

    try:
        yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def create_product(test_db_session: Session) -> Callable[..., Product]:
    """Factory that inserts a product directly in the database.

    Example:
        ```python
        def test_example(create_product):
            product = create_product(name="Red Velvet")
        ```
    """
    counter = {"n": 0}

    def _create_product(name: str = "Test Product", price: float = 10.0) -> Product:
        counter["n"] += 1
        product = Product(name=name, slug=f"test-product-{counter['n']}", price=price)
        test_db_session.add(product)
        test_db_session.commit()
        test_db_session.refresh(product)
        return product

    return _create_product


@pytest.fixture(scope="function")
def create_order(test_db_session: Session) -> Callable[..., Order]:
    def _create_order(total_amount: float = 100.0) -> Order:
        order = Order(total_amount=total_amount)
        test_db_session.add(order)
        test_db_session.commit()
        test_db_session.refresh(order)
        return order

    return _create_order


@pytest.fixture
def make_file() -> Callable[..., IncomingFile]:
    """Build an IncomingFile from a name and raw bytes."""

    def _make_file(file_name: str, content: bytes) -> IncomingFile:
        return IncomingFile(file_name=file_name, size=len(content), stream=io.BytesIO(content))

    return _make_file
