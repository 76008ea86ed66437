# ishop/routers/products.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ishop.core.storage import ContentStore, get_content_store
from ishop.database import get_session
from ishop.repositories.image_repo import ImageRepository
from ishop.repositories.product_repo import ProductRepository
from ishop.schemas.product import ProductCreate, ProductRead
from ishop.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
image_repo = ImageRepository()


def get_product_service(
    store: ContentStore = Depends(get_content_store),
) -> ProductService:
    return ProductService(repo, image_repo, store)


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    skip: int = 0,
    limit: int = 50,
    only_active: bool = True,
):
    """
    List products.

    - `only_active=True` hides inactive products by default.
    """
    return service.list_products(session, skip=skip, limit=limit, only_active=only_active)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    return service.get_product(session, product_id)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    return service.create_product(session, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Delete a product together with its images (rows and blobs).
    """
    service.delete_product(session, product_id)
    return None
