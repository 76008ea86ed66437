# ishop/services/product_service.py
import logging
import re
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from ishop.core.errors import StorageIOError
from ishop.core.storage import ContentStore
from ishop.models.product import Product
from ishop.repositories.image_repo import ImageRepository
from ishop.repositories.product_repo import ProductRepository
from ishop.schemas.product import ProductCreate

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for products (parent records of images).

    Responsibilities:
      - slug generation & uniqueness
      - cascading image cleanup (rows + blobs) on delete
    """

    def __init__(
        self,
        repo: ProductRepository,
        image_repo: ImageRepository,
        store: ContentStore,
    ):
        self.repo = repo
        self.image_repo = image_repo
        self.store = store

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """
        Basic slugification:
          - lowercase
          - non-alphanumeric -> '-'
          - collapse multiple '-'
          - strip leading/trailing '-'
        """
        value = raw.strip().lower()
        value = re.sub(r"[^a-z0-9]+", "-", value)
        value = re.sub(r"-+", "-", value)
        value = value.strip("-")
        return value or "product"

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
    ) -> list[Product]:
        return self.repo.list(session, skip=skip, limit=limit, only_active=only_active)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Create a new product with a unique slug (from `slug` or `name`).
        """
        base_slug = self._slugify(payload.slug or payload.name)
        slug = self._ensure_unique_slug(session, base_slug)

        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            price=payload.price,
            stock_on_hand=payload.stock_on_hand,
            is_active=payload.is_active,
        )
        return self.repo.create(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product with all its images.

        Rows go first in one commit; blobs are removed afterwards so a
        failed commit never leaves rows pointing at missing blobs.
        """
        product = self.get_product(session, product_id)
        images = self.image_repo.list_for_product(session, product_id)
        file_names = [img.file_name for img in images]

        for img in images:
            self.image_repo.remove(session, img)
        self.repo.delete(session, product)

        for name in file_names:
            try:
                removed = self.store.delete(name)
            except StorageIOError as e:
                logger.error(
                    "Removing blob %s of product %s failed; it is now orphaned. %s",
                    name,
                    product_id,
                    e.message,
                )
                continue
            if not removed:
                logger.warning("Blob %s of product %s was already missing.", name, product_id)
        logger.info("Deleted product %s with %d image(s).", product_id, len(file_names))
