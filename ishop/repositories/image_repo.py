# ishop/repositories/image_repo.py
import uuid

from sqlmodel import Session, select

from ishop.models.product import Image


class ImageRepository:
    """
    Data access layer for the images catalog.

    NOTE:
      - No commits here; a catalog change is only visible once the
        service commits, after the blob side has succeeded.
    """

    def get_by_id(self, session: Session, image_id: uuid.UUID) -> Image | None:
        return session.get(Image, image_id)

    def list_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> list[Image]:
        stmt = (
            select(Image)
            .where(Image.product_id == product_id)
            .order_by(Image.created_at)
        )
        return session.exec(stmt).all()

    def add(self, session: Session, image: Image) -> Image:
        session.add(image)
        session.flush()
        return image

    def remove(self, session: Session, image: Image) -> None:
        session.delete(image)
        session.flush()
