# ishop/services/image_service.py
import logging
import uuid
from dataclasses import dataclass
from typing import BinaryIO

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ishop.core.config import ImagePolicy, file_extension
from ishop.core.errors import (
    EmptyInputError,
    ErrorKind,
    NotFoundError,
    OversizeError,
    PersistenceError,
    ServiceError,
    StorageIOError,
    UnsupportedTypeError,
)
from ishop.core.storage import ContentStore, generate_filename
from ishop.models.product import Image
from ishop.repositories.image_repo import ImageRepository
from ishop.repositories.product_repo import ProductRepository
from ishop.schemas.image import ImageRead, IngestionStage, ServiceResult

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """An uploaded file as seen by the service: client name, length, byte stream."""

    file_name: str
    size: int
    stream: BinaryIO


def parse_id(raw: str | uuid.UUID, entity: str) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except ValueError:
        # An id that cannot be parsed cannot match any row
        raise NotFoundError(entity, raw)


class ImageService:
    """
    Upload and removal of product images.

    Upload pipeline (see IngestionStage):
      0. Gate: the product must exist.
      1. Validate the file against the ImagePolicy.
      2. Generate a unique storage name.
      3. Write the bytes into the content store.
      4. Insert the catalog row and commit.
      5. Report the created image.

    Helpers raise ServiceError subclasses; `upload` and `remove` are the
    only places where errors become a ServiceResult.
    """

    def __init__(
        self,
        repo: ImageRepository,
        product_repo: ProductRepository,
        store: ContentStore,
        policy: ImagePolicy,
    ):
        self.repo = repo
        self.product_repo = product_repo
        self.store = store
        self.policy = policy

    # ----- Helpers -----

    def validate_image(self, file: IncomingFile | None) -> None:
        if file is None or file.size <= 0:
            logger.error("Validate image failed. File is missing or empty.")
            raise EmptyInputError("file")

        if file.size > self.policy.max_bytes:
            logger.error(
                "Validate image %s failed. %d bytes > %d bytes.",
                file.file_name,
                file.size,
                self.policy.max_bytes,
            )
            raise OversizeError("file", self.policy.max_bytes)

        if not self.policy.is_supported(file.file_name):
            logger.error("Validate image %s failed. Unsupported type.", file.file_name)
            raise UnsupportedTypeError("file", file_extension(file.file_name))

        logger.info("Validate image with name: %s successfully.", file.file_name)

    def _require_product(self, session: Session, product_id: uuid.UUID) -> None:
        if self.product_repo.get_by_id(session, product_id) is None:
            raise NotFoundError("product", product_id)

    def _record(self, session: Session, product_id: uuid.UUID, file_name: str) -> Image:
        image = Image(file_name=file_name, product_id=product_id)
        try:
            self.repo.add(session, image)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError("image", str(e.__class__.__name__)) from e
        return image

    def _discard_blob(self, file_name: str) -> bool:
        """
        Remove a blob after its row is gone (or never made it).
        Returns False when nothing was removed.
        """
        try:
            removed = self.store.delete(file_name)
        except StorageIOError as e:
            logger.error("Removing blob %s failed; it is now orphaned. %s", file_name, e.message)
            return False
        if not removed:
            logger.warning("Blob %s was already missing from the content store.", file_name)
        return removed

    def to_read(self, image: Image) -> ImageRead:
        return ImageRead(
            id=image.id,
            product_id=image.product_id,
            file_name=image.file_name,
            url=self.store.public_url(image.file_name),
            created_at=image.created_at,
        )

    # ----- Upload / remove -----

    def upload(
        self,
        session: Session,
        product_id: str | uuid.UUID,
        file: IncomingFile | None,
    ) -> ServiceResult:
        """
        Run the upload pipeline for one file.

        Never raises: every failure is reported as a ServiceResult with
        its ErrorKind. If the catalog commit fails the written blob is
        deleted again.
        """
        stage = IngestionStage.START
        file_name: str | None = None
        try:
            pid = parse_id(product_id, "product")
            self._require_product(session, pid)

            self.validate_image(file)
            stage = IngestionStage.VALIDATED

            file_name = generate_filename(file.file_name)
            stage = IngestionStage.NAMED

            # The declared size is not trusted; the copy is capped as well
            self.store.save(file_name, file.stream, max_bytes=self.policy.max_bytes)
            stage = IngestionStage.WRITTEN

            image = self._record(session, pid, file_name)
            stage = IngestionStage.RECORDED
            session.refresh(image)

            logger.info("Uploaded new image with id: %s.", image.id)
            return ServiceResult.ok(self.to_read(image), IngestionStage.DONE)

        except ServiceError as e:
            logger.error(
                "Uploading new image failed at stage %s (%s). %s",
                stage.value,
                e.kind.value,
                e.message,
            )
            if stage is IngestionStage.WRITTEN and file_name:
                self._discard_blob(file_name)
            return ServiceResult.fail(e.kind, e.message, IngestionStage.ABORTED)

        except Exception as e:
            logger.exception("Uploading new image failed at stage %s.", stage.value)
            if stage is IngestionStage.WRITTEN and file_name:
                session.rollback()
                self._discard_blob(file_name)
            return ServiceResult.fail(ErrorKind.INTERNAL, str(e), IngestionStage.ABORTED)

    def remove(self, session: Session, image_id: str | uuid.UUID) -> ServiceResult:
        """
        Delete an image row, then its blob.

        The blob is only touched after the row deletion is committed,
        so a failed commit leaves both in place.
        """
        try:
            iid = parse_id(image_id, "image")
            image = self.repo.get_by_id(session, iid)
            if image is None:
                raise NotFoundError("image", iid)

            file_name = image.file_name
            try:
                self.repo.remove(session, image)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise PersistenceError("image", str(e.__class__.__name__)) from e

            logger.info("Deleted image with id: %s.", iid)
            self._discard_blob(file_name)
            return ServiceResult.ok()

        except ServiceError as e:
            logger.error("Deleting image with id: %s failed (%s). %s", image_id, e.kind.value, e.message)
            return ServiceResult.fail(e.kind, e.message)

        except Exception as e:
            logger.exception("Deleting image with id: %s failed.", image_id)
            return ServiceResult.fail(ErrorKind.INTERNAL, str(e))

    # ----- Reads -----

    def list_images(self, session: Session, product_id: uuid.UUID) -> list[ImageRead]:
        """
        List images of a product (oldest first).
        """
        if self.product_repo.get_by_id(session, product_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return [self.to_read(img) for img in self.repo.list_for_product(session, product_id)]

    def get_image(self, session: Session, image_id: uuid.UUID) -> ImageRead:
        image = self.repo.get_by_id(session, image_id)
        if image is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Image not found",
            )
        return self.to_read(image)
