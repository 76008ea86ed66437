# ishop/routers/images.py
import uuid

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse
from sqlmodel import Session

from ishop.core.config import get_settings
from ishop.core.errors import ERROR_STATUS_CODES
from ishop.core.storage import ContentStore, get_content_store
from ishop.database import get_session
from ishop.repositories.image_repo import ImageRepository
from ishop.repositories.product_repo import ProductRepository
from ishop.schemas.image import ImageRead, ServiceResult
from ishop.services.image_service import ImageService, IncomingFile

router = APIRouter(tags=["Images"])

image_repo = ImageRepository()
product_repo = ProductRepository()


def get_image_service(
    store: ContentStore = Depends(get_content_store),
) -> ImageService:
    return ImageService(image_repo, product_repo, store, get_settings().image_policy())


def _incoming(file: UploadFile | None) -> IncomingFile | None:
    if file is None:
        return None
    size = file.size
    if size is None:
        file.file.seek(0, 2)
        size = file.file.tell()
        file.file.seek(0)
    return IncomingFile(file_name=file.filename or "", size=size, stream=file.file)


def _respond(result: ServiceResult, success_code: int) -> JSONResponse:
    code = success_code if result.success else ERROR_STATUS_CODES[result.error_kind]
    return JSONResponse(status_code=code, content=result.model_dump(mode="json"))


@router.post(
    "/products/{product_id}/images",
    response_model=ServiceResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image for a product",
)
def upload_image(
    product_id: str,
    file: UploadFile | None = File(default=None),
    session: Session = Depends(get_session),
    service: ImageService = Depends(get_image_service),
):
    """
    Upload one image for the product.

    - Accepts the extensions in IMAGE_ACCEPTED_FILE_TYPES.
    - Rejects files above IMAGE_MAX_BYTES.
    - Failures keep the ServiceResult body; the status code follows
      its error_kind (404, 400, 413, 415, 500).
    """
    result = service.upload(session, product_id, _incoming(file))
    return _respond(result, status.HTTP_201_CREATED)


@router.get(
    "/products/{product_id}/images",
    response_model=list[ImageRead],
)
def list_product_images(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: ImageService = Depends(get_image_service),
):
    """
    List images for a product.
    """
    return service.list_images(session, product_id)


@router.get("/images/{image_id}", response_model=ImageRead)
def get_image(
    image_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: ImageService = Depends(get_image_service),
):
    return service.get_image(session, image_id)


@router.delete(
    "/images/{image_id}",
    response_model=ServiceResult,
    summary="Delete an image by id",
)
def delete_image(
    image_id: str,
    session: Session = Depends(get_session),
    service: ImageService = Depends(get_image_service),
):
    """
    Delete the catalog row and then the stored blob.
    """
    result = service.remove(session, image_id)
    return _respond(result, status.HTTP_200_OK)
