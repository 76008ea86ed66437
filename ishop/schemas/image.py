# ishop/schemas/image.py
import uuid
from datetime import datetime
from enum import Enum

from pydantic import ConfigDict
from sqlmodel import SQLModel

from ishop.core.errors import ErrorKind


class IngestionStage(str, Enum):
    """
    Linear upload pipeline:
        start -> validated -> named -> written -> recorded -> done
    Any step may end in `aborted`.
    """

    START = "start"
    VALIDATED = "validated"
    NAMED = "named"
    WRITTEN = "written"
    RECORDED = "recorded"
    DONE = "done"
    ABORTED = "aborted"


class ImageRead(SQLModel):
    """
    Read model for an uploaded image.
    """

    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    product_id: uuid.UUID
    file_name: str
    url: str
    created_at: datetime


class ServiceResult(SQLModel):
    """
    Uniform outcome of an image upload/removal.

    On failure `error_kind` and `message` are set and `payload` is None.
    `stage` is the last pipeline stage reached (`aborted` on failure).
    """

    success: bool = True
    error_kind: ErrorKind | None = None
    message: str | None = None
    stage: IngestionStage | None = None
    payload: ImageRead | None = None

    @classmethod
    def ok(
        cls,
        payload: ImageRead | None = None,
        stage: IngestionStage | None = None,
    ) -> "ServiceResult":
        return cls(success=True, payload=payload, stage=stage)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: str,
        stage: IngestionStage | None = None,
    ) -> "ServiceResult":
        return cls(success=False, error_kind=kind, message=message, stage=stage)
