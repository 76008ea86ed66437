"""Content stores for uploaded asset bytes.

Two backends share one small interface:

  - ``LocalContentStore`` writes under ``<MEDIA_ROOT>/<IMAGE_FOLDER>`` and is
    served by the app under ``/media``.
  - ``SupabaseContentStore`` writes to a Supabase Storage bucket.

Blobs are addressed only by their generated file name; the catalog row keeps
that name, never a full path or URL.
"""

import logging
import os
import uuid
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO

from supabase import Client

from ishop.core.config import file_extension, get_settings
from ishop.core.errors import OversizeError, StorageIOError

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


def generate_filename(
    original_name: str,
    today: date | None = None,
    token: str | None = None,
) -> str:
    """
    Generate a storage name for an uploaded file.

    Pattern: <uuid4 hex><YYYYMMDD><.ext>, e.g.
        "3f2b...9c20261018.png"

    The UUID4 token carries 122 random bits; with n uploads the chance of
    any collision is about n^2 / 2^123, so even 10^12 blobs stay below
    10^-12. Stores additionally refuse to overwrite an existing name.

    Args:
        original_name: Client-side file name; only its extension is kept.
        today: Date stamp, defaults to the current local date.
        token: Random token, defaults to a fresh uuid4 hex.
    """
    ext = file_extension(original_name)
    token = token or uuid.uuid4().hex
    today = today or date.today()
    return f"{token}{today:%Y%m%d}{ext}"


class ContentStore:
    """Interface for blob storage addressed by file name."""

    def save(self, file_name: str, stream: BinaryIO, max_bytes: int | None = None) -> int:
        """
        Copy ``stream`` into the store under ``file_name``.

        Returns:
            Number of bytes written.

        Raises:
            OversizeError: if the stream holds more than ``max_bytes``;
                nothing is stored in that case.
            StorageIOError: if the blob cannot be written or already exists.
        """
        raise NotImplementedError

    def delete(self, file_name: str) -> bool:
        """
        Remove a blob.

        Returns:
            True if a blob was removed, False if none existed.

        Raises:
            StorageIOError: if removal fails for any other reason.
        """
        raise NotImplementedError

    def exists(self, file_name: str) -> bool:
        raise NotImplementedError

    def public_url(self, file_name: str) -> str:
        raise NotImplementedError


class LocalContentStore(ContentStore):
    """Filesystem store rooted at ``<root>/<folder>``."""

    def __init__(
        self,
        root: str | Path,
        folder: str = "images",
        base_url: str = "/media",
    ):
        self.root = Path(root)
        self.folder = folder
        self.base_url = base_url.rstrip("/")

    @property
    def folder_path(self) -> Path:
        return self.root / self.folder

    def _ensure_folder(self) -> Path:
        # Create the upload folder if it does not exist yet
        path = self.folder_path
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _check_name(file_name: str) -> str:
        if (
            not file_name
            or file_name in {".", ".."}
            or "/" in file_name
            or "\\" in file_name
            or "\x00" in file_name
        ):
            raise StorageIOError(f"Invalid file name: {file_name!r}")
        return file_name

    def path_for(self, file_name: str) -> Path:
        return self.folder_path / self._check_name(file_name)

    def save(self, file_name: str, stream: BinaryIO, max_bytes: int | None = None) -> int:
        """
        Write to a temporary file first, then publish it with a hard link.

        Readers never observe a partially written blob, and the link fails
        if the name is already taken instead of overwriting it.
        """
        self._check_name(file_name)
        try:
            folder = self._ensure_folder()
        except OSError as e:
            raise StorageIOError(f"Creating folder {self.folder_path} failed. {e}") from e

        final_path = folder / file_name
        tmp_path = folder / f".{file_name}.{uuid.uuid4().hex}.part"
        try:
            with open(tmp_path, "wb") as fh:
                written = 0
                while chunk := stream.read(COPY_CHUNK_SIZE):
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise OversizeError("file", max_bytes)
                    fh.write(chunk)
                fh.flush()
                os.fsync(fh.fileno())
            os.link(tmp_path, final_path)
        except FileExistsError as e:
            raise StorageIOError(f"Blob {file_name} already exists.") from e
        except OSError as e:
            raise StorageIOError(f"Copying {file_name} to {folder} failed. {e}") from e
        finally:
            tmp_path.unlink(missing_ok=True)

        written = final_path.stat().st_size
        logger.debug("Stored %s (%d bytes) at %s", file_name, written, final_path)
        return written

    def delete(self, file_name: str) -> bool:
        path = self.path_for(file_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageIOError(f"Deleting {file_name} failed. {e}") from e
        return True

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).is_file()

    def public_url(self, file_name: str) -> str:
        return f"{self.base_url}/{self.folder}/{self._check_name(file_name)}"


class SupabaseContentStore(ContentStore):
    """
    Supabase Storage bucket store.

    Objects live at "<folder>/<file_name>" inside the bucket. Uploads use
    upsert=false so an existing object is never replaced.
    """

    def __init__(self, client: Client, bucket: str = "assets", folder: str = "images"):
        self.client = client
        self.bucket = bucket
        self.folder = folder

    def _object_path(self, file_name: str) -> str:
        return f"{self.folder}/{file_name}"

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def save(self, file_name: str, stream: BinaryIO, max_bytes: int | None = None) -> int:
        data = stream.read() if max_bytes is None else stream.read(max_bytes + 1)
        if max_bytes is not None and len(data) > max_bytes:
            raise OversizeError("file", max_bytes)
        try:
            self._bucket().upload(self._object_path(file_name), data, {"upsert": "false"})
        except Exception as e:
            # storage3 raises its own exception types per version
            raise StorageIOError(f"Uploading {file_name} to bucket {self.bucket} failed. {e}") from e
        return len(data)

    def delete(self, file_name: str) -> bool:
        try:
            removed = self._bucket().remove([self._object_path(file_name)])
        except Exception as e:
            raise StorageIOError(f"Deleting {file_name} from bucket {self.bucket} failed. {e}") from e
        return bool(removed)

    def exists(self, file_name: str) -> bool:
        entries = self._bucket().list(self.folder, {"search": file_name})
        return any(entry.get("name") == file_name for entry in entries or [])

    def public_url(self, file_name: str) -> str:
        return self._bucket().get_public_url(self._object_path(file_name))


@lru_cache
def get_content_store() -> ContentStore:
    """
    Content store selected by STORAGE_BACKEND (cached per process).
    """
    settings = get_settings()
    if settings.STORAGE_BACKEND == "supabase":
        from ishop.core.supabase_client import supabase_admin

        return SupabaseContentStore(
            supabase_admin(),
            bucket=settings.SUPABASE_BUCKET,
            folder=settings.IMAGE_FOLDER,
        )
    return LocalContentStore(settings.MEDIA_ROOT, settings.IMAGE_FOLDER)
