# ishop/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def file_extension(file_name: str) -> str:
    """
    Lower-cased extension including the dot, "" if there is none.

    Everything from the last dot counts, so ".png" -> ".png".
    """
    dot = file_name.rfind(".")
    if dot == -1:
        return ""
    return file_name[dot:].lower()


class ImagePolicy:
    """
    Size/type policy applied to every uploaded image.

    Extensions are compared case-insensitively and always carry
    a leading dot (".png", ".jpg").
    """

    def __init__(self, max_bytes: int, allowed_extensions: set[str]):
        self.max_bytes = max_bytes
        self.allowed_extensions = {
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in allowed_extensions
        }

    def is_supported(self, file_name: str) -> bool:
        return file_extension(file_name) in self.allowed_extensions

    def __repr__(self) -> str:
        return (
            f"ImagePolicy(max_bytes={self.max_bytes}, "
            f"allowed_extensions={sorted(self.allowed_extensions)})"
        )


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Everything has a development default, so the app boots with a local
    SQLite catalog and a filesystem content store under ./wwwroot.

    Production (.env):
      - DATABASE_URL (Postgres connection string)
      - STORAGE_BACKEND=supabase
      - SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY
    """

    PROJECT_NAME: str = "iShop API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./ishop.db"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Content store
    STORAGE_BACKEND: Literal["local", "supabase"] = "local"
    MEDIA_ROOT: str = "wwwroot"
    IMAGE_FOLDER: str = "images"

    # Image policy
    IMAGE_MAX_BYTES: int = 2 * 1024 * 1024  # 2MB
    IMAGE_ACCEPTED_FILE_TYPES: list[str] = [".jpg", ".jpeg", ".png"]

    # Supabase Storage (only read when STORAGE_BACKEND=supabase)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_BUCKET: str = "assets"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("IMAGE_MAX_BYTES")
    @classmethod
    def positive_max_bytes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("IMAGE_MAX_BYTES must be positive")
        return v

    @field_validator("IMAGE_ACCEPTED_FILE_TYPES")
    @classmethod
    def not_empty_types(cls, v: list[str]) -> list[str]:
        cleaned = [ext.strip() for ext in v if ext.strip()]
        if not cleaned:
            raise ValueError("IMAGE_ACCEPTED_FILE_TYPES cannot be empty")
        return cleaned

    def image_policy(self) -> ImagePolicy:
        return ImagePolicy(
            max_bytes=self.IMAGE_MAX_BYTES,
            allowed_extensions=set(self.IMAGE_ACCEPTED_FILE_TYPES),
        )


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
