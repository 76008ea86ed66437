# ishop/schemas/supplier.py
import uuid

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class SupplierCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    phone_number: str | None = None
    address: str | None = None
    email: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("phone_number", "address", "email")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class SupplierRead(SQLModel):
    id: uuid.UUID
    name: str
    phone_number: str | None
    address: str | None
    email: str | None
