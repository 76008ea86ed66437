# ishop/models/supplier.py
import uuid

from sqlmodel import SQLModel, Field


class Supplier(SQLModel, table=True):
    """
    Product supplier. Only `name` is required.
    """

    __tablename__ = "suppliers"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=255, index=True)

    phone_number: str | None = None
    address: str | None = None
    email: str | None = None
