# ishop/schemas/shipping.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from ishop.models.order import ShippingState


class ShippingCreate(SQLModel):
    """
    Payload for attaching a shipping record to an order.

    Backend derives:
      - order_id from the path
      - shipping_state = 'none'
    """

    model_config = ConfigDict(extra="forbid")

    charge: float = Field(ge=0)
    city: str
    district: str
    ward: str
    phone_number: str
    user_name: str | None = None
    shipping_date: datetime | None = None

    @field_validator("city", "district", "ward", "phone_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("user_name")
    @classmethod
    def normalize_user_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ShippingRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    shipping_date: datetime
    shipping_state: ShippingState
    charge: float
    city: str
    district: str
    ward: str
    phone_number: str
    user_name: str | None


class ShippingStateUpdate(SQLModel):
    """
    Admin payload to move a shipment along.
    """

    model_config = ConfigDict(extra="forbid")

    shipping_state: ShippingState
