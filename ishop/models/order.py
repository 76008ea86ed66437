# ishop/models/order.py
import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlmodel import SQLModel, Field


class ShippingState(str, Enum):
    NONE = "none"
    PENDING = "pending"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    CANCELED = "canceled"


class Order(SQLModel, table=True):
    """
    Customer order. Only the columns shipping depends on are kept here.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # pending | confirmed | shipped | canceled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    total_amount: float = Field(
        default=0,
        ge=0,
        description="Final amount for this order",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Shipping(SQLModel, table=True):
    """
    Delivery record for an order (one per order).

    Required (NOT NULL) columns:
      - charge, city, district, ward, phone_number
    """

    __tablename__ = "shippings"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        unique=True,
        index=True,
    )

    shipping_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the parcel was (or will be) handed to the carrier",
    )

    shipping_state: ShippingState = Field(
        default=ShippingState.NONE,
        index=True,
    )

    charge: float = Field(ge=0, description="Shipping fee")
    ward: str = Field(description="Ward / commune")
    district: str = Field(description="District")
    city: str = Field(description="City / province")
    phone_number: str = Field(description="Contact phone number for delivery")

    user_name: str | None = Field(
        default=None,
        description="Name of the receiver (optional)",
    )
