# ishop/routers/shippings.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ishop.database import get_session
from ishop.repositories.shipping_repo import ShippingRepository
from ishop.schemas.shipping import ShippingCreate, ShippingRead, ShippingStateUpdate
from ishop.services.shipping_service import ShippingService

router = APIRouter(prefix="/orders/{order_id}/shipping", tags=["Shipping"])

service = ShippingService(ShippingRepository())


@router.get("", response_model=ShippingRead)
def get_shipping(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_shipping(session, order_id)


@router.post("", response_model=ShippingRead, status_code=status.HTTP_201_CREATED)
def create_shipping(
    order_id: uuid.UUID,
    payload: ShippingCreate,
    session: Session = Depends(get_session),
):
    """
    Attach a shipping record to an order (one per order).
    """
    return service.create_shipping(session, order_id, payload)


@router.patch("", response_model=ShippingRead)
def update_shipping_state(
    order_id: uuid.UUID,
    payload: ShippingStateUpdate,
    session: Session = Depends(get_session),
):
    """
    Change shipping state:

      none     -> pending, canceled
      pending  -> shipping, canceled
      shipping -> delivered, canceled
    """
    return service.update_state(session, order_id, payload)
