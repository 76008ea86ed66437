# ishop/services/shipping_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from ishop.models.order import Shipping, ShippingState
from ishop.repositories.shipping_repo import ShippingRepository
from ishop.schemas.shipping import ShippingCreate, ShippingStateUpdate

ALLOWED_TRANSITIONS: dict[ShippingState, set[ShippingState]] = {
    ShippingState.NONE: {ShippingState.PENDING, ShippingState.CANCELED},
    ShippingState.PENDING: {ShippingState.SHIPPING, ShippingState.CANCELED},
    ShippingState.SHIPPING: {ShippingState.DELIVERED, ShippingState.CANCELED},
    ShippingState.DELIVERED: set(),
    ShippingState.CANCELED: set(),
}


class ShippingService:
    """
    Business logic for order shipping records.

    Responsibilities:
      - one shipping record per existing order
      - simple shipping state machine (see ALLOWED_TRANSITIONS)
    """

    def __init__(self, repo: ShippingRepository):
        self.repo = repo

    def _require_order(self, session: Session, order_id: uuid.UUID) -> None:
        if self.repo.get_order(session, order_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

    def get_shipping(self, session: Session, order_id: uuid.UUID) -> Shipping:
        self._require_order(session, order_id)
        shipping = self.repo.get_for_order(session, order_id)
        if not shipping:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Shipping not found for this order",
            )
        return shipping

    def create_shipping(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: ShippingCreate,
    ) -> Shipping:
        self._require_order(session, order_id)
        if self.repo.get_for_order(session, order_id) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Order already has a shipping record",
            )

        data = payload.model_dump(exclude_none=True)
        shipping = Shipping(order_id=order_id, **data)
        return self.repo.create(session, shipping)

    def update_state(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: ShippingStateUpdate,
    ) -> Shipping:
        """
        Move a shipment to a new state. Invalid transitions raise 400.
        """
        shipping = self.get_shipping(session, order_id)
        current = shipping.shipping_state
        new = payload.shipping_state

        if current == new:
            return shipping

        if new not in ALLOWED_TRANSITIONS[current]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid shipping transition: {current.value} -> {new.value}",
            )

        shipping.shipping_state = new
        return self.repo.update(session, shipping)
