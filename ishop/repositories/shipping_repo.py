# ishop/repositories/shipping_repo.py
import uuid

from sqlmodel import Session, select

from ishop.models.order import Order, Shipping


class ShippingRepository:
    """
    Data access layer for orders' shipping records.
    """

    def get_order(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def get_for_order(self, session: Session, order_id: uuid.UUID) -> Shipping | None:
        stmt = select(Shipping).where(Shipping.order_id == order_id)
        return session.exec(stmt).first()

    def create(self, session: Session, shipping: Shipping) -> Shipping:
        session.add(shipping)
        session.commit()
        session.refresh(shipping)
        return shipping

    def update(self, session: Session, shipping: Shipping) -> Shipping:
        session.add(shipping)
        session.commit()
        session.refresh(shipping)
        return shipping
