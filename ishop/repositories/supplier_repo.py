# ishop/repositories/supplier_repo.py
import uuid

from sqlmodel import Session, select

from ishop.models.supplier import Supplier


class SupplierRepository:

    def get_by_id(self, session: Session, supplier_id: uuid.UUID) -> Supplier | None:
        return session.get(Supplier, supplier_id)

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[Supplier]:
        stmt = select(Supplier).order_by(Supplier.name).offset(skip).limit(limit)
        return session.exec(stmt).all()

    # CRUD
    def create(self, session: Session, supplier: Supplier) -> Supplier:
        session.add(supplier)
        session.commit()
        session.refresh(supplier)
        return supplier

    def delete(self, session: Session, supplier: Supplier) -> None:
        session.delete(supplier)
        session.commit()
