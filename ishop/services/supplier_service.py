# ishop/services/supplier_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from ishop.models.supplier import Supplier
from ishop.repositories.supplier_repo import SupplierRepository
from ishop.schemas.supplier import SupplierCreate


class SupplierService:

    def __init__(self, repo: SupplierRepository):
        self.repo = repo

    def list_suppliers(self, session: Session, skip: int = 0, limit: int = 50) -> list[Supplier]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_supplier(self, session: Session, supplier_id: uuid.UUID) -> Supplier:
        supplier = self.repo.get_by_id(session, supplier_id)
        if not supplier:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Supplier not found",
            )
        return supplier

    def create_supplier(self, session: Session, payload: SupplierCreate) -> Supplier:
        supplier = Supplier(**payload.model_dump())
        return self.repo.create(session, supplier)

    def delete_supplier(self, session: Session, supplier_id: uuid.UUID) -> None:
        supplier = self.get_supplier(session, supplier_id)
        self.repo.delete(session, supplier)
