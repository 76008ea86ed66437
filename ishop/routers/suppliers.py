# ishop/routers/suppliers.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ishop.database import get_session
from ishop.repositories.supplier_repo import SupplierRepository
from ishop.schemas.supplier import SupplierCreate, SupplierRead
from ishop.services.supplier_service import SupplierService

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])

service = SupplierService(SupplierRepository())


@router.get("", response_model=list[SupplierRead])
def list_suppliers(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    return service.list_suppliers(session, skip=skip, limit=limit)


@router.get("/{supplier_id}", response_model=SupplierRead)
def get_supplier(
    supplier_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_supplier(session, supplier_id)


@router.post("", response_model=SupplierRead, status_code=status.HTTP_201_CREATED)
def create_supplier(
    payload: SupplierCreate,
    session: Session = Depends(get_session),
):
    return service.create_supplier(session, payload)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(
    supplier_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_supplier(session, supplier_id)
    return None
