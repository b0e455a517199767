from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import suppliers as crud_suppliers
from schemas.suppliers import Supplier, SupplierCreate, SupplierUpdate
from schemas.users import UserContext
from services.exceptions import ReferentialIntegrityError
from utils.auth_utils import require_role, get_user_identifier

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])
logger = logging.getLogger("suppliers")

supplier_roles = require_role(["admin", "supplier"])

@router.post("/", response_model=Supplier, status_code=status.HTTP_201_CREATED)
def create_supplier(
    supplier: SupplierCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    db_supplier = crud_suppliers.create_supplier(db, supplier, get_user_identifier(user))
    logger.info(f"Supplier '{db_supplier.name}' created by user {get_user_identifier(user)}")
    return db_supplier

@router.get("/", response_model=List[Supplier])
def read_suppliers(
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    return crud_suppliers.get_suppliers(db, search=search, skip=skip, limit=limit)

@router.get("/{supplier_id}", response_model=Supplier)
def read_supplier(supplier_id: int, db: Session = Depends(get_db), user: UserContext = Depends(supplier_roles)):
    db_supplier = crud_suppliers.get_supplier(db, supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return db_supplier

@router.patch("/{supplier_id}", response_model=Supplier)
def update_supplier(
    supplier_id: int,
    supplier: SupplierUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    db_supplier = crud_suppliers.get_supplier(db, supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    db_supplier = crud_suppliers.update_supplier(db, db_supplier, supplier, get_user_identifier(user))
    logger.info(f"Supplier '{db_supplier.name}' (ID: {supplier_id}) updated by user {get_user_identifier(user)}")
    return db_supplier

@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    db_supplier = crud_suppliers.get_supplier(db, supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    try:
        crud_suppliers.delete_supplier(db, db_supplier, get_user_identifier(user))
    except ReferentialIntegrityError as e:
        logger.warning(f"Refused to delete supplier {supplier_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info(f"Supplier (ID: {supplier_id}) deleted by user {get_user_identifier(user)}")
