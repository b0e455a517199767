from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import products as crud_products
from crud.categories import get_category
from schemas.products import Product, ProductCreate, ProductUpdate, ProductStockUpdate
from schemas.users import UserContext
from services.exceptions import ReferentialIntegrityError
from utils.auth_utils import require_role, get_user_identifier

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger("products")

admin_only = require_role(["admin"])
catalogue_roles = require_role(["admin", "supplier"])

def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and get_category(db, category_id) is None:
        raise HTTPException(status_code=400, detail=f"Category with ID {category_id} not found.")

@router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(catalogue_roles)
):
    """Suppliers can add products while recording a delivery."""
    _check_category(db, product.category_id)
    db_product = crud_products.create_product(db, product, get_user_identifier(user))
    logger.info(f"Product '{db_product.name}' created with stock {db_product.stock} by user {get_user_identifier(user)}")
    return db_product

@router.get("/", response_model=List[Product])
def read_products(
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: UserContext = Depends(catalogue_roles)
):
    return crud_products.get_products(db, search=search, category_id=category_id, skip=skip, limit=limit)

@router.get("/{product_id}", response_model=Product)
def read_product(product_id: int, db: Session = Depends(get_db), user: UserContext = Depends(catalogue_roles)):
    db_product = crud_products.get_product(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product

@router.patch("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    product: ProductUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_product = crud_products.get_product(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    _check_category(db, product.category_id)
    db_product = crud_products.update_product(db, db_product, product, get_user_identifier(user))
    logger.info(f"Product '{db_product.name}' (ID: {product_id}) updated by user {get_user_identifier(user)}")
    return db_product

@router.patch("/{product_id}/stock", response_model=Product)
def set_product_stock(
    product_id: int,
    stock_update: ProductStockUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    """Manual stock correction from the inventory page."""
    db_product = crud_products.get_product(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    old_stock = db_product.stock
    db_product = crud_products.set_product_stock(db, db_product, stock_update.stock, get_user_identifier(user))
    logger.info(f"Stock for '{db_product.name}' (ID: {product_id}) set {old_stock} -> {db_product.stock} by user {get_user_identifier(user)}")
    return db_product

@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_product = crud_products.get_product(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    try:
        crud_products.delete_product(db, db_product, get_user_identifier(user))
    except ReferentialIntegrityError as e:
        logger.warning(f"Refused to delete product {product_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info(f"Product (ID: {product_id}) deleted by user {get_user_identifier(user)}")
