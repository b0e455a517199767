from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from crud import categories as crud_categories
from schemas.categories import Category, CategoryCreate, CategoryUpdate
from schemas.users import UserContext
from services.exceptions import ReferentialIntegrityError
from utils.auth_utils import require_role, get_user_identifier

router = APIRouter(prefix="/categories", tags=["Categories"])
logger = logging.getLogger("categories")

admin_only = require_role(["admin"])
catalogue_roles = require_role(["admin", "supplier"])

@router.post("/", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    if crud_categories.get_category_by_name(db, category.name):
        raise HTTPException(status_code=400, detail="Category with this name already exists")
    db_category = crud_categories.create_category(db, category, get_user_identifier(user))
    logger.info(f"Category '{db_category.name}' created by user {get_user_identifier(user)}")
    return db_category

@router.get("/", response_model=List[Category])
def read_categories(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: UserContext = Depends(catalogue_roles)
):
    return crud_categories.get_categories(db, skip=skip, limit=limit)

@router.get("/{category_id}", response_model=Category)
def read_category(category_id: int, db: Session = Depends(get_db), user: UserContext = Depends(catalogue_roles)):
    db_category = crud_categories.get_category(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return db_category

@router.patch("/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    category: CategoryUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_category = crud_categories.get_category(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    if category.name is not None and category.name.lower() != db_category.name.lower():
        if crud_categories.get_category_by_name(db, category.name):
            raise HTTPException(status_code=400, detail="Category with this name already exists")
    db_category = crud_categories.update_category(db, db_category, category, get_user_identifier(user))
    logger.info(f"Category '{db_category.name}' (ID: {category_id}) updated by user {get_user_identifier(user)}")
    return db_category

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_category = crud_categories.get_category(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    try:
        crud_categories.delete_category(db, db_category, get_user_identifier(user))
    except ReferentialIntegrityError as e:
        logger.warning(f"Refused to delete category {category_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info(f"Category (ID: {category_id}) deleted by user {get_user_identifier(user)}")
