from sqlalchemy import func
from sqlalchemy.orm import Session
from models.categories import Category
from models.products import Product
from schemas.categories import CategoryCreate, CategoryUpdate
from services.exceptions import ReferentialIntegrityError
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict
from models.audit_mixin import local_now

def get_category(db: Session, category_id: int):
    return db.query(Category).filter(Category.id == category_id).first()

def get_category_by_name(db: Session, name: str):
    return db.query(Category).filter(func.lower(Category.name) == name.lower()).first()

def get_categories(db: Session, skip: int = 0, limit: int = 100):
    return db.query(Category).order_by(Category.name).offset(skip).limit(limit).all()

def create_category(db: Session, category: CategoryCreate, user_id: str):
    db_category = Category(**category.model_dump(), created_by=user_id)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category

def update_category(db: Session, db_category: Category, category: CategoryUpdate, user_id: str):
    old_values = sqlalchemy_to_dict(db_category)
    for key, value in category.model_dump(exclude_unset=True).items():
        setattr(db_category, key, value)
    db_category.updated_at = local_now()
    db_category.updated_by = user_id
    db.commit()
    db.refresh(db_category)
    create_audit_log(db, AuditLogCreate(
        table_name='categories',
        record_id=db_category.id,
        changed_by=user_id,
        action=AuditAction.UPDATE,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_category)
    ))
    return db_category

def delete_category(db: Session, db_category: Category, user_id: str):
    products_using = db.query(Product).filter(Product.category_id == db_category.id).count()
    if products_using > 0:
        raise ReferentialIntegrityError(f"Cannot delete category because it's used by {products_using} products")

    old_values = sqlalchemy_to_dict(db_category)
    record_id = db_category.id
    db.delete(db_category)
    db.commit()
    create_audit_log(db, AuditLogCreate(
        table_name='categories',
        record_id=record_id,
        changed_by=user_id,
        action=AuditAction.DELETE,
        old_values=old_values,
        new_values=None
    ))
    return True
