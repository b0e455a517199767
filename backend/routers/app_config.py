from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigUpdate, AppConfigOut, StoreSettings
from schemas.users import UserContext
from schemas.invoices import InvoiceLanguage
from crud import app_config as crud_app_config
from utils.auth_utils import get_current_user, get_user_identifier, require_role

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/configurations/", response_model=List[AppConfigOut])
def get_configs(name: Optional[str] = None, db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    configs = crud_app_config.get_config(db, name=name)
    # Always return a list, even if empty
    return [configs] if name and configs else configs or []

@router.get("/configurations/store", response_model=StoreSettings)
def get_store_settings(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    """Effective store settings, stored values over environment defaults."""
    return crud_app_config.get_store_settings(db)

@router.put("/configurations/{name}", response_model=AppConfigOut)
def put_config(
    name: str,
    config: AppConfigUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_role(["admin"]))
):
    if name in ("currency", "share_country_code", "share_domain") and not config.value.strip():
        raise HTTPException(status_code=400, detail=f"'{name}' cannot be empty")
    if name == "invoice_language" and config.value not in {lang.value for lang in InvoiceLanguage}:
        raise HTTPException(status_code=400, detail="invoice_language must be one of: en, ar")
    db_config = crud_app_config.upsert_config(db, name, config, get_user_identifier(user))
    logger.info(f"Configuration '{name}' set to '{db_config.value}' by user {get_user_identifier(user)}")
    return db_config
