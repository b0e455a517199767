from sqlalchemy.orm import Session
from models.app_config import AppConfig
from models.audit_mixin import local_now
from schemas.app_config import AppConfigUpdate, StoreSettings
import os

from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict

# Store settings and their environment defaults
DEFAULT_SETTINGS = {
    "currency": os.getenv("STORE_CURRENCY", "MAD"),
    "share_country_code": os.getenv("SHARE_COUNTRY_CODE", "+212"),
    "share_domain": os.getenv("SHARE_DOMAIN", "wa.me"),
    "invoice_language": os.getenv("INVOICE_LANGUAGE", "ar"),
}


def get_config(db: Session, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name).first()
    return db.query(AppConfig).order_by(AppConfig.name).all()


def upsert_config(db: Session, name: str, config: AppConfigUpdate, user_id: str):
    db_config = db.query(AppConfig).filter(AppConfig.name == name).first()
    if db_config:
        old_values = sqlalchemy_to_dict(db_config)
        db_config.value = config.value
        db_config.updated_at = local_now()
        db_config.updated_by = user_id
        action = AuditAction.UPDATE
    else:
        db_config = AppConfig(name=name, value=config.value, created_by=user_id)
        db.add(db_config)
        old_values = {}
        action = AuditAction.CREATE
    db.commit()
    db.refresh(db_config)

    log_entry = AuditLogCreate(
        table_name='app_config',
        record_id=db_config.id,
        changed_by=user_id,
        action=action,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_config)
    )
    create_audit_log(db, log_entry)
    return db_config


def get_store_settings(db: Session) -> StoreSettings:
    stored = {
        c.name: c.value
        for c in db.query(AppConfig).filter(AppConfig.name.in_(DEFAULT_SETTINGS.keys())).all()
    }
    return StoreSettings(**{**DEFAULT_SETTINGS, **stored})
