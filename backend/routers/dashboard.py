from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from crud import dashboard as crud_dashboard
from crud.app_config import get_store_settings
from schemas.dashboard import AdminDashboard, SupplierDashboard, Timeframe
from schemas.users import UserContext
from utils.auth_utils import require_role

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/admin", response_model=AdminDashboard)
def get_admin_dashboard(
    timeframe: Timeframe = Timeframe.TODAY,
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_role(["admin"]))
):
    """Sales figures for the admin home page: revenue, profit estimate, stock value and daily revenue."""
    settings = get_store_settings(db)
    return crud_dashboard.get_admin_dashboard(db, timeframe, currency=settings.currency)


@router.get("/supplier", response_model=SupplierDashboard)
def get_supplier_dashboard(
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_role(["admin", "supplier"]))
):
    settings = get_store_settings(db)
    return crud_dashboard.get_supplier_dashboard(db, currency=settings.currency)
