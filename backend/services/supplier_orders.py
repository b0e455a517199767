import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from crud import supplier_orders as crud_supplier_orders
from crud import suppliers as crud_suppliers
from crud.products import get_products_by_ids
from models.supplier_orders import SupplierOrder, SupplierOrderStatus
from schemas.app_config import StoreSettings
from schemas.supplier_order_items import SupplierOrderItemCreateRequest
from schemas.supplier_orders import (
    SupplierOrder as SupplierOrderSchema,
    SupplierOrderCreate,
    SupplierOrderEdit,
    SupplierOrderSaveResult,
)
from schemas.users import UserContext
from services.exceptions import BusinessValidationError, OrderLockedError, RecordNotFoundError
from services.reconciliation import load_product_snapshot, reconcile_supplier_order
from utils.auth_utils import get_user_identifier
from utils.formatting import to_money
from utils.invoice_images import serialize_invoice_images

logger = logging.getLogger(__name__)

# Items of orders in these statuses are frozen
LOCKED_STATUSES = {SupplierOrderStatus.RECEIVED, SupplierOrderStatus.CANCELLED}


def supplier_order_total(lines: List[SupplierOrderItemCreateRequest]) -> Decimal:
    return to_money(sum((line.price * line.quantity for line in lines), Decimal("0")))


def _validate(db: Session, payload: SupplierOrderCreate) -> None:
    """All checks run before anything is written."""
    if not payload.supplier_id:
        raise BusinessValidationError("Please select a supplier")
    if not payload.items:
        raise BusinessValidationError("Please add at least one product to the order")
    if crud_suppliers.get_supplier(db, payload.supplier_id) is None:
        raise RecordNotFoundError(f"Supplier {payload.supplier_id} not found")

    requested = {line.product_id for line in payload.items}
    found = {product.id for product in get_products_by_ids(db, requested)}
    missing = sorted(requested - found)
    if missing:
        raise RecordNotFoundError(f"Products not found: {', '.join(str(pid) for pid in missing)}")


def _saved(db: Session, order_id: int, items_saved: bool, reconciliation=None, warnings=None):
    order = crud_supplier_orders.get_supplier_order(db, order_id)
    return SupplierOrderSaveResult(
        order=SupplierOrderSchema.model_validate(order),
        items_saved=items_saved,
        reconciliation=reconciliation,
        warnings=warnings or [],
    )


def create_supplier_order(
    db: Session,
    payload: SupplierOrderCreate,
    user: UserContext,
    settings: Optional[StoreSettings] = None,
) -> SupplierOrderSaveResult:
    """
    Record goods received from a supplier.

    The header, the item batch and each product update are separate writes.
    If the items cannot be saved the header stays and the result says so; if
    some product updates fail the others are kept and the failures are listed.
    """
    _validate(db, payload)
    user_id = get_user_identifier(user)
    currency = settings.currency if settings else "MAD"

    header = crud_supplier_orders.create_supplier_order(db, {
        "supplier_id": payload.supplier_id,
        "invoice_number": payload.invoice_number,
        "invoice_image": serialize_invoice_images(payload.invoice_image),
        "notes": payload.notes,
        "status": SupplierOrderStatus.PENDING,
        "total_amount": supplier_order_total(payload.items),
    }, user_id)
    logger.info(f"Supplier order {header.id} created by user {user_id}")

    try:
        crud_supplier_orders.create_supplier_order_items(db, header.id, payload.items)
    except Exception:
        db.rollback()
        logger.exception(f"Error saving items for supplier order {header.id}")
        warning = (
            f"Order #{header.id} was created but its items could not be saved. "
            "Stock was not updated; edit the order to add the items again."
        )
        return _saved(db, header.id, items_saved=False, warnings=[warning])

    snapshot = load_product_snapshot(db, [line.product_id for line in payload.items])
    reconciliation = reconcile_supplier_order(db, payload.items, snapshot, user_id=user_id, currency=currency)

    warnings = [
        f"Could not update stock for {failure.name or failure.product_id}: {failure.error}"
        for failure in reconciliation.failed
    ]
    return _saved(db, header.id, items_saved=True, reconciliation=reconciliation, warnings=warnings)


def get_editable_order(db: Session, order_id: int) -> SupplierOrder:
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if db_order is None:
        raise RecordNotFoundError("Supplier order not found")
    if db_order.status in LOCKED_STATUSES:
        if db_order.status == SupplierOrderStatus.RECEIVED:
            raise OrderLockedError("Cannot edit an order that has already been received")
        raise OrderLockedError("Cannot edit an order that has been cancelled")
    return db_order


def edit_supplier_order(
    db: Session,
    order_id: int,
    payload: SupplierOrderEdit,
    user: UserContext,
) -> SupplierOrderSaveResult:
    """
    Replace the items and header fields of a pending order.

    Old items are deleted before the new set is inserted. Stock is not
    touched on edit.
    """
    db_order = get_editable_order(db, order_id)
    _validate(db, payload)
    user_id = get_user_identifier(user)

    removed = crud_supplier_orders.delete_supplier_order_items(db, order_id)
    logger.info(f"Removed {removed} item(s) from supplier order {order_id} before edit")

    warnings = []
    items_saved = True
    try:
        crud_supplier_orders.create_supplier_order_items(db, order_id, payload.items)
    except Exception:
        db.rollback()
        logger.exception(f"Error saving new items for supplier order {order_id}")
        items_saved = False
        warnings.append(f"Order #{order_id} was updated but its new items could not be saved.")

    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    header = {
        "supplier_id": payload.supplier_id,
        "total_amount": supplier_order_total(payload.items) if items_saved else Decimal("0"),
    }
    # Header fields left out of the request keep their stored values
    if "invoice_number" in payload.model_fields_set:
        header["invoice_number"] = payload.invoice_number
    if "invoice_image" in payload.model_fields_set:
        header["invoice_image"] = serialize_invoice_images(payload.invoice_image)
    if "notes" in payload.model_fields_set:
        header["notes"] = payload.notes
    crud_supplier_orders.update_supplier_order(db, db_order, header, user_id)
    logger.info(f"Supplier order {order_id} edited by user {user_id}")
    return _saved(db, order_id, items_saved=items_saved, warnings=warnings)


def update_supplier_order_status(
    db: Session,
    order_id: int,
    status: SupplierOrderStatus,
    user: UserContext,
) -> SupplierOrder:
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if db_order is None:
        raise RecordNotFoundError("Supplier order not found")
    user_id = get_user_identifier(user)
    old_status = db_order.status
    db_order = crud_supplier_orders.set_supplier_order_status(db, db_order, status, user_id)
    logger.info(f"Supplier order {order_id} status {old_status.value} -> {status.value} by user {user_id}")
    return db_order


def delete_supplier_order(db: Session, order_id: int, user: UserContext) -> None:
    """Items go first, then the header. Stock already added is not reversed."""
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if db_order is None:
        raise RecordNotFoundError("Supplier order not found")
    user_id = get_user_identifier(user)
    crud_supplier_orders.delete_supplier_order(db, db_order, user_id)
    logger.info(f"Supplier order {order_id} deleted by user {user_id}")
