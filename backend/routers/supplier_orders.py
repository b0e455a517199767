from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import supplier_orders as crud_supplier_orders
from crud.app_config import get_store_settings
from models.supplier_orders import SupplierOrderStatus
from routers.orders import invoice_response
from schemas.invoices import InvoiceFormat, InvoiceLanguage, InvoiceMode, InvoiceOrder
from schemas.supplier_orders import (
    SupplierOrder,
    SupplierOrderCreate,
    SupplierOrderEdit,
    SupplierOrderSaveResult,
    SupplierOrderStatusUpdate,
    SupplierOrderSummary,
    InvoiceImageUploadRequest,
)
from schemas.users import UserContext
from services import supplier_orders as supplier_order_service
from services.exceptions import BusinessValidationError, OrderLockedError, RecordNotFoundError
from services.invoice import invoice_items_from_order
from utils.auth_utils import require_role, get_user_identifier
from utils.invoice_images import append_invoice_image
from utils.s3_utils import generate_presigned_upload_url, generate_presigned_download_url

router = APIRouter(prefix="/supplier-orders", tags=["Supplier Orders"])
logger = logging.getLogger("supplier_orders")

supplier_roles = require_role(["admin", "supplier"])


@router.post("/", response_model=SupplierOrderSaveResult, status_code=status.HTTP_201_CREATED)
def create_supplier_order(
    order: SupplierOrderCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    """
    Record a supplier delivery. Stock of every product on the order goes up
    and purchase prices follow the negotiated line prices.
    """
    settings = get_store_settings(db)
    try:
        result = supplier_order_service.create_supplier_order(db, order, user, settings)
    except BusinessValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error creating supplier order for supplier {order.supplier_id}")
        raise HTTPException(status_code=500, detail=f"Failed to create supplier order: {str(e)}")

    if result.reconciliation and result.reconciliation.notification:
        logger.info(result.reconciliation.notification)
    return result


@router.get("/", response_model=List[SupplierOrderSummary])
def read_supplier_orders(
    skip: int = 0,
    limit: int = crud_supplier_orders.SUMMARY_PAGE_SIZE,
    status: Optional[SupplierOrderStatus] = None,
    supplier_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    return crud_supplier_orders.list_supplier_order_summaries(
        db, skip=skip, limit=limit, status=status, supplier_id=supplier_id
    )


@router.get("/{order_id}", response_model=SupplierOrder)
def read_supplier_order(order_id: int, db: Session = Depends(get_db), user: UserContext = Depends(supplier_roles)):
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Supplier order not found")
    return db_order


@router.put("/{order_id}", response_model=SupplierOrderSaveResult)
def edit_supplier_order(
    order_id: int,
    order: SupplierOrderEdit,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    """Replace the items of a pending order. Stock is not adjusted on edit."""
    try:
        return supplier_order_service.edit_supplier_order(db, order_id, order, user)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OrderLockedError as e:
        logger.warning(f"Refused edit of supplier order {order_id} by user {get_user_identifier(user)}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except BusinessValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error editing supplier order {order_id}")
        raise HTTPException(status_code=500, detail=f"Failed to update supplier order: {str(e)}")


@router.patch("/{order_id}/status", response_model=SupplierOrder)
def update_supplier_order_status(
    order_id: int,
    status_update: SupplierOrderStatusUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    try:
        supplier_order_service.update_supplier_order_status(db, order_id, status_update.status, user)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return crud_supplier_orders.get_supplier_order(db, order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier_order(order_id: int, db: Session = Depends(get_db), user: UserContext = Depends(supplier_roles)):
    try:
        supplier_order_service.delete_supplier_order(db, order_id, user)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{order_id}/invoice")
def get_supplier_order_invoice(
    order_id: int,
    language: Optional[InvoiceLanguage] = None,
    format: InvoiceFormat = InvoiceFormat.HTML,
    mode: InvoiceMode = InvoiceMode.PRINT,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Supplier order not found")
    settings = get_store_settings(db)
    header = InvoiceOrder(
        id=db_order.id,
        invoice_number=db_order.invoice_number,
        client_name=db_order.supplier.name if db_order.supplier else None,
        created_at=db_order.created_at,
        total_amount=db_order.total_amount,
    )
    return invoice_response(
        header,
        invoice_items_from_order(db_order),
        language=language or InvoiceLanguage(settings.invoice_language),
        fmt=format,
        mode=mode,
        currency=settings.currency,
    )


@router.post("/{order_id}/invoice-image-upload-url")
def get_invoice_image_upload_url(
    order_id: int,
    request_body: InvoiceImageUploadRequest,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    """Get a pre-signed URL for uploading a photo of the supplier's paper invoice."""
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if not db_order:
        raise HTTPException(status_code=404, detail="Supplier order not found")

    try:
        upload_data = generate_presigned_upload_url(object_id=order_id, filename=request_body.filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to generate presigned URL for supplier order {order_id}")
        raise HTTPException(status_code=500, detail=f"Failed to generate upload URL: {str(e)}")

    crud_supplier_orders.update_supplier_order(
        db, db_order,
        {"invoice_image": append_invoice_image(db_order.invoice_image, upload_data["s3_path"])},
        get_user_identifier(user),
    )
    logger.info(f"Invoice image slot {upload_data['s3_path']} added to supplier order {order_id}")
    return {"upload_url": upload_data["upload_url"], "s3_path": upload_data["s3_path"]}


@router.get("/{order_id}/invoice-images/{index}/download-url")
def get_invoice_image_download_url(
    order_id: int,
    index: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(supplier_roles)
):
    """Get a pre-signed URL for downloading one of the order's invoice images."""
    db_order = crud_supplier_orders.get_supplier_order(db, order_id)
    if not db_order:
        raise HTTPException(status_code=404, detail="Supplier order not found")
    images = db_order.invoice_images
    if index < 0 or index >= len(images):
        raise HTTPException(status_code=404, detail="Invoice image not found")

    image = images[index]
    if not image.startswith('s3://'):
        raise HTTPException(status_code=400, detail="Invoice image is not stored in S3.")

    try:
        download_url = generate_presigned_download_url(s3_path=image)
        return {"download_url": download_url}
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to generate download URL for supplier order {order_id}")
        raise HTTPException(status_code=500, detail=f"Failed to generate download URL: {str(e)}")
