from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import orders as crud_orders
from crud.app_config import get_store_settings
from models.orders import OrderStatus
from schemas.invoices import InvoiceFormat, InvoiceLanguage, InvoiceMode, InvoiceOrder
from schemas.orders import CheckoutResult, Order, OrderCreate, OrderStatusUpdate, ShareLink
from schemas.users import UserContext
from services.cart import CartItem
from services.checkout import checkout, invoice_order_from
from services.exceptions import BusinessValidationError, InvoiceExportError, RecordNotFoundError
from services.invoice import invoice_items_from_order, render_invoice
from services.invoice_delivery import export_pdf, invoice_filename, print_document
from services.share import invoice_share_message, share_via_channel
from utils.auth_utils import require_role, get_user_identifier

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger("orders")

admin_only = require_role(["admin"])


def invoice_response(
    order: InvoiceOrder,
    items: List[CartItem],
    language: InvoiceLanguage,
    fmt: InvoiceFormat,
    mode: InvoiceMode,
    currency: str,
) -> Response:
    """Serve a rendered invoice for the print dialog or as a file download."""
    if fmt == InvoiceFormat.PDF:
        try:
            content = export_pdf(order, items, language=language, currency=currency)
        except InvoiceExportError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
        disposition = "inline" if mode == InvoiceMode.PRINT else "attachment"
        return Response(
            content=content,
            media_type="application/pdf",
            headers={"Content-Disposition": f'{disposition}; filename="{invoice_filename(order.id, "pdf")}"'},
        )

    html = render_invoice(order, items, language=language, currency=currency)
    if mode == InvoiceMode.PRINT:
        return HTMLResponse(content=print_document(html))
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'attachment; filename="{invoice_filename(order.id, "html")}"'},
    )


@router.post("/", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
def create_order(
    order: OrderCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    """
    Place a client order from the cart.

    The order is saved even when a later step (items, stock, invoice) fails;
    those failures come back in `warnings`.
    """
    settings = get_store_settings(db)
    try:
        result = checkout(db, order, user, settings)
    except BusinessValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception(f"Error placing order for client {order.client_id}")
        raise HTTPException(status_code=500, detail=f"Failed to place order: {str(e)}")

    logger.info(
        f"Order (ID: {result.order.id}) placed for client {order.client_id} "
        f"with {len(result.order.items)} item(s) by user {get_user_identifier(user)}"
    )
    return result


@router.get("/", response_model=List[Order])
def read_orders(
    skip: int = 0,
    limit: int = 100,
    status: Optional[OrderStatus] = None,
    client_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    return crud_orders.list_orders(db, skip=skip, limit=limit, status=status, client_id=client_id)


@router.get("/{order_id}", response_model=Order)
def read_order(order_id: int, db: Session = Depends(get_db), user: UserContext = Depends(admin_only)):
    db_order = crud_orders.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return db_order


@router.patch("/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: int,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_order = crud_orders.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    old_status = db_order.status
    crud_orders.update_order_status(db, db_order, status_update.status, get_user_identifier(user))
    logger.info(
        f"Order (ID: {order_id}) status {old_status.value} -> {status_update.status.value} "
        f"by user {get_user_identifier(user)}"
    )
    return crud_orders.get_order(db, order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, db: Session = Depends(get_db), user: UserContext = Depends(admin_only)):
    db_order = crud_orders.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    crud_orders.delete_order(db, db_order, get_user_identifier(user))
    logger.info(f"Order (ID: {order_id}) deleted by user {get_user_identifier(user)}")


@router.get("/{order_id}/invoice")
def get_order_invoice(
    order_id: int,
    language: Optional[InvoiceLanguage] = None,
    format: InvoiceFormat = InvoiceFormat.HTML,
    mode: InvoiceMode = InvoiceMode.PRINT,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_order = crud_orders.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    settings = get_store_settings(db)
    return invoice_response(
        invoice_order_from(db_order),
        invoice_items_from_order(db_order),
        language=language or InvoiceLanguage(settings.invoice_language),
        fmt=format,
        mode=mode,
        currency=settings.currency,
    )


@router.post("/{order_id}/share", response_model=ShareLink)
def share_order_invoice(order_id: int, db: Session = Depends(get_db), user: UserContext = Depends(admin_only)):
    """WhatsApp deep link carrying the invoice summary for the order's client."""
    db_order = crud_orders.get_order(db, order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if db_order.client is None or not db_order.client.phone:
        raise HTTPException(status_code=400, detail="Client has no phone number")

    settings = get_store_settings(db)
    total = sum((item.line_total for item in invoice_items_from_order(db_order)), 0)
    message = invoice_share_message(
        db_order.client.name, db_order.invoice_number or db_order.id, total, settings.currency
    )
    url = share_via_channel(
        db_order.client.phone, message,
        domain=settings.share_domain,
        country_code=settings.share_country_code,
    )
    logger.info(f"Share link for order {order_id} built by user {get_user_identifier(user)}")
    return ShareLink(url=url, message=message)
