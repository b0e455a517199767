"""Client checkout: cart -> order -> stock -> invoice -> share link."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from crud import clients as crud_clients
from crud import orders as crud_orders
from crud.products import get_products_by_ids
from schemas.app_config import StoreSettings
from schemas.invoices import InvoiceLanguage, InvoiceOrder
from schemas.orders import CheckoutResult, Order as OrderSchema, OrderCreate
from schemas.users import UserContext
from services.cart import Cart
from services.exceptions import BusinessValidationError, RecordNotFoundError
from services.invoice import render_invoice
from services.reconciliation import load_product_snapshot, reconcile_sale
from services.share import invoice_share_message, share_via_channel
from utils.auth_utils import get_user_identifier

logger = logging.getLogger(__name__)


def build_cart(db: Session, payload: OrderCreate) -> Cart:
    """Validate the requested lines against the catalogue and price them."""
    if not payload.client_id:
        raise BusinessValidationError("Please select a client")
    if not payload.items:
        raise BusinessValidationError("Please add at least one product to the order")

    products = {p.id: p for p in get_products_by_ids(db, [line.product_id for line in payload.items])}
    missing = sorted({line.product_id for line in payload.items} - set(products))
    if missing:
        raise RecordNotFoundError(f"Products not found: {', '.join(str(pid) for pid in missing)}")

    cart = Cart()
    for line in payload.items:
        cart.add(products[line.product_id], quantity=line.quantity, price=line.price)

    shortfalls = [
        f"{item.name} (requested {item.quantity}, in stock {products[item.id].stock})"
        for item in cart
        if item.quantity > products[item.id].stock
    ]
    if shortfalls:
        raise BusinessValidationError("Not enough stock for: " + ", ".join(shortfalls))
    return cart


def invoice_order_from(db_order) -> InvoiceOrder:
    return InvoiceOrder(
        id=db_order.id,
        invoice_number=db_order.invoice_number,
        client_name=db_order.client.name if db_order.client else None,
        created_at=db_order.created_at,
        total_amount=db_order.total_amount,
    )


def checkout(
    db: Session,
    payload: OrderCreate,
    user: UserContext,
    settings: StoreSettings,
    language: Optional[InvoiceLanguage] = None,
) -> CheckoutResult:
    """
    Place a client order.

    Validation happens up front. After that the header, the item batch and
    each stock update are separate writes: a failure later in the chain is
    reported in `warnings` and never undoes what was already saved. Invoice
    rendering and the share link do not depend on each other.
    """
    client = None
    if payload.client_id:
        client = crud_clients.get_client(db, payload.client_id)
        if client is None:
            raise RecordNotFoundError(f"Client {payload.client_id} not found")
    cart = build_cart(db, payload)
    user_id = get_user_identifier(user)
    warnings = []

    header = crud_orders.create_order_header(db, {
        "client_id": payload.client_id,
        "invoice_number": payload.invoice_number,
        "status": payload.status,
        "total_amount": cart.total(),
    }, user_id)
    logger.info(f"Order {header.id} created for client {client.id} by user {user_id}")

    items_saved = True
    stock_updates = None
    try:
        saved_items = crud_orders.create_order_items(db, header.id, cart.items)
    except Exception:
        db.rollback()
        logger.exception(f"Error saving items for order {header.id}")
        items_saved = False
        warnings.append(f"Order #{header.id} was created but its items could not be saved. Stock was not updated.")
    else:
        snapshot = load_product_snapshot(db, [item.product_id for item in saved_items])
        stock_updates = reconcile_sale(db, saved_items, snapshot, user_id=user_id, currency=settings.currency)
        warnings.extend(
            f"Could not update stock for {failure.name or failure.product_id}: {failure.error}"
            for failure in stock_updates.failed
        )

    db_order = crud_orders.get_order(db, header.id)

    invoice_html = None
    try:
        invoice_html = render_invoice(
            invoice_order_from(db_order),
            cart.items,
            language=language or payload.language or settings.invoice_language,
            currency=settings.currency,
        )
    except Exception:
        logger.exception(f"Error rendering invoice for order {header.id}")
        warnings.append("The order was saved but the invoice could not be generated.")

    share_url = None
    if payload.share_via_whatsapp:
        if client.phone:
            message = invoice_share_message(
                client.name, db_order.invoice_number or db_order.id, cart.total(), settings.currency
            )
            share_url = share_via_channel(
                client.phone, message,
                domain=settings.share_domain,
                country_code=settings.share_country_code,
            )
        else:
            warnings.append(f"{client.name} has no phone number; the invoice was not shared.")

    return CheckoutResult(
        order=OrderSchema.model_validate(db_order),
        items_saved=items_saved,
        stock_updates=stock_updates,
        invoice_html=invoice_html,
        share_url=share_url,
        warnings=warnings,
    )
