"""
Per-product stock and price updates that follow a saved order.

Each product is written with its own update call. A failure on one product is
logged and recorded in the result, and the loop moves on; updates that already
succeeded are kept. Product state is read once before the loop and the
in-memory snapshot is advanced after every write, so a product that appears on
several lines accumulates all of them.
"""
from decimal import Decimal
import logging
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from crud import products as crud_products
from models.products import Product
from schemas.products import ProductSnapshot
from schemas.reconciliation import (
    FailedAdjustment,
    PriceChange,
    ReconciliationResult,
    StockAdjustment,
)
from utils.formatting import format_currency, to_money

logger = logging.getLogger(__name__)

ProductUpdater = Callable[..., object]


def load_product_snapshot(db: Session, product_ids: Iterable[int]) -> Dict[int, ProductSnapshot]:
    """Read current stock and prices for every product id in one query."""
    ids = set(product_ids)
    if not ids:
        return {}
    products = db.query(Product).filter(Product.id.in_(ids)).all()
    return {product.id: ProductSnapshot.model_validate(product) for product in products}


def price_change_notification(changes: List[PriceChange], currency: str = "MAD") -> Optional[str]:
    """One message listing every applied price change, or None when there were none."""
    if not changes:
        return None
    parts = [
        f"{change.name}: {format_currency(change.old_price, currency)} → {format_currency(change.new_price, currency)}"
        for change in changes
    ]
    noun = "product" if len(changes) == 1 else "products"
    return f"Updated price for {len(changes)} {noun}: " + "; ".join(parts)


def _purchase_update(current: ProductSnapshot, quantity: int, price: Decimal):
    updates = {"stock": current.stock + quantity}
    price_change = None
    if to_money(price) != to_money(current.price):
        updates["price"] = to_money(price)
        price_change = (current.price, to_money(price))
    return updates, price_change


def _sale_update(current: ProductSnapshot, quantity: int, price: Decimal):
    updates = {"stock": max(0, current.stock - quantity)}
    price_change = None
    current_selling = current.selling_price or current.price
    if to_money(price) != to_money(current_selling):
        updates["selling_price"] = to_money(price)
        price_change = (current_selling, to_money(price))
    return updates, price_change


def _apply_batch(
    db: Session,
    lines,
    snapshot: Dict[int, ProductSnapshot],
    stage,
    update_product: Optional[ProductUpdater],
    user_id: Optional[str],
    currency: str,
) -> ReconciliationResult:
    update_product = update_product or crud_products.update_product_fields
    result = ReconciliationResult()

    for line in lines:
        product_id = line.product_id
        current = snapshot.get(product_id)
        if current is None:
            logger.error(f"Product {product_id} was not in the snapshot; skipping its stock update")
            result.failed.append(FailedAdjustment(product_id=product_id, error="Product not found"))
            continue

        updates, price_change = stage(current, line.quantity, line.price)
        try:
            update_product(db, product_id, updates, user_id)
        except Exception as e:
            db.rollback()
            logger.exception(f"Error updating product {product_id} ({current.name})")
            result.failed.append(FailedAdjustment(product_id=product_id, name=current.name, error=str(e)))
            continue

        result.succeeded.append(StockAdjustment(
            product_id=product_id,
            name=current.name,
            old_stock=current.stock,
            new_stock=updates["stock"],
        ))
        if price_change is not None:
            old_price, new_price = price_change
            result.price_changes.append(PriceChange(
                product_id=product_id,
                name=current.name,
                old_price=old_price,
                new_price=new_price,
            ))
        snapshot[product_id] = current.model_copy(update=updates)

    result.notification = price_change_notification(result.price_changes, currency)
    if result.failed:
        logger.warning(
            f"Stock update finished with {len(result.failed)} failure(s) out of "
            f"{len(result.succeeded) + len(result.failed)} line(s)"
        )
    return result


def reconcile_supplier_order(
    db: Session,
    lines,
    snapshot: Dict[int, ProductSnapshot],
    update_product: Optional[ProductUpdater] = None,
    user_id: Optional[str] = None,
    currency: str = "MAD",
) -> ReconciliationResult:
    """
    Received goods: stock goes up by the ordered quantity and the purchase
    price is replaced when the negotiated line price differs from it.
    """
    return _apply_batch(db, lines, snapshot, _purchase_update, update_product, user_id, currency)


def reconcile_sale(
    db: Session,
    lines,
    snapshot: Dict[int, ProductSnapshot],
    update_product: Optional[ProductUpdater] = None,
    user_id: Optional[str] = None,
    currency: str = "MAD",
) -> ReconciliationResult:
    """
    Sold goods: stock goes down by the sold quantity, floored at zero, and
    the selling price follows the price charged on the line.
    """
    return _apply_batch(db, lines, snapshot, _sale_update, update_product, user_id, currency)
