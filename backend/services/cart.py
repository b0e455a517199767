from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, Field

from utils.formatting import to_money

ProductId = Union[int, str]


class CartItem(BaseModel):
    id: ProductId
    name: str
    price: Decimal
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.price * self.quantity)


class Cart:
    """
    Pending order lines keyed by product id.

    Lines keep their insertion order for display. The line price is a snapshot
    taken when the product is first added.
    """

    def __init__(self, items: Optional[List[CartItem]] = None):
        self._items: Dict[ProductId, CartItem] = {}
        for item in items or []:
            self._items[item.id] = item

    def add(self, product, quantity: int = 1, price: Optional[Decimal] = None) -> CartItem:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        existing = self._items.get(product.id)
        if existing is not None:
            existing.quantity += quantity
            return existing

        if price is None:
            price = getattr(product, "selling_price", None) or product.price
        item = CartItem(id=product.id, name=product.name, price=Decimal(str(price)), quantity=quantity)
        self._items[product.id] = item
        return item

    def set_quantity(self, product_id: ProductId, quantity: int) -> CartItem:
        item = self._items[product_id]
        item.quantity = max(1, int(quantity))
        return item

    def adjust_quantity(self, product_id: ProductId, delta: int) -> CartItem:
        """+/- buttons; never drops below one."""
        return self.set_quantity(product_id, self._items[product_id].quantity + delta)

    def remove(self, product_id: ProductId) -> None:
        self._items.pop(product_id, None)

    def total(self) -> Decimal:
        return to_money(sum((item.price * item.quantity for item in self._items.values()), Decimal("0")))

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __contains__(self, product_id) -> bool:
        return product_id in self._items
