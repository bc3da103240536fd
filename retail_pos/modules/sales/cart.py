# retail_pos/modules/sales/cart.py
"""
The pending sale: what the cashier is building before finalisation.

Nothing here touches the database. Prices are captured when a product is
added, so later catalog edits never change an open cart.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from ...database.repositories.products_repo import Product
from ...database.repositories.sales_repo import SaleItem
from ...errors import ValidationError
from ...utils.helpers import to_cents


@dataclass
class CartLine:
    product_id: int
    name: str
    unit_price: float
    quantity: int
    available: int

    @property
    def line_total(self) -> float:
        return to_cents(self.unit_price * self.quantity)


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)
    discount_percent: float = 0.0

    # ---- contents ----

    def _find(self, product_id: int) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add(self, product: Product, quantity: int = 1) -> CartLine:
        """
        Add `quantity` units, capped at the product's stock.
        Raises ValidationError when nothing more can be added.
        """
        if product.product_id is None:
            raise ValidationError("Product must be saved before it can be sold.")
        if product.stock <= 0:
            raise ValidationError(f"{product.name} is out of stock.")
        line = self._find(product.product_id)
        if line is None:
            line = CartLine(
                product_id=product.product_id,
                name=product.name,
                unit_price=float(product.price),
                quantity=0,
                available=int(product.stock),
            )
            self.lines.append(line)
        if line.quantity >= line.available:
            raise ValidationError(
                f"Only {line.available} units of {line.name} available."
            )
        line.quantity = min(line.available, line.quantity + max(1, int(quantity)))
        return line

    def set_quantity(self, product_id: int, quantity: int) -> int:
        """Set a line's quantity; <= 0 removes it, above stock is capped. Returns the applied quantity."""
        line = self._find(product_id)
        if line is None:
            raise ValidationError("Product is not in the cart.")
        if quantity <= 0:
            self.remove(product_id)
            return 0
        line.quantity = min(int(quantity), line.available)
        return line.quantity

    def remove(self, product_id: int) -> None:
        self.lines = [ln for ln in self.lines if ln.product_id != product_id]

    def clear(self) -> None:
        self.lines.clear()
        self.discount_percent = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.lines

    # ---- money ----

    def set_discount(self, percent: float) -> None:
        percent = float(percent or 0)
        if percent < 0 or percent > 100:
            raise ValidationError("Discount must be between 0 and 100 percent.")
        self.discount_percent = percent

    @property
    def subtotal(self) -> float:
        return to_cents(sum(ln.unit_price * ln.quantity for ln in self.lines))

    @property
    def discount_amount(self) -> float:
        return to_cents(self.subtotal * self.discount_percent / 100)

    @property
    def total(self) -> float:
        return to_cents(self.subtotal - self.discount_amount)

    def change_for(self, amount_received: float) -> float:
        """Change owed for a cash payment; never negative."""
        diff = to_cents(float(amount_received) - self.total)
        return diff if diff > 0 else 0.0

    def to_sale_items(self) -> list[SaleItem]:
        return [
            SaleItem(
                product_id=ln.product_id,
                product_name=ln.name,
                quantity=ln.quantity,
                unit_price=ln.unit_price,
            )
            for ln in self.lines
        ]
