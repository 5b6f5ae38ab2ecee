"""
sales/cart.py

The cashier's in-memory cart. Holds products, quantities and per-line
discount percents; prices come from the pricing engine on demand.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...database.repositories.products_repo import OutOfStock, Product
from ...utils.validators import try_parse_int
from ..pricing import (
    DiscountPolicy,
    InvalidInput,
    InvoiceTotals,
    LineInput,
    LineResult,
    aggregate,
    clamp_percent,
    compute_line,
    resolve_discount,
)


@dataclass
class CartItem:
    product: Product
    quantity: int = 1
    custom_discount: float = 0.0

    def line_input(self, policy: Optional[DiscountPolicy] = None) -> LineInput:
        return LineInput(
            unit_price=float(self.product.price),
            quantity=self.quantity,
            discount_percent=resolve_discount(self.custom_discount, policy),
        )

    def pricing(self, policy: Optional[DiscountPolicy] = None) -> LineResult:
        return compute_line(self.line_input(policy))


class Cart:
    def __init__(self):
        self.items: list[CartItem] = []

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def _find(self, product_id: int) -> CartItem | None:
        for it in self.items:
            if it.product.product_id == product_id:
                return it
        return None

    # ---------------------------- edits ----------------------------

    def add_product(self, product: Product) -> CartItem:
        """Add one unit, or one more unit if the product is already in the cart."""
        existing = self._find(product.product_id)
        if existing is not None:
            if existing.quantity >= product.stock_quantity:
                raise OutOfStock(product.name, existing.quantity + 1, product.stock_quantity)
            existing.quantity += 1
            return existing
        if product.stock_quantity < 1:
            raise OutOfStock(product.name, 1, product.stock_quantity)
        item = CartItem(product=product)
        self.items.append(item)
        return item

    def update_quantity(self, product_id: int, quantity) -> None:
        """Set a line's quantity. Zero or less removes the line; fractions are refused."""
        ok, qty = try_parse_int(quantity)
        if not ok:
            raise InvalidInput("quantity", quantity, "must be a whole number")
        if qty <= 0:
            self.remove(product_id)
            return
        it = self._find(product_id)
        if it is None:
            return
        if qty > it.product.stock_quantity:
            raise OutOfStock(it.product.name, qty, it.product.stock_quantity)
        it.quantity = qty

    def update_discount(self, product_id: int, discount) -> None:
        it = self._find(product_id)
        if it is not None:
            it.custom_discount = clamp_percent(discount)

    def remove(self, product_id: int) -> None:
        self.items = [it for it in self.items if it.product.product_id != product_id]

    def clear(self) -> None:
        self.items = []

    # ---------------------------- figures ----------------------------

    @property
    def subtotal(self) -> float:
        """Gross tax-inclusive amount before discounts."""
        return self.totals()[1].gross_amount

    def line_inputs(self, policy: Optional[DiscountPolicy] = None) -> list[LineInput]:
        return [it.line_input(policy) for it in self.items]

    def totals(self, policy: Optional[DiscountPolicy] = None) -> tuple[list[LineResult], InvoiceTotals]:
        return aggregate(self.line_inputs(policy))
