# gst_billing/business_logic/entities/line_item_entity.py
from dataclasses import dataclass, field, replace
from typing import Optional
from decimal import Decimal

@dataclass(frozen=True)
class LineItemEntity:
    """
    One product row of a cart or a saved invoice.

    name/unit/rate/packing are a snapshot of the product taken when the row
    was added, so later catalog edits never reach an existing row.
    """
    id: str
    product_id: Optional[int]
    name: str
    unit: str
    rate: Decimal
    quantity: Decimal
    packing: Optional[str] = field(default=None)

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.rate

    def with_quantity(self, quantity: Decimal) -> "LineItemEntity":
        return replace(self, quantity=quantity)
