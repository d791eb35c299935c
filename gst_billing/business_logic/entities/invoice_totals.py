# gst_billing/business_logic/entities/invoice_totals.py
from dataclasses import dataclass, field
from decimal import Decimal

from gst_billing.constants import WEIGHT_SENTINEL

@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    grand_total: Decimal
    total_quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    total_weight_grams: Decimal = field(default_factory=lambda: Decimal("0"))
    weight_display: str = field(default=WEIGHT_SENTINEL)
    amount_in_words: str = field(default="")

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount

    @property
    def has_weight(self) -> bool:
        return self.weight_display != WEIGHT_SENTINEL
