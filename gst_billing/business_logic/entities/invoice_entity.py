# gst_billing/business_logic/entities/invoice_entity.py
from dataclasses import dataclass, field
from typing import Tuple
from decimal import Decimal

from .line_item_entity import LineItemEntity
from .tax_configuration import TaxConfiguration

@dataclass(frozen=True)
class InvoiceEntity:
    """
    A saved bill. Frozen: history, printing and CSV export only ever read it,
    and a correction is made by issuing a new bill.
    """
    id: str                 # Bill No, allocated from BusinessSettings.next_invoice_number
    invoice_date: str       # DD/MM/YYYY exactly as stamped on the bill
    customer_name: str
    customer_city: str = field(default="")
    items: Tuple[LineItemEntity, ...] = field(default_factory=tuple)
    tax: TaxConfiguration = field(default_factory=TaxConfiguration)
    subtotal: Decimal = field(default_factory=lambda: Decimal("0"))
    cgst_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    sgst_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    total: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def numeric_id(self):
        """The bill number as an int, or None when it is not numeric."""
        try:
            return int(str(self.id).strip())
        except ValueError:
            return None
