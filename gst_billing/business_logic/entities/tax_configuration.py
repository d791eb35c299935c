# gst_billing/business_logic/entities/tax_configuration.py
from dataclasses import dataclass, field
from decimal import Decimal

@dataclass(frozen=True)
class TaxConfiguration:
    """GST switch and rate. An enabled rate is always split evenly into CGST and SGST."""
    enabled: bool = field(default=False)
    rate: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def half_rate(self) -> Decimal:
        return self.rate / 2 if self.enabled else Decimal("0")
