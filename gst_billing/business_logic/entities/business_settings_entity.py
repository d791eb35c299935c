# gst_billing/business_logic/entities/business_settings_entity.py
from dataclasses import dataclass, field, fields
from typing import Any, Dict
from decimal import Decimal

from gst_billing.constants import DEFAULT_THEME_COLOR, DEFAULT_LOGO_WIDTH
from .tax_configuration import TaxConfiguration

@dataclass(frozen=True)
class BusinessSettings:
    """
    Tenant-wide configuration. Every field carries its default here, so a
    partially stored document is completed by merge_settings() alone.
    `version` grows by one on every save.
    """
    # Display identity
    name: str = "My Business"
    sub_name: str = "Quality Goods Provider"
    address: str = "123 Business Road, City."
    mobile: str = "98765 43210"
    logo_initial: str = "B"
    theme_color: str = DEFAULT_THEME_COLOR
    logo_url: str = ""
    logo_width: int = DEFAULT_LOGO_WIDTH
    signature_name: str = ""
    signature_url: str = ""
    # Bank details
    bank_name: str = ""
    bank_account_number: str = ""
    bank_ifsc: str = ""
    bank_branch: str = ""
    # Auto increment
    next_invoice_number: int = 1
    # GST
    enable_gst: bool = False
    gstin: str = ""
    default_gst_rate: Decimal = field(default_factory=lambda: Decimal("12"))
    # UPI
    upi_id: str = ""
    show_upi_qr: bool = False

    version: int = 0

    @property
    def tax_configuration(self) -> TaxConfiguration:
        return TaxConfiguration(enabled=self.enable_gst, rate=self.default_gst_rate)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = str(value) if isinstance(value, Decimal) else value
        return data
