# gst_billing/business_logic/entities/__init__.py
from .base_entity import BaseEntity
from .product_entity import ProductEntity
from .customer_entity import CustomerEntity
from .line_item_entity import LineItemEntity
from .tax_configuration import TaxConfiguration
from .invoice_totals import InvoiceTotals
from .invoice_entity import InvoiceEntity
from .business_settings_entity import BusinessSettings
from .setting_entity import SettingEntity
__all__ = [
    "BaseEntity", "ProductEntity", "CustomerEntity", "LineItemEntity",
    "TaxConfiguration", "InvoiceTotals", "InvoiceEntity",
    "BusinessSettings", "SettingEntity",
]
