# gst_billing/business_logic/__init__.py
from .product_manager import ProductManager
from .customer_manager import CustomerManager
from .settings_manager import SettingsManager
from .invoice_manager import InvoiceManager
from .cart_manager import CartManager
from .analytics_manager import AnalyticsManager
