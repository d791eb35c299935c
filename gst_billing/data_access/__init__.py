# gst_billing/data_access/__init__.py

from .database_manager import DatabaseManager
from .base_repository import BaseRepository

from .settings_repository import SettingsRepository
from .products_repository import ProductsRepository
from .customers_repository import CustomersRepository
from .invoices_repository import InvoicesRepository
from .invoice_items_repository import InvoiceItemsRepository
