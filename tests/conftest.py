# tests/conftest.py

from datetime import date
from decimal import Decimal

import pytest

from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.entities.invoice_entity import InvoiceEntity
from gst_billing.business_logic.entities.line_item_entity import LineItemEntity
from gst_billing.business_logic.entities.tax_configuration import TaxConfiguration
from gst_billing.business_logic.invoice_calculator import calculate_totals
from gst_billing.business_logic.cart_manager import CartManager
from gst_billing.business_logic.customer_manager import CustomerManager
from gst_billing.business_logic.invoice_manager import InvoiceManager
from gst_billing.business_logic.product_manager import ProductManager
from gst_billing.business_logic.settings_manager import SettingsManager
from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.data_access.customers_repository import CustomersRepository
from gst_billing.data_access.invoice_items_repository import InvoiceItemsRepository
from gst_billing.data_access.invoices_repository import InvoicesRepository
from gst_billing.data_access.products_repository import ProductsRepository
from gst_billing.data_access.settings_repository import SettingsRepository


def make_line(line_id="1", name="Sugar", rate="100", quantity="2", unit="Kg",
              packing=None, product_id=1) -> LineItemEntity:
    return LineItemEntity(
        id=str(line_id),
        product_id=product_id,
        name=name,
        unit=unit,
        rate=Decimal(rate),
        quantity=Decimal(quantity),
        packing=packing,
    )


def make_invoice(bill_no="1", items=None, customer_name="Ram Traders", customer_city="Surat",
                 invoice_date="05/03/2024", tax=None) -> InvoiceEntity:
    items = tuple(items if items is not None else [make_line()])
    tax = tax or TaxConfiguration(enabled=False, rate=Decimal("12"))
    totals = calculate_totals(items, tax)
    return InvoiceEntity(
        id=str(bill_no),
        invoice_date=invoice_date,
        customer_name=customer_name,
        customer_city=customer_city,
        items=items,
        tax=tax,
        subtotal=totals.subtotal,
        cgst_amount=totals.cgst_amount,
        sgst_amount=totals.sgst_amount,
        total=totals.grand_total,
    )


@pytest.fixture
def db_manager(tmp_path):
    manager = DatabaseManager(str(tmp_path / "billing_test.db"))
    manager.create_tables()
    return manager


@pytest.fixture
def products_repo(db_manager):
    return ProductsRepository(db_manager)


@pytest.fixture
def customers_repo(db_manager):
    return CustomersRepository(db_manager)


@pytest.fixture
def settings_repo(db_manager):
    return SettingsRepository(db_manager)


@pytest.fixture
def invoices_repo(db_manager):
    return InvoicesRepository(db_manager, InvoiceItemsRepository(db_manager))


@pytest.fixture
def product_manager(products_repo):
    return ProductManager(products_repo)


@pytest.fixture
def customer_manager(customers_repo):
    return CustomerManager(customers_repo)


@pytest.fixture
def settings_manager(settings_repo):
    manager = SettingsManager(settings_repo)
    manager.load_settings()
    return manager


@pytest.fixture
def invoice_manager(invoices_repo, settings_manager):
    return InvoiceManager(invoices_repo, settings_manager)


@pytest.fixture
def seeded_products(product_manager):
    return {
        "sugar": product_manager.create_product("Sugar", "42", unit="Kg", packing="1 kg"),
        "tea": product_manager.create_product("Tea", "120.50", unit="Pkt", packing="250 gm"),
        "soap": product_manager.create_product("Soap", "35", unit="Pcs"),
    }


@pytest.fixture
def gst_settings(settings_manager):
    return settings_manager.update_settings(
        name="Shree Traders",
        enable_gst=True,
        default_gst_rate="12",
        gstin="24ABCDE1234F1Z5",
        next_invoice_number=1,
    )


@pytest.fixture
def cart(product_manager, gst_settings):
    return CartManager(product_manager, gst_settings, today=lambda: date(2024, 3, 5))


@pytest.fixture
def default_settings():
    return BusinessSettings()
