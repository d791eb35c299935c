# tests/test_catalog.py

from decimal import Decimal

import pytest

from gst_billing.business_logic.exceptions import ValidationError
from gst_billing.business_logic.product_manager import ProductManager
from gst_billing.business_logic.customer_manager import CustomerManager


def test_managers_require_repositories():
    with pytest.raises(ValueError):
        ProductManager(None)
    with pytest.raises(ValueError):
        CustomerManager(None)


def test_create_product_round_trips_decimal_rate(product_manager):
    created = product_manager.create_product("  Basmati Rice ", "95.75", unit="Kg", packing=" 5 kg ")

    stored = product_manager.get_product_by_id(created.id)
    assert stored.name == "Basmati Rice"
    assert stored.rate == Decimal("95.75")
    assert isinstance(stored.rate, Decimal)
    assert stored.packing == "5 kg"


@pytest.mark.parametrize("name, rate", [("", "10"), ("Salt", "-1"), ("Salt", "ten")])
def test_create_product_validation(product_manager, name, rate):
    with pytest.raises(ValidationError):
        product_manager.create_product(name, rate)
    assert product_manager.get_all_products() == []


def test_products_listed_and_searched_by_name(product_manager, seeded_products):
    assert [p.name for p in product_manager.get_all_products()] == ["Soap", "Sugar", "Tea"]
    assert [p.name for p in product_manager.search_products("su")] == ["Sugar"]
    assert len(product_manager.search_products("  ")) == 3


def test_update_product(product_manager, seeded_products):
    tea = seeded_products["tea"]

    updated = product_manager.update_product(tea.id, {"rate": "130", "packing": ""})

    assert updated.rate == Decimal("130")
    assert product_manager.get_product_by_id(tea.id).packing is None
    assert product_manager.update_product(9999, {"rate": "1"}) is None
    with pytest.raises(ValidationError):
        product_manager.update_product(tea.id, {"name": " "})


def test_delete_product(product_manager, seeded_products):
    soap = seeded_products["soap"]
    assert product_manager.delete_product(soap.id) is True
    assert product_manager.get_product_by_id(soap.id) is None
    assert product_manager.delete_product(soap.id) is False


def test_customers_crud_and_search(customer_manager):
    ram = customer_manager.create_customer("Ram Traders", "Surat", "98250 00000")
    customer_manager.create_customer("Gopal Stores", "Rajkot")

    assert [c.name for c in customer_manager.search_customers("surat")] == ["Ram Traders"]
    assert [c.name for c in customer_manager.get_all_customers()] == ["Gopal Stores", "Ram Traders"]

    updated = customer_manager.update_customer(ram.id, {"city": "Vadodara", "phone": ""})
    assert updated.city == "Vadodara"
    assert customer_manager.get_customer_by_id(ram.id).phone is None

    assert customer_manager.delete_customer(ram.id) is True
    assert customer_manager.get_customer_by_id(ram.id) is None


def test_customer_name_required(customer_manager):
    with pytest.raises(ValidationError):
        customer_manager.create_customer("   ")
    ram = customer_manager.create_customer("Ram")
    with pytest.raises(ValidationError):
        customer_manager.update_customer(ram.id, {"name": ""})
