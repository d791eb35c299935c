# tests/test_cart_manager.py

from datetime import date
from decimal import Decimal

import pytest

from gst_billing.business_logic.cart_manager import CartManager
from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.entities.product_entity import ProductEntity
from gst_billing.business_logic.exceptions import (
    ValidationError, CartLockedError, PersistenceError, SequenceDriftError
)
from gst_billing.constants import CartState


class FakeProductManager:
    def __init__(self, products):
        self._products = {p.id: p for p in products}
        self.lookups = 0

    def get_product_by_id(self, product_id):
        self.lookups += 1
        return self._products.get(product_id)


class RecordingInvoiceManager:
    def __init__(self, error=None):
        self.saved = []
        self.error = error

    def save_invoice(self, invoice):
        if self.error is not None:
            raise self.error
        self.saved.append(invoice)
        return invoice


SUGAR = ProductEntity(id=1, name="Sugar", rate=Decimal("42"), unit="Kg", packing="1 kg")
TEA = ProductEntity(id=2, name="Tea", rate=Decimal("120.50"), unit="Pkt", packing="250 gm")
SETTINGS = BusinessSettings(next_invoice_number=7, enable_gst=True, default_gst_rate=Decimal("12"))


@pytest.fixture
def products():
    return FakeProductManager([SUGAR, TEA])


@pytest.fixture
def cart(products):
    return CartManager(products, SETTINGS, today=lambda: date(2024, 3, 5))


def _fill(cart):
    cart.add_item(1, 2)
    cart.add_item(2, 1)
    cart.set_customer("Ram Traders", "Surat")


def test_new_cart_takes_number_and_date(cart):
    assert cart.bill_no == "7"
    assert cart.invoice_date == "05/03/2024"
    assert cart.state == CartState.EDITABLE
    assert cart.items == []
    assert cart.totals.grand_total == Decimal("0")


def test_constructor_requires_product_manager():
    with pytest.raises(ValueError):
        CartManager(None, SETTINGS)


def test_add_item_snapshots_product_and_recalculates(cart):
    line = cart.add_item(1, 2)

    assert (line.name, line.unit, line.rate, line.packing) == ("Sugar", "Kg", Decimal("42"), "1 kg")
    assert cart.totals.subtotal == Decimal("84")
    # 84 x 6% = 5.04 per half
    assert cart.totals.cgst_amount == Decimal("5")
    assert cart.totals.grand_total == Decimal("94")
    assert cart.totals.weight_display == "2 Kg"


def test_adding_same_product_merges_rows(cart, products):
    first = cart.add_item(1, 2)
    merged = cart.add_item(1, "1.5")

    assert len(cart.items) == 1
    assert merged.id == first.id
    assert merged.quantity == Decimal("3.5")
    assert products.lookups == 1


def test_line_ids_are_unique_and_not_reused(cart):
    a = cart.add_item(1)
    cart.remove_item(a.id)
    b = cart.add_item(2)
    assert a.id != b.id


@pytest.mark.parametrize("qty", [0, -1, "abc", Decimal("0.5"), "0.999"])
def test_add_item_rejects_bad_quantity(cart, qty):
    with pytest.raises(ValidationError):
        cart.add_item(1, qty)
    assert cart.items == []


def test_merging_below_one_is_rejected(cart):
    line = cart.add_item(1, 2)

    with pytest.raises(ValidationError):
        cart.add_item(1, Decimal("0.5"))
    assert [(i.id, i.quantity) for i in cart.items] == [(line.id, Decimal("2"))]


def test_add_unknown_product(cart):
    with pytest.raises(ValidationError):
        cart.add_item(99)


def test_adjust_quantity_never_below_one(cart):
    line = cart.add_item(1, 3)

    assert cart.adjust_quantity(line.id, 1).quantity == Decimal("4")
    assert cart.adjust_quantity(line.id, -10).quantity == Decimal("1")
    assert cart.totals.subtotal == Decimal("42")


def test_adjust_or_remove_unknown_line(cart):
    with pytest.raises(ValidationError):
        cart.adjust_quantity("nope", 1)
    with pytest.raises(ValidationError):
        cart.remove_item("nope")


def test_remove_item_recalculates(cart):
    sugar = cart.add_item(1, 2)
    cart.add_item(2, 1)
    cart.remove_item(sugar.id)

    assert [i.name for i in cart.items] == ["Tea"]
    assert cart.totals.subtotal == Decimal("120.50")


def test_set_date_rejects_blank(cart):
    with pytest.raises(ValidationError):
        cart.set_date("  ")
    cart.set_date("06/03/2024")
    assert cart.invoice_date == "06/03/2024"


def test_apply_settings_follows_tax_and_number_while_editable(cart):
    cart.add_item(1, 2)
    cart.apply_settings(BusinessSettings(next_invoice_number=9, enable_gst=False, version=1))

    assert cart.bill_no == "9"
    assert cart.totals.cgst_amount == Decimal("0")
    assert cart.totals.grand_total == Decimal("84")


def test_unsaved_changes_flag(cart):
    assert not cart.has_unsaved_changes
    cart.set_customer("Ram", "")
    assert cart.has_unsaved_changes


def test_save_requires_items_and_customer(cart):
    invoices = RecordingInvoiceManager()
    with pytest.raises(ValidationError):
        cart.save(invoices)
    cart.add_item(1)
    with pytest.raises(ValidationError):
        cart.save(invoices)
    assert cart.state == CartState.EDITABLE
    assert invoices.saved == []


def test_successful_save_locks_cart(cart):
    _fill(cart)
    invoices = RecordingInvoiceManager()

    document = cart.save(invoices)

    assert invoices.saved == [document]
    assert document.id == "7"
    assert document.customer_name == "Ram Traders"
    assert document.total == cart.totals.grand_total
    assert cart.state == CartState.LOCKED
    with pytest.raises(CartLockedError):
        cart.add_item(1)
    with pytest.raises(CartLockedError):
        cart.set_customer("Someone else")


def test_locked_cart_keeps_its_number_when_counter_moves(cart):
    _fill(cart)
    cart.save(RecordingInvoiceManager())

    cart.apply_settings(BusinessSettings(next_invoice_number=8, enable_gst=True,
                                         default_gst_rate=Decimal("12"), version=2))
    assert cart.bill_no == "7"

    cart.reset()
    assert cart.bill_no == "8"
    assert cart.state == CartState.EDITABLE
    assert cart.items == []
    assert cart.customer_name == ""


def test_cart_is_frozen_while_saving(cart):
    _fill(cart)
    document = cart.begin_save()

    assert cart.state == CartState.SAVING
    with pytest.raises(CartLockedError):
        cart.adjust_quantity(document.items[0].id, 1)
    cart.mark_save_failed()
    assert cart.state == CartState.EDITABLE


def test_persistence_failure_leaves_cart_editable(cart):
    _fill(cart)

    with pytest.raises(PersistenceError):
        cart.save(RecordingInvoiceManager(error=PersistenceError("disk full")))

    assert cart.state == CartState.EDITABLE
    assert len(cart.items) == 2


def test_counter_failure_after_document_stored_keeps_cart_locked(cart):
    _fill(cart)
    error = SequenceDriftError("counter", bill_no="7", expected_next=8, document_saved=True)

    with pytest.raises(SequenceDriftError):
        cart.save(RecordingInvoiceManager(error=error))

    assert cart.state == CartState.LOCKED


def test_duplicate_number_leaves_cart_editable(cart):
    _fill(cart)
    error = SequenceDriftError("exists", bill_no="7", expected_next=12, document_saved=False)

    with pytest.raises(SequenceDriftError):
        cart.save(RecordingInvoiceManager(error=error))

    assert cart.state == CartState.EDITABLE
