# gst_billing/business_logic/cart_manager.py

from typing import Optional, List, Callable, TYPE_CHECKING
from datetime import date
from decimal import Decimal

from .entities.line_item_entity import LineItemEntity
from .entities.invoice_entity import InvoiceEntity
from .entities.invoice_totals import InvoiceTotals
from .entities.business_settings_entity import BusinessSettings
from .entities.customer_entity import CustomerEntity
from .invoice_calculator import calculate_totals
from .exceptions import ValidationError, CartLockedError, SequenceDriftError
from gst_billing.constants import CartState
from gst_billing.utils.money import to_decimal
from gst_billing.utils.date_converter import to_bill_date_str

if TYPE_CHECKING:
    from .product_manager import ProductManager
    from .invoice_manager import InvoiceManager

import logging
logger = logging.getLogger(__name__)

ONE = Decimal("1")


class CartManager:
    """
    Holds the one bill being composed.

    Every mutating call recomputes the totals synchronously before it
    returns. Once a save starts the cart refuses edits (CartLockedError)
    until reset(); a failed save hands it back in the editable state.

        EDITABLE --begin_save--> SAVING --mark_saved--> LOCKED --reset--> EDITABLE
                                 SAVING --mark_save_failed--> EDITABLE
    """

    def __init__(self,
                 product_manager: 'ProductManager',
                 settings: BusinessSettings,
                 today: Callable[[], date] = date.today):
        if product_manager is None:
            raise ValueError("product_manager cannot be None")
        self.product_manager = product_manager
        self._settings = settings
        self._today = today

        self._items: List[LineItemEntity] = []
        self._next_line_no = 1
        self.customer_name = ""
        self.customer_city = ""
        self.invoice_date = to_bill_date_str(self._today())
        self.bill_no = str(settings.next_invoice_number)
        self.state = CartState.EDITABLE
        self._totals = calculate_totals(self._items, self.tax)

    # --- read side ---
    @property
    def settings(self) -> BusinessSettings:
        return self._settings

    @property
    def tax(self):
        return self._settings.tax_configuration

    @property
    def items(self) -> List[LineItemEntity]:
        return list(self._items)

    @property
    def totals(self) -> InvoiceTotals:
        return self._totals

    @property
    def is_locked(self) -> bool:
        return self.state != CartState.EDITABLE

    @property
    def has_unsaved_changes(self) -> bool:
        has_content = bool(self._items) or bool(self.customer_name.strip()) or bool(self.customer_city.strip())
        return has_content and self.state == CartState.EDITABLE

    # --- internal helpers ---
    def _ensure_editable(self, operation: str):
        if self.is_locked:
            logger.warning(f"Rejected '{operation}' on bill {self.bill_no}: cart is {self.state.value}.")
            raise CartLockedError(f"Bill {self.bill_no} is already saved. Start a new bill to make changes.")

    def _recalculate(self):
        self._totals = calculate_totals(self._items, self.tax)

    def _new_line_id(self) -> str:
        line_id = str(self._next_line_no)
        self._next_line_no += 1
        return line_id

    # --- mutations ---
    def add_item(self, product_id: int, quantity=1) -> LineItemEntity:
        self._ensure_editable("add_item")
        try:
            qty = to_decimal(quantity)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if qty < ONE:
            raise ValidationError("Quantity must be at least 1.")

        for index, existing in enumerate(self._items):
            if existing.product_id == product_id:
                merged = existing.with_quantity(existing.quantity + qty)
                self._items[index] = merged
                self._recalculate()
                logger.info(f"Merged {qty} into line {merged.id} ({merged.name}); quantity now {merged.quantity}.")
                return merged

        product = self.product_manager.get_product_by_id(product_id)
        if not product:
            raise ValidationError(f"Product with ID {product_id} was not found.")
        try:
            rate = to_decimal(product.rate)
        except ValueError as e:
            raise ValidationError(f"Product '{product.name}' has an invalid rate.") from e
        if rate < 0:
            raise ValidationError(f"Product '{product.name}' has a negative rate.")

        line = LineItemEntity(
            id=self._new_line_id(),
            product_id=product.id,
            name=product.name,
            unit=product.unit,
            rate=rate,
            quantity=qty,
            packing=product.packing or None,
        )
        self._items.append(line)
        self._recalculate()
        logger.info(f"Added line {line.id}: {line.name} x {line.quantity} @ {line.rate}.")
        return line

    def adjust_quantity(self, line_item_id: str, delta) -> LineItemEntity:
        """Changes a row's quantity by delta; it never drops below 1."""
        self._ensure_editable("adjust_quantity")
        try:
            step = to_decimal(delta)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        for index, existing in enumerate(self._items):
            if existing.id == line_item_id:
                new_qty = max(ONE, existing.quantity + step)
                updated = existing.with_quantity(new_qty)
                self._items[index] = updated
                self._recalculate()
                logger.debug(f"Line {line_item_id} quantity {existing.quantity} -> {new_qty}.")
                return updated
        raise ValidationError(f"Line item '{line_item_id}' is not on this bill.")

    def remove_item(self, line_item_id: str) -> None:
        self._ensure_editable("remove_item")
        remaining = [item for item in self._items if item.id != line_item_id]
        if len(remaining) == len(self._items):
            raise ValidationError(f"Line item '{line_item_id}' is not on this bill.")
        self._items = remaining
        self._recalculate()
        logger.info(f"Removed line {line_item_id} from bill {self.bill_no}.")

    def set_customer(self, name: str, city: str = "") -> None:
        self._ensure_editable("set_customer")
        self.customer_name = name or ""
        self.customer_city = city or ""

    def select_customer(self, customer: Optional[CustomerEntity]) -> None:
        """Fills the header from a saved customer; None clears it for an ad hoc name."""
        if customer is None:
            self.set_customer("", "")
        else:
            self.set_customer(customer.name, customer.city)

    def set_date(self, invoice_date: str) -> None:
        self._ensure_editable("set_date")
        if not invoice_date or not invoice_date.strip():
            raise ValidationError("Bill date cannot be empty.")
        self.invoice_date = invoice_date.strip()

    def apply_settings(self, settings: BusinessSettings) -> None:
        """
        Takes a new settings version. Tax follows it at once; the bill number
        only while the cart is editable, so a saved bill keeps its number on
        screen after the counter moves on.
        """
        self._settings = settings
        if not self.is_locked:
            self.bill_no = str(settings.next_invoice_number)
        self._recalculate()
        logger.debug(f"Cart now on settings version {settings.version}; bill no {self.bill_no}.")

    def reset(self) -> None:
        self._items = []
        self._next_line_no = 1
        self.customer_name = ""
        self.customer_city = ""
        self.invoice_date = to_bill_date_str(self._today())
        self.state = CartState.EDITABLE
        self.bill_no = str(self._settings.next_invoice_number)
        self._recalculate()
        logger.info(f"Cart reset. New bill no {self.bill_no}.")

    # --- document + save ---
    def build_document(self) -> InvoiceEntity:
        totals = self._totals
        return InvoiceEntity(
            id=self.bill_no,
            invoice_date=self.invoice_date,
            customer_name=self.customer_name.strip(),
            customer_city=self.customer_city.strip(),
            items=tuple(self._items),
            tax=self.tax,
            subtotal=totals.subtotal,
            cgst_amount=totals.cgst_amount,
            sgst_amount=totals.sgst_amount,
            total=totals.grand_total,
        )

    def validate_for_save(self) -> None:
        if not self._items:
            raise ValidationError("Please add items to the bill before saving.")
        if not self.customer_name.strip():
            raise ValidationError("Customer name cannot be empty.")

    def begin_save(self) -> InvoiceEntity:
        """Validates, locks the cart and returns the frozen document to persist."""
        self._ensure_editable("begin_save")
        self.validate_for_save()
        document = self.build_document()
        self.state = CartState.SAVING
        logger.info(f"Saving bill {document.id} ({len(document.items)} items, total {document.total}).")
        return document

    def mark_saved(self) -> None:
        self.state = CartState.LOCKED
        logger.info(f"Bill {self.bill_no} saved; cart locked until reset.")

    def mark_save_failed(self) -> None:
        self.state = CartState.EDITABLE
        logger.warning(f"Save of bill {self.bill_no} failed; cart editable again.")

    def save(self, invoice_manager: 'InvoiceManager') -> InvoiceEntity:
        """
        Runs a full save. A persistence failure leaves the cart editable for a
        retry. A SequenceDriftError is always re-raised for the caller to
        report; the cart stays locked if the bill itself was stored.
        """
        document = self.begin_save()
        try:
            invoice_manager.save_invoice(document)
        except SequenceDriftError as e:
            if e.document_saved:
                self.mark_saved()
            else:
                self.mark_save_failed()
            raise
        except Exception:
            self.mark_save_failed()
            raise
        self.mark_saved()
        return document
