# gst_billing/business_logic/invoice_manager.py

from typing import Optional, List, TYPE_CHECKING

from .entities.invoice_entity import InvoiceEntity
from .exceptions import PersistenceError, SequenceDriftError, ValidationError

if TYPE_CHECKING:
    from .settings_manager import SettingsManager
    from ..data_access.invoices_repository import InvoicesRepository

import logging
logger = logging.getLogger(__name__)


class InvoiceManager:
    def __init__(self,
                 invoices_repository: 'InvoicesRepository',
                 settings_manager: 'SettingsManager'):
        if invoices_repository is None:
            raise ValueError("invoices_repository cannot be None")
        if settings_manager is None:
            raise ValueError("settings_manager cannot be None")
        self.invoices_repo = invoices_repository
        self.settings_manager = settings_manager

    def save_invoice(self, invoice: InvoiceEntity) -> InvoiceEntity:
        """
        Stores a finished bill, then moves the invoice counter past it.

        The two writes are separate. If the bill is stored but the counter
        cannot be advanced, SequenceDriftError(document_saved=True) is
        raised; the bill stays on file and reconcile_sequence() repairs the
        counter. A bill number that is already on file is refused before
        anything is written.
        """
        if not invoice.items:
            raise ValidationError("An invoice needs at least one item.")
        if not invoice.customer_name.strip():
            raise ValidationError("Customer name cannot be empty.")

        if self.invoices_repo.exists(invoice.id):
            expected = self._expected_next_number()
            logger.warning(f"Bill no {invoice.id} is already on file; counter is behind (expected next {expected}).")
            raise SequenceDriftError(
                f"Bill No {invoice.id} already exists. Run 'Fix numbering' to move the counter to {expected}.",
                bill_no=invoice.id, expected_next=expected, document_saved=False)

        # Phase 1: the document
        try:
            self.invoices_repo.add(invoice)
        except Exception as e:
            logger.error(f"Failed to store bill {invoice.id}: {e}", exc_info=True)
            raise PersistenceError(f"Could not save bill {invoice.id}: {e}") from e
        logger.info(f"Bill {invoice.id} for '{invoice.customer_name}' stored (total {invoice.total}).")

        # Phase 2: the counter
        bill_number = invoice.numeric_id
        if bill_number is None:
            logger.warning(f"Bill no {invoice.id} is not numeric; invoice counter left unchanged.")
            return invoice
        try:
            self.settings_manager.advance_invoice_number(bill_number)
        except Exception as e:
            logger.warning(f"Bill {invoice.id} stored but the invoice counter was not advanced: {e}", exc_info=True)
            raise SequenceDriftError(
                f"Bill {invoice.id} was saved, but the next bill number could not be updated. "
                f"Run 'Fix numbering' before the next bill.",
                bill_no=invoice.id, expected_next=bill_number + 1, document_saved=True) from e
        return invoice

    def get_all_invoices(self) -> List[InvoiceEntity]:
        logger.debug("Fetching all invoices.")
        return self.invoices_repo.get_all()

    def get_invoice(self, bill_no: str) -> Optional[InvoiceEntity]:
        invoice = self.invoices_repo.get_by_id(str(bill_no))
        if not invoice:
            logger.debug(f"Invoice {bill_no} not found.")
        return invoice

    def _expected_next_number(self) -> int:
        numbers = []
        for bill_id in self.invoices_repo.get_all_ids():
            try:
                numbers.append(int(str(bill_id).strip()))
            except ValueError:
                continue
        return max(numbers) + 1 if numbers else 1

    def detect_sequence_drift(self) -> Optional[int]:
        """Returns the number the counter should be at when it lags behind the stored bills, else None."""
        expected = self._expected_next_number()
        current = self.settings_manager.load_settings().next_invoice_number
        if current < expected:
            logger.warning(f"Sequence drift: counter at {current}, stored bills require {expected}.")
            return expected
        return None

    def reconcile_sequence(self) -> int:
        """Moves a lagging counter to max(numeric bill ids) + 1 and returns the counter value."""
        expected = self.detect_sequence_drift()
        if expected is None:
            return self.settings_manager.current.next_invoice_number
        updated = self.settings_manager.advance_invoice_number(expected - 1)
        logger.info(f"Invoice counter reconciled to {updated.next_invoice_number}.")
        return updated.next_invoice_number
