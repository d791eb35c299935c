# gst_billing/business_logic/exceptions.py

from typing import Optional


class BillingError(Exception):
    """Base class for errors raised by the billing core."""


class ValidationError(BillingError, ValueError):
    """Input rejected before any side effect took place."""


class CartLockedError(ValidationError):
    """The cart is saving or already saved; reset() it before editing."""


class PersistenceError(BillingError):
    """A repository write failed."""


class SequenceDriftError(PersistenceError):
    """
    Stored bill ids and the next-invoice counter disagree, e.g. the invoice
    was written but advancing the counter failed (document_saved=True), or
    the counter points at a bill id that is already on file
    (document_saved=False, nothing was written).
    """

    def __init__(self, message: str, bill_no: str = "",
                 expected_next: Optional[int] = None, document_saved: bool = False):
        super().__init__(message)
        self.bill_no = bill_no
        self.expected_next = expected_next
        self.document_saved = document_saved
