# gst_billing/data_access/invoices_repository.py

from typing import Dict, Any, Optional, List, Sequence
from datetime import datetime
from decimal import Decimal

from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.data_access.invoice_items_repository import InvoiceItemsRepository
from gst_billing.business_logic.entities.invoice_entity import InvoiceEntity
from gst_billing.business_logic.entities.line_item_entity import LineItemEntity
from gst_billing.business_logic.entities.tax_configuration import TaxConfiguration
import logging

logger = logging.getLogger(__name__)

class InvoicesRepository:
    """Saved bills: one invoices row per bill plus its invoice_items rows, written in one transaction."""

    def __init__(self, db_manager: DatabaseManager, items_repository: Optional[InvoiceItemsRepository] = None):
        self.db_manager = db_manager
        self.items_repository = items_repository or InvoiceItemsRepository(db_manager)
        self._table_name = "invoices"

    def _entity_from_row(self, row: Dict[str, Any], items: Sequence[LineItemEntity]) -> InvoiceEntity:
        if row is None:
            raise ValueError("Input row cannot be None for InvoiceEntity")
        try:
            return InvoiceEntity(
                id=row['id'],
                invoice_date=row['invoice_date'],
                customer_name=row['customer_name'],
                customer_city=row.get('customer_city') or "",
                items=tuple(items),
                tax=TaxConfiguration(enabled=bool(row['gst_enabled']),
                                     rate=Decimal(str(row['gst_rate']))),
                subtotal=Decimal(str(row['subtotal'])),
                cgst_amount=Decimal(str(row['cgst_amount'])),
                sgst_amount=Decimal(str(row['sgst_amount'])),
                total=Decimal(str(row['total'])),
            )
        except KeyError as e:
            logger.error(f"KeyError when creating InvoiceEntity from row: {e}. Row: {row}")
            raise
        except ArithmeticError as e:
            logger.error(f"Bad numeric value when creating InvoiceEntity: {e}. Row: {row}")
            raise

    def exists(self, invoice_id: str) -> bool:
        query = f"SELECT 1 FROM {self._table_name} WHERE id = ?"
        return self.db_manager.fetch_one(query, (invoice_id,)) is not None

    def add(self, invoice: InvoiceEntity) -> InvoiceEntity:
        header_query = (f"INSERT INTO {self._table_name} "
                        "(id, invoice_date, customer_name, customer_city, gst_enabled, gst_rate, "
                        "subtotal, cgst_amount, sgst_amount, total, created_at) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)")
        header_params = (
            invoice.id, invoice.invoice_date, invoice.customer_name, invoice.customer_city,
            1 if invoice.tax.enabled else 0, str(invoice.tax.rate),
            str(invoice.subtotal), str(invoice.cgst_amount), str(invoice.sgst_amount), str(invoice.total),
            datetime.now().isoformat(timespec="seconds"),
        )
        statements = [(header_query, header_params)]
        statements.extend(self.items_repository.insert_statements(invoice.id, invoice.items))
        self.db_manager.execute_in_transaction(statements)
        logger.debug(f"InvoicesRepository.add: bill {invoice.id} stored with {len(invoice.items)} items.")
        return invoice

    def get_by_id(self, invoice_id: str) -> Optional[InvoiceEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE id = ?"
        row = self.db_manager.fetch_one(query, (invoice_id,))
        if not row:
            return None
        items = self.items_repository.get_by_invoice_id(invoice_id)
        return self._entity_from_row(dict(row), items)

    def get_all(self) -> List[InvoiceEntity]:
        rows = self.db_manager.fetch_all(f"SELECT * FROM {self._table_name}")
        items_by_invoice = self.items_repository.get_grouped_by_invoice()
        return [self._entity_from_row(dict(row), items_by_invoice.get(row['id'], [])) for row in rows]

    def get_all_ids(self) -> List[str]:
        rows = self.db_manager.fetch_all(f"SELECT id FROM {self._table_name}")
        return [row['id'] for row in rows]
