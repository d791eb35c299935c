# gst_billing/data_access/invoice_items_repository.py

from typing import Dict, Any, List, Tuple, Iterable
from decimal import Decimal

from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.business_logic.entities.line_item_entity import LineItemEntity
import logging
logger = logging.getLogger(__name__)

class InvoiceItemsRepository:
    """
    Rows of the invoice_items table. Items are only ever written together
    with their invoice header, so this repository hands out INSERT
    statements for InvoicesRepository's transaction instead of committing
    on its own.
    """
    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        self._table_name = "invoice_items"

    def _entity_from_row(self, row: Dict[str, Any]) -> LineItemEntity:
        if row is None:
            raise ValueError("Input row cannot be None for LineItemEntity")
        try:
            return LineItemEntity(
                id=row['line_id'],
                product_id=row.get('product_id'),
                name=row['name'],
                unit=row['unit'],
                rate=Decimal(str(row['rate'])),
                quantity=Decimal(str(row['quantity'])),
                packing=row.get('packing'),
            )
        except KeyError as e:
            logger.error(f"KeyError when creating LineItemEntity from row: {e}. Row: {row}")
            raise
        except ArithmeticError as e:
            logger.error(f"Bad numeric value when creating LineItemEntity: {e}. Row: {row}")
            raise

    def insert_statements(self, invoice_id: str, items: Iterable[LineItemEntity]) -> List[Tuple[str, tuple]]:
        query = (f"INSERT INTO {self._table_name} "
                 "(invoice_id, line_no, line_id, product_id, name, unit, rate, quantity, packing, amount) "
                 "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)")
        statements = []
        for line_no, item in enumerate(items, start=1):
            statements.append((query, (
                invoice_id, line_no, item.id, item.product_id, item.name, item.unit,
                str(item.rate), str(item.quantity), item.packing, str(item.amount),
            )))
        return statements

    def get_by_invoice_id(self, invoice_id: str) -> List[LineItemEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE invoice_id = ? ORDER BY line_no"
        rows = self.db_manager.fetch_all(query, (invoice_id,))
        return [self._entity_from_row(dict(row)) for row in rows if row]

    def get_grouped_by_invoice(self) -> Dict[str, List[LineItemEntity]]:
        """All item rows keyed by invoice id, in line order. One query for the whole history."""
        query = f"SELECT * FROM {self._table_name} ORDER BY invoice_id, line_no"
        grouped: Dict[str, List[LineItemEntity]] = {}
        for row in self.db_manager.fetch_all(query):
            row_dict = dict(row)
            grouped.setdefault(row_dict['invoice_id'], []).append(self._entity_from_row(row_dict))
        return grouped
