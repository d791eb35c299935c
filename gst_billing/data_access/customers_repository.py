# gst_billing/data_access/customers_repository.py

from typing import List

from gst_billing.data_access.base_repository import BaseRepository
from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.business_logic.entities.customer_entity import CustomerEntity
import logging

logger = logging.getLogger(__name__)

class CustomersRepository(BaseRepository[CustomerEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=CustomerEntity,
                         table_name="customers")

    def search(self, text: str) -> List[CustomerEntity]:
        """Name or city containing text, ordered by name."""
        query = f"SELECT * FROM {self._table_name} WHERE name LIKE ? OR city LIKE ? ORDER BY name"
        pattern = f"%{text}%"
        rows = self.db_manager.fetch_all(query, (pattern, pattern))
        return [self._entity_from_row(dict(row)) for row in rows if row]
