# gst_billing/data_access/base_repository.py

from typing import Generic, TypeVar, Type, List, Optional, Dict, Any, Union, TYPE_CHECKING
from decimal import Decimal
from enum import Enum
from dataclasses import fields, MISSING
import logging

from gst_billing.data_access.database_manager import DatabaseManager

if TYPE_CHECKING:
    from ..business_logic.entities.base_entity import BaseEntity

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='BaseEntity')

class BaseRepository(Generic[T]):
    """
    CRUD over one table whose columns mirror the init fields of a dataclass
    entity with an integer autoincrement `id`.
    """
    def __init__(self, db_manager: DatabaseManager, model_type: Type[T], table_name: str):
        self.db_manager = db_manager
        self.model_type = model_type
        self._table_name = table_name
        self._db_columns = [f.name for f in fields(model_type) if f.init]
        logger.debug(f"BaseRepository for {self._table_name} initialized. Columns: {self._db_columns}")

    def get_by_id(self, entity_id: int) -> Optional[T]:
        query = f"SELECT * FROM {self._table_name} WHERE id = ?"
        row = self.db_manager.fetch_one(query, (entity_id,))
        return self._entity_from_row(dict(row)) if row else None

    def get_all(self, order_by: Optional[str] = None) -> List[T]:
        query = f"SELECT * FROM {self._table_name}"
        if order_by:
            query += f" ORDER BY {order_by}"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(row)) for row in rows]

    def search_by_name(self, name_query: str) -> List[T]:
        query = f"SELECT * FROM {self._table_name} WHERE name LIKE ? ORDER BY name"
        rows = self.db_manager.fetch_all(query, (f"%{name_query}%",))
        return [self._entity_from_row(dict(row)) for row in rows if row]

    def _entity_to_dict_for_db(self, entity: T) -> Dict[str, Any]:
        data_to_persist = {}
        for col in self._db_columns:
            v = getattr(entity, col, None)
            processed_v = v
            if isinstance(v, Decimal): processed_v = str(v)
            elif isinstance(v, Enum): processed_v = v.value
            elif isinstance(v, bool): processed_v = 1 if v else 0
            data_to_persist[col] = processed_v
        return data_to_persist

    def add(self, entity: T) -> T:
        fields_to_insert = self._entity_to_dict_for_db(entity)
        fields_to_insert.pop('id', None) # autoincrement

        columns = ', '.join(fields_to_insert.keys())
        placeholders = ', '.join(['?'] * len(fields_to_insert))
        values_tuple = tuple(fields_to_insert.values())
        query = f"INSERT INTO {self._table_name} ({columns}) VALUES ({placeholders})"
        logger.debug(f"BaseRepository.add: {query} {values_tuple}")

        try:
            cursor = self.db_manager.execute_query(query, values_tuple)
        except Exception as e:
            logger.error(f"Error during INSERT into {self._table_name}: {e}", exc_info=True)
            raise
        entity.id = cursor.lastrowid
        logger.debug(f"BaseRepository.add: Entity ID set to {entity.id} after insert.")
        return entity

    def update(self, entity: T) -> Optional[T]:
        if getattr(entity, 'id', None) is None:
            raise ValueError(f"Entity of type {type(entity).__name__} must have an ID to be updated.")

        fields_to_update = self._entity_to_dict_for_db(entity)
        fields_to_update.pop('id', None)
        set_clause = ', '.join([f"{key} = ?" for key in fields_to_update.keys()])
        values_tuple = tuple(fields_to_update.values()) + (entity.id,)
        query = f"UPDATE {self._table_name} SET {set_clause} WHERE id = ?"

        try:
            cursor = self.db_manager.execute_query(query, values_tuple)
        except Exception as e:
            logger.error(f"Error during UPDATE for entity ID {entity.id} in table {self._table_name}: {e}", exc_info=True)
            raise
        if cursor.rowcount == 0:
            logger.warning(f"BaseRepository.update: no row with ID {entity.id} in {self._table_name}.")
            return None
        logger.info(f"BaseRepository.update: Entity ID {entity.id} in table {self._table_name} updated.")
        return entity

    def delete(self, entity_id: int) -> bool:
        query = f"DELETE FROM {self._table_name} WHERE id = ?"
        cursor = self.db_manager.execute_query(query, (entity_id,))
        return cursor.rowcount > 0

    def _entity_from_row(self, row: Dict[str, Any]) -> T:
        """Builds the dataclass from a row dict, converting Decimal/Enum/bool columns by field type."""
        entity_data = {}
        for f in fields(self.model_type):
            if not f.init:
                continue
            value_from_db = row.get(f.name)
            if value_from_db is None:
                if f.default is MISSING and f.default_factory is MISSING:
                    raise ValueError(
                        f"Database integrity error: NULL value found for required field '{f.name}' "
                        f"in table '{self._table_name}' for row: {row}"
                    )
                continue

            actual_type = f.type
            if getattr(actual_type, '__origin__', None) is Union:
                possible_types = [arg for arg in actual_type.__args__ if arg is not type(None)]
                if possible_types:
                    actual_type = possible_types[0]

            if isinstance(actual_type, type) and issubclass(actual_type, Enum):
                entity_data[f.name] = actual_type(value_from_db)
            elif actual_type == Decimal:
                entity_data[f.name] = Decimal(str(value_from_db))
            elif actual_type == bool:
                entity_data[f.name] = bool(value_from_db)
            else:
                entity_data[f.name] = value_from_db
        return self.model_type(**entity_data)
