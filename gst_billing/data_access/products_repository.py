# gst_billing/data_access/products_repository.py

from gst_billing.data_access.base_repository import BaseRepository
from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.business_logic.entities.product_entity import ProductEntity
import logging
logger = logging.getLogger(__name__)

class ProductsRepository(BaseRepository[ProductEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ProductEntity,
                         table_name="products")
