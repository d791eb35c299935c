# gst_billing/business_logic/product_manager.py
from typing import Optional, List, Any, Dict, TYPE_CHECKING
from decimal import Decimal

from gst_billing.business_logic.entities.product_entity import ProductEntity
from gst_billing.business_logic.exceptions import ValidationError
from gst_billing.utils.money import to_decimal

if TYPE_CHECKING:
    from ..data_access.products_repository import ProductsRepository

import logging

logger = logging.getLogger(__name__)

class ProductManager:
    def __init__(self, product_repository: 'ProductsRepository'):
        if product_repository is None:
            raise ValueError("product_repository cannot be None")
        self.product_repo = product_repository

    @staticmethod
    def _validate_rate(rate: Any) -> Decimal:
        try:
            rate_dec = to_decimal(rate if rate not in (None, "") else "0")
        except ValueError:
            logger.error(f"Invalid numeric value for rate: {rate}", exc_info=True)
            raise ValidationError("Rate is not a valid number.")
        if rate_dec < Decimal("0"):
            raise ValidationError("Rate cannot be negative.")
        return rate_dec

    def get_product_by_id(self, product_id: int) -> Optional[ProductEntity]:
        logger.debug(f"Fetching product by ID: {product_id}")
        product = self.product_repo.get_by_id(product_id)
        if not product:
            logger.warning(f"Product with ID {product_id} not found.")
            return None
        return product

    def get_all_products(self) -> List[ProductEntity]:
        logger.debug("Fetching all products.")
        return self.product_repo.get_all(order_by="name ASC")

    def search_products(self, name_query: str) -> List[ProductEntity]:
        """Case-insensitive substring match on the product name; blank query lists everything."""
        if not name_query or not name_query.strip():
            return self.get_all_products()
        return self.product_repo.search_by_name(name_query.strip())

    def create_product(self,
                       name: str,
                       rate: Any,
                       unit: str = "Pcs",
                       packing: Optional[str] = None,
                       ) -> ProductEntity:
        if not name or not name.strip():
            raise ValidationError("Product name cannot be empty.")
        rate_dec = self._validate_rate(rate)

        product_entity = ProductEntity(
            name=name.strip(),
            rate=rate_dec,
            unit=(unit or "Pcs").strip(),
            packing=packing.strip() if packing and packing.strip() else None,
        )
        created_product = self.product_repo.add(product_entity)
        logger.info(f"Product '{created_product.name}' (ID: {created_product.id}) created successfully.")
        return created_product

    def update_product(self, product_id: int, update_data: Dict[str, Any]) -> Optional[ProductEntity]:
        """
        Updates the catalog row only. Line items already on a cart or a saved
        invoice carry their own snapshot and are not touched.
        """
        logger.info(f"Attempting to update product ID: {product_id} with data: {update_data}")
        product_to_update = self.get_product_by_id(product_id)
        if not product_to_update:
            return None

        changed = False
        for key, value in update_data.items():
            if key == "id":
                continue
            if not hasattr(product_to_update, key):
                logger.warning(f"Field '{key}' not found in ProductEntity during update of product ID {product_id}.")
                continue

            processed_value = value
            if key == "name":
                if not value or not str(value).strip():
                    raise ValidationError("Product name cannot be empty.")
                processed_value = str(value).strip()
            elif key == "rate":
                processed_value = self._validate_rate(value)
            elif key == "packing":
                processed_value = value.strip() if value and value.strip() else None

            if getattr(product_to_update, key) != processed_value:
                setattr(product_to_update, key, processed_value)
                changed = True

        if not changed:
            logger.info(f"No changes detected for product ID {product_id}. Update not performed.")
            return product_to_update
        if self.product_repo.update(product_to_update):
            logger.info(f"Product ID {product_id} updated successfully.")
            return product_to_update
        logger.error(f"Failed to update product ID {product_id} in repository.")
        return None

    def delete_product(self, product_id: int) -> bool:
        logger.warning(f"Attempting to delete product ID: {product_id}.")
        if not self.get_product_by_id(product_id):
            return False
        if self.product_repo.delete(product_id):
            logger.info(f"Product ID {product_id} deleted successfully.")
            return True
        logger.error(f"Failed to delete product ID {product_id} from repository.")
        return False
