# gst_billing/business_logic/customer_manager.py

from typing import Optional, List, Any, Dict
from gst_billing.business_logic.entities.customer_entity import CustomerEntity
from gst_billing.business_logic.exceptions import ValidationError
from gst_billing.data_access.customers_repository import CustomersRepository
import logging

logger = logging.getLogger(__name__)

class CustomerManager:
    def __init__(self, customers_repository: CustomersRepository):
        """
        Initializes the CustomerManager with a CustomersRepository.
        :param customers_repository: An instance of CustomersRepository.
        """
        if customers_repository is None:
            raise ValueError("customers_repository cannot be None")
        self.customers_repository = customers_repository

    def create_customer(self, name: str, city: str = "", phone: Optional[str] = None) -> CustomerEntity:
        """
        Adds a saved customer. Invoices copy name and city as text, so this
        list is only a convenience for filling the bill header.
        """
        if not name or not isinstance(name, str) or not name.strip():
            logger.error("Customer name cannot be empty.")
            raise ValidationError("Customer name cannot be empty.")

        customer_entity = CustomerEntity(
            name=name.strip(),
            city=(city or "").strip(),
            phone=phone.strip() if phone and phone.strip() else None,
        )
        try:
            created_customer = self.customers_repository.add(customer_entity)
            logger.info(f"Customer '{created_customer.name}' (ID: {created_customer.id}) added successfully.")
            return created_customer
        except Exception as e:
            logger.error(f"Error adding customer '{name}': {e}", exc_info=True)
            raise

    def get_customer_by_id(self, customer_id: int) -> Optional[CustomerEntity]:
        if not isinstance(customer_id, int) or customer_id <= 0:
            logger.error(f"Invalid customer_id: {customer_id}")
            return None

        customer = self.customers_repository.get_by_id(customer_id)
        if customer:
            logger.debug(f"Customer with ID {customer_id} found: {customer.name}")
        else:
            logger.debug(f"Customer with ID {customer_id} not found.")
        return customer

    def get_all_customers(self) -> List[CustomerEntity]:
        logger.debug("Fetching all customers.")
        return self.customers_repository.get_all(order_by="name ASC")

    def search_customers(self, query: str) -> List[CustomerEntity]:
        """Matches name or city; blank query lists everything."""
        if not query or not query.strip():
            return self.get_all_customers()
        return self.customers_repository.search(query.strip())

    def update_customer(self, customer_id: int, update_data: Dict[str, Any]) -> Optional[CustomerEntity]:
        customer = self.get_customer_by_id(customer_id)
        if not customer:
            logger.warning(f"Update failed: customer with ID {customer_id} not found.")
            return None

        if "name" in update_data:
            new_name = update_data["name"]
            if not new_name or not str(new_name).strip():
                raise ValidationError("Customer name cannot be empty.")
            customer.name = str(new_name).strip()
        if "city" in update_data:
            customer.city = (update_data["city"] or "").strip()
        if "phone" in update_data:
            phone = update_data["phone"]
            customer.phone = phone.strip() if phone and phone.strip() else None

        try:
            updated = self.customers_repository.update(customer)
            if updated:
                logger.info(f"Customer with ID {customer_id} updated successfully.")
            return updated
        except Exception as e:
            logger.error(f"Error updating customer ID {customer_id}: {e}", exc_info=True)
            raise

    def delete_customer(self, customer_id: int) -> bool:
        customer = self.get_customer_by_id(customer_id)
        if not customer:
            logger.warning(f"Delete failed: customer with ID {customer_id} not found.")
            return False
        try:
            deleted = self.customers_repository.delete(customer_id)
            if deleted:
                logger.info(f"Customer '{customer.name}' (ID: {customer_id}) deleted.")
            return deleted
        except Exception as e:
            logger.error(f"Error deleting customer ID {customer_id}: {e}", exc_info=True)
            raise
