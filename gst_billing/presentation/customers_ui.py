# gst_billing/presentation/customers_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit,
                             QFormLayout, QDialogButtonBox, QAbstractItemView,
                             QHeaderView)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex, pyqtSignal

from typing import List, Optional, Any, Dict

from gst_billing.business_logic.entities.customer_entity import CustomerEntity
from gst_billing.business_logic.customer_manager import CustomerManager
import logging

logger = logging.getLogger(__name__)

# --- Custom Table Model for Customers ---
class CustomerTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[CustomerEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[CustomerEntity] = data if data is not None else []
        self._headers = ["ID", "Name", "City", "Phone"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return QVariant()

        row = index.row()
        col = index.column()

        if not (0 <= row < len(self._data)):
            return QVariant()
        customer = self._data[row]

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0:
                return str(customer.id)
            elif col == 1:
                return customer.name
            elif col == 2:
                return customer.city
            elif col == 3:
                return customer.phone if customer.phone is not None else ""

        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col == 0:
                return Qt.AlignmentFlag.AlignCenter | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter

        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[CustomerEntity]):
        logger.debug(f"Updating customer table model with {len(new_data)} rows.")
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_customer_at_row(self, row: int) -> Optional[CustomerEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None

# --- Add/Edit Customer Dialog ---
class CustomerDialog(QDialog):
    def __init__(self, customer: Optional[CustomerEntity] = None, parent=None):
        super().__init__(parent)
        self.customer = customer

        self.setWindowTitle("Add Customer" if not customer else f"Edit Customer: {customer.name}")
        self.setMinimumWidth(350)

        layout = QFormLayout(self)
        self.name_edit = QLineEdit(self)
        self.city_edit = QLineEdit(self)
        self.phone_edit = QLineEdit(self)

        if self.customer:
            self.name_edit.setText(self.customer.name)
            self.city_edit.setText(self.customer.city)
            self.phone_edit.setText(self.customer.phone or "")

        layout.addRow("Name:", self.name_edit)
        layout.addRow("City:", self.city_edit)
        layout.addRow("Phone:", self.phone_edit)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        layout.addWidget(self.button_box)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

    def get_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Invalid Input", "Customer name cannot be empty.")
            return None
        return {
            "name": self.name_edit.text().strip(),
            "city": self.city_edit.text().strip(),
            "phone": self.phone_edit.text().strip() or None,
        }

# --- Main Customers UI Widget ---
class CustomersUI(QWidget):
    customers_changed = pyqtSignal()

    def __init__(self, customer_manager: CustomerManager, parent=None):
        super().__init__(parent)
        self.customer_manager = customer_manager
        self.table_model = CustomerTableModel()
        self._init_ui()
        self.load_customers_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search by name or city...")
        self.search_edit.textChanged.connect(self.load_customers_data)
        main_layout.addWidget(self.search_edit)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)

        header = self.table_view.horizontalHeader()
        if header:
            header.setStretchLastSection(True)
            header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        main_layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("Add Customer")
        self.edit_button = QPushButton("Edit Customer")
        self.delete_button = QPushButton("Delete Customer")
        self.refresh_button = QPushButton("Refresh")

        self.add_button.clicked.connect(self._open_add_customer_dialog)
        self.edit_button.clicked.connect(self._open_edit_customer_dialog)
        self.delete_button.clicked.connect(self._delete_selected_customer)
        self.refresh_button.clicked.connect(self.load_customers_data)

        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)

        main_layout.addLayout(button_layout)
        self.setLayout(main_layout)
        logger.info("CustomersUI initialized.")

    def load_customers_data(self):
        try:
            customers = self.customer_manager.search_customers(self.search_edit.text())
            self.table_model.update_data(customers)
        except Exception as e:
            logger.error(f"Error loading customers: {e}", exc_info=True)
            QMessageBox.critical(self, "Load Error", f"Could not load customers: {e}")

    def _selected_customer(self) -> Optional[CustomerEntity]:
        selection_model = self.table_view.selectionModel()
        if not selection_model or not selection_model.hasSelection():
            return None
        selected_rows = selection_model.selectedRows()
        if not selected_rows:
            return None
        return self.table_model.get_customer_at_row(selected_rows[0].row())

    def _open_add_customer_dialog(self):
        dialog = CustomerDialog(parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.customer_manager.create_customer(**data)
                    self.load_customers_data()
                    self.customers_changed.emit()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation Error", str(ve))
                except Exception as e:
                    logger.error(f"Error adding customer: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not add customer: {e}")

    def _open_edit_customer_dialog(self):
        customer = self._selected_customer()
        if not customer or customer.id is None:
            QMessageBox.information(self, "No Selection", "Please select a customer to edit.")
            return
        dialog = CustomerDialog(customer=customer, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    if self.customer_manager.update_customer(customer.id, data):
                        self.load_customers_data()
                        self.customers_changed.emit()
                    else:
                        QMessageBox.warning(self, "Not Updated", f"Customer '{data['name']}' was not found.")
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation Error", str(ve))
                except Exception as e:
                    logger.error(f"Error editing customer: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update customer: {e}")

    def _delete_selected_customer(self):
        customer = self._selected_customer()
        if not customer or customer.id is None:
            QMessageBox.information(self, "No Selection", "Please select a customer to delete.")
            return
        reply = QMessageBox.question(self, "Confirm Delete",
                                     f"Delete customer '{customer.name}'?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                if not self.customer_manager.delete_customer(customer.id):
                    QMessageBox.warning(self, "Not Deleted", f"Customer '{customer.name}' was not deleted.")
                self.load_customers_data()
                self.customers_changed.emit()
            except Exception as e:
                logger.error(f"Error deleting customer: {e}", exc_info=True)
                QMessageBox.critical(self, "Delete Error", f"Could not delete customer: {e}")
