# gst_billing/presentation/products_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit, QComboBox,
                             QFormLayout, QDialogButtonBox, QAbstractItemView,
                             QDoubleSpinBox, QHeaderView)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex, pyqtSignal

from typing import List, Optional, Any, Dict

from gst_billing.business_logic.entities.product_entity import ProductEntity
from gst_billing.business_logic.product_manager import ProductManager
from gst_billing.constants import PRODUCT_UNITS, DEFAULT_PRODUCT_UNIT
from gst_billing.utils.money import format_amount
import logging
from decimal import Decimal
logger = logging.getLogger(__name__)

# --- Custom Table Model for Products ---
class ProductTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[ProductEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[ProductEntity] = data if data is not None else []
        self._headers = ["ID", "Name", "Packing", "Rate", "Unit"]

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
        product = self._data[row]

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return str(product.id)
            elif col == 1: return product.name
            elif col == 2: return product.packing or "-"
            elif col == 3: return format_amount(product.rate)
            elif col == 4: return product.unit

        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col in [0, 4]:
                return Qt.AlignmentFlag.AlignCenter | Qt.AlignmentFlag.AlignVCenter
            if col == 3:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter

        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[ProductEntity]):
        logger.debug(f"Updating product table model with {len(new_data)} rows.")
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_product_at_row(self, row: int) -> Optional[ProductEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None

# --- Add/Edit Product Dialog ---
class ProductDialog(QDialog):
    def __init__(self, product: Optional[ProductEntity] = None, parent=None):
        super().__init__(parent)
        self.product = product

        self.setWindowTitle("Add Product" if not product else f"Edit: {product.name}")
        self.setMinimumWidth(400)

        layout = QFormLayout(self)

        self.name_edit = QLineEdit(self)
        self.packing_edit = QLineEdit(self)
        self.packing_edit.setPlaceholderText("e.g. 1 kg, 500 gm, 1 ltr")
        self.rate_spinbox = QDoubleSpinBox(self)
        self.rate_spinbox.setDecimals(2); self.rate_spinbox.setMinimum(0.00)
        self.rate_spinbox.setMaximum(999999999.99); self.rate_spinbox.setGroupSeparatorShown(True)
        self.unit_combo = QComboBox(self)
        self.unit_combo.setEditable(True)
        self.unit_combo.addItems(PRODUCT_UNITS)
        self.unit_combo.setCurrentText(DEFAULT_PRODUCT_UNIT)

        if self.product:
            self.name_edit.setText(self.product.name)
            self.packing_edit.setText(self.product.packing or "")
            self.rate_spinbox.setValue(float(self.product.rate))
            self.unit_combo.setCurrentText(self.product.unit)

        layout.addRow("Name:", self.name_edit)
        layout.addRow("Packing:", self.packing_edit)
        layout.addRow("Rate:", self.rate_spinbox)
        layout.addRow("Unit:", self.unit_combo)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        layout.addWidget(self.button_box)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

    def get_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Invalid Input", "Product name cannot be empty.")
            return None
        return {
            "name": self.name_edit.text().strip(),
            "packing": self.packing_edit.text().strip() or None,
            # the spin box holds a float; go through its 2-dp text to keep the typed value
            "rate": Decimal(f"{self.rate_spinbox.value():.2f}"),
            "unit": self.unit_combo.currentText().strip() or DEFAULT_PRODUCT_UNIT,
        }

# --- Main Products UI Widget ---
class ProductsUI(QWidget):
    products_changed = pyqtSignal()

    def __init__(self, product_manager: ProductManager, parent=None):
        super().__init__(parent)
        self.product_manager = product_manager
        self.table_model = ProductTableModel()
        self._init_ui()
        self.load_products_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        search_layout = QHBoxLayout()
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search products...")
        self.search_edit.textChanged.connect(self.load_products_data)
        search_layout.addWidget(self.search_edit)
        main_layout.addLayout(search_layout)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table_view.doubleClicked.connect(self._open_edit_product_dialog)

        header = self.table_view.horizontalHeader()
        if header:
            header.setStretchLastSection(True)
            header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        main_layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("Add Product")
        self.edit_button = QPushButton("Edit Product")
        self.delete_button = QPushButton("Delete Product")
        self.refresh_button = QPushButton("Refresh")

        self.add_button.clicked.connect(self._open_add_product_dialog)
        self.edit_button.clicked.connect(self._open_edit_product_dialog)
        self.delete_button.clicked.connect(self._delete_selected_product)
        self.refresh_button.clicked.connect(self.load_products_data)

        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)

        main_layout.addLayout(button_layout)
        self.setLayout(main_layout)
        logger.info("ProductsUI initialized.")

    def load_products_data(self):
        try:
            products = self.product_manager.search_products(self.search_edit.text())
            self.table_model.update_data(products)
            logger.debug(f"{len(products)} products loaded into table.")
        except Exception as e:
            logger.error(f"Error loading products: {e}", exc_info=True)
            QMessageBox.critical(self, "Load Error", f"Could not load products: {e}")

    def _selected_product(self) -> Optional[ProductEntity]:
        selection_model = self.table_view.selectionModel()
        if not selection_model or not selection_model.hasSelection():
            return None
        selected_rows = selection_model.selectedRows()
        if not selected_rows:
            return None
        return self.table_model.get_product_at_row(selected_rows[0].row())

    def _open_add_product_dialog(self):
        dialog = ProductDialog(parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.product_manager.create_product(**data)
                    self.load_products_data()
                    self.products_changed.emit()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation Error", str(ve))
                except Exception as e:
                    logger.error(f"Error adding product: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not add product: {e}")

    def _open_edit_product_dialog(self):
        product_to_edit = self._selected_product()
        if not product_to_edit or product_to_edit.id is None:
            QMessageBox.information(self, "No Selection", "Please select a product to edit.")
            return

        dialog = ProductDialog(product=product_to_edit, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    if self.product_manager.update_product(product_to_edit.id, data):
                        self.load_products_data()
                        self.products_changed.emit()
                    else:
                        QMessageBox.warning(self, "Not Updated", f"Product '{data['name']}' could not be updated.")
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation Error", str(ve))
                except Exception as e:
                    logger.error(f"Error editing product: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update product: {e}")

    def _delete_selected_product(self):
        product_to_delete = self._selected_product()
        if not product_to_delete or product_to_delete.id is None:
            QMessageBox.information(self, "No Selection", "Please select a product to delete.")
            return

        reply = QMessageBox.question(self, "Confirm Delete",
                                     f"Delete product '{product_to_delete.name}'?\n"
                                     "Saved bills keep their own copy of the item.",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                if self.product_manager.delete_product(product_to_delete.id):
                    self.load_products_data()
                    self.products_changed.emit()
                else:
                    QMessageBox.warning(self, "Not Deleted", f"Product '{product_to_delete.name}' was not deleted.")
            except Exception as e:
                logger.error(f"Error deleting product: {e}", exc_info=True)
                QMessageBox.critical(self, "Delete Error", f"Could not delete product: {e}")
