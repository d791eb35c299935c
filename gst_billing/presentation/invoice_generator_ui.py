# gst_billing/presentation/invoice_generator_ui.py

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QTableView, QPushButton, QHBoxLayout,
    QMessageBox, QLineEdit, QComboBox, QFormLayout, QGroupBox,
    QAbstractItemView, QDoubleSpinBox, QTextEdit, QHeaderView,
    QApplication, QFileDialog, QSplitter
)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex, QUrl, pyqtSignal
from PyQt5.QtGui import QDesktopServices
from decimal import Decimal
from typing import List, Optional, Any
from urllib.parse import quote

from gst_billing.business_logic.entities.line_item_entity import LineItemEntity
from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.cart_manager import CartManager
from gst_billing.business_logic.product_manager import ProductManager
from gst_billing.business_logic.customer_manager import CustomerManager
from gst_billing.business_logic.invoice_manager import InvoiceManager
from gst_billing.business_logic.settings_manager import SettingsManager
from gst_billing.business_logic.exceptions import SequenceDriftError
from gst_billing.config import CURRENCY_SYMBOL
from gst_billing.utils import date_converter
from gst_billing.utils.money import format_amount, format_quantity
from .custom_widgets import BillDateEdit
from .invoice_renderer import InvoiceRenderer
from .invoice_printer import print_invoice

import logging
logger = logging.getLogger(__name__)


# --- Table Model for the rows of the bill being composed ---
class CartItemTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[LineItemEntity]] = None, parent=None):
        super().__init__(parent)
        self._items: List[LineItemEntity] = data if data is not None else []
        self._headers = ["No.", "Item", "Packing", "Qty", "Rate", "Amount"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._items)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._items)):
            return QVariant()
        item = self._items[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return str(index.row() + 1)
            elif col == 1: return item.name
            elif col == 2: return item.packing or "-"
            elif col == 3: return f"{format_quantity(item.quantity)} {item.unit}"
            elif col == 4: return format_amount(item.rate)
            elif col == 5: return format_amount(item.amount)
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col in [4, 5]:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            if col in [0, 3]:
                return Qt.AlignmentFlag.AlignCenter | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[LineItemEntity]):
        self.beginResetModel()
        self._items = new_data
        self.endResetModel()

    def get_item_at_row(self, row: int) -> Optional[LineItemEntity]:
        if 0 <= row < len(self._items):
            return self._items[row]
        return None


class InvoiceGeneratorUI(QWidget):
    """
    The billing screen: pick products into the cart, fill in the customer and
    date, watch the printable bill update, then save, export or share it.
    """
    invoice_saved = pyqtSignal(str)

    def __init__(self,
                 cart_manager: CartManager,
                 product_manager: ProductManager,
                 customer_manager: CustomerManager,
                 invoice_manager: InvoiceManager,
                 settings_manager: SettingsManager,
                 parent=None):
        super().__init__(parent)
        self.cart_manager = cart_manager
        self.product_manager = product_manager
        self.customer_manager = customer_manager
        self.invoice_manager = invoice_manager
        self.settings_manager = settings_manager
        self.renderer = InvoiceRenderer(cart_manager.settings)
        self.items_model = CartItemTableModel()

        self._init_ui()
        self.load_products()
        self.load_customers()
        self._unsubscribe_settings = self.settings_manager.subscribe(self._on_settings_changed)
        self._refresh_view()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        splitter = QSplitter(Qt.Orientation.Horizontal, self)

        # --- left: editing ---
        editor = QWidget(splitter)
        editor_layout = QVBoxLayout(editor)

        header_group = QGroupBox("Bill Details")
        header_form = QFormLayout(header_group)
        self.bill_no_label = QLabel()
        self.bill_no_label.setStyleSheet("font-weight: bold;")
        self.date_edit = BillDateEdit(header_group)
        self.customer_combo = QComboBox()
        self.customer_combo.setEditable(True)
        self.customer_combo.setInsertPolicy(QComboBox.InsertPolicy.NoInsert)
        self.customer_combo.lineEdit().setPlaceholderText("Customer name (M/s.)")
        self.city_edit = QLineEdit()
        self.city_edit.setPlaceholderText("City")
        header_form.addRow("Bill No.:", self.bill_no_label)
        header_form.addRow("Date:", self.date_edit)
        header_form.addRow("Customer:", self.customer_combo)
        header_form.addRow("City:", self.city_edit)
        editor_layout.addWidget(header_group)

        product_group = QGroupBox("Add Item")
        product_layout = QHBoxLayout(product_group)
        self.product_combo = QComboBox()
        self.product_combo.setMinimumWidth(220)
        self.quantity_spinbox = QDoubleSpinBox()
        self.quantity_spinbox.setDecimals(3)
        self.quantity_spinbox.setMinimum(1)
        self.quantity_spinbox.setMaximum(999999.999)
        self.quantity_spinbox.setValue(1)
        self.add_item_button = QPushButton("Add")
        product_layout.addWidget(self.product_combo, 1)
        product_layout.addWidget(QLabel("Qty:"))
        product_layout.addWidget(self.quantity_spinbox)
        product_layout.addWidget(self.add_item_button)
        editor_layout.addWidget(product_group)

        self.items_table = QTableView()
        self.items_table.setModel(self.items_model)
        self.items_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.items_table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.items_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        items_header = self.items_table.horizontalHeader()
        if items_header:
            items_header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        editor_layout.addWidget(self.items_table)

        row_buttons = QHBoxLayout()
        self.increase_button = QPushButton("+1")
        self.decrease_button = QPushButton("-1")
        self.remove_item_button = QPushButton("Remove Item")
        row_buttons.addWidget(self.increase_button)
        row_buttons.addWidget(self.decrease_button)
        row_buttons.addWidget(self.remove_item_button)
        row_buttons.addStretch()
        editor_layout.addLayout(row_buttons)

        totals_group = QGroupBox("Totals")
        totals_form = QFormLayout(totals_group)
        self.subtotal_label = QLabel()
        self.tax_label = QLabel()
        self.total_label = QLabel()
        self.total_label.setStyleSheet("font-weight: bold; font-size: 12pt;")
        self.weight_label = QLabel()
        self.words_label = QLabel()
        self.words_label.setWordWrap(True)
        totals_form.addRow("Subtotal:", self.subtotal_label)
        totals_form.addRow("GST:", self.tax_label)
        totals_form.addRow("Grand Total:", self.total_label)
        totals_form.addRow("Qty / Weight:", self.weight_label)
        totals_form.addRow("In words:", self.words_label)
        editor_layout.addWidget(totals_group)

        # --- right: preview ---
        self.preview = QTextEdit(splitter)
        self.preview.setReadOnly(True)
        splitter.addWidget(editor)
        splitter.addWidget(self.preview)
        splitter.setStretchFactor(1, 1)
        main_layout.addWidget(splitter)

        actions = QHBoxLayout()
        self.save_button = QPushButton("Save Bill")
        self.print_button = QPushButton("Print")
        self.pdf_button = QPushButton("Download PDF")
        self.copy_text_button = QPushButton("Copy as Text")
        self.email_button = QPushButton("Email")
        self.new_bill_button = QPushButton("New Bill")
        for button in (self.save_button, self.print_button, self.pdf_button,
                       self.copy_text_button, self.email_button):
            actions.addWidget(button)
        actions.addStretch()
        actions.addWidget(self.new_bill_button)
        main_layout.addLayout(actions)

        self.add_item_button.clicked.connect(self._add_item_clicked)
        self.increase_button.clicked.connect(lambda: self._adjust_selected(1))
        self.decrease_button.clicked.connect(lambda: self._adjust_selected(-1))
        self.remove_item_button.clicked.connect(self._remove_item_clicked)
        self.customer_combo.activated.connect(self._customer_selected)
        self.customer_combo.lineEdit().textEdited.connect(self._customer_text_edited)
        self.city_edit.textEdited.connect(self._customer_text_edited)
        self.date_edit.dateChanged.connect(self._date_changed)
        self.save_button.clicked.connect(self._save_clicked)
        self.print_button.clicked.connect(self._print_clicked)
        self.pdf_button.clicked.connect(self._pdf_clicked)
        self.copy_text_button.clicked.connect(self._copy_text_clicked)
        self.email_button.clicked.connect(self._email_clicked)
        self.new_bill_button.clicked.connect(self._new_bill_clicked)

        self.setLayout(main_layout)
        logger.info("InvoiceGeneratorUI initialized.")

    # --- lookups ---
    def load_products(self):
        try:
            products = self.product_manager.get_all_products()
        except Exception as e:
            logger.error(f"Error loading products for billing: {e}", exc_info=True)
            QMessageBox.critical(self, "Load Error", f"Could not load products: {e}")
            return
        self.product_combo.clear()
        for product in products:
            packing = f" ({product.packing})" if product.packing else ""
            self.product_combo.addItem(
                f"{product.name}{packing} - {CURRENCY_SYMBOL}{format_amount(product.rate)}/{product.unit}",
                product.id)

    def load_customers(self):
        try:
            customers = self.customer_manager.get_all_customers()
        except Exception as e:
            logger.error(f"Error loading customers for billing: {e}", exc_info=True)
            QMessageBox.critical(self, "Load Error", f"Could not load customers: {e}")
            return
        current_text = self.customer_combo.currentText()
        self.customer_combo.blockSignals(True)
        self.customer_combo.clear()
        for customer in customers:
            label = f"{customer.name} ({customer.city})" if customer.city else customer.name
            self.customer_combo.addItem(label, customer.id)
        self.customer_combo.setCurrentIndex(-1)
        self.customer_combo.setEditText(current_text)
        self.customer_combo.blockSignals(False)

    # --- view sync ---
    def _refresh_view(self):
        cart = self.cart_manager
        totals = cart.totals
        self.items_model.update_data(cart.items)
        self.bill_no_label.setText(cart.bill_no)

        self.subtotal_label.setText(f"{CURRENCY_SYMBOL}{format_amount(totals.subtotal)}")
        if cart.tax.enabled:
            half = format_quantity(cart.tax.half_rate)
            self.tax_label.setToolTip(f"Total GST {CURRENCY_SYMBOL}{format_amount(totals.tax_amount)}")
            self.tax_label.setText(f"CGST {half}% {format_amount(totals.cgst_amount)} + "
                                   f"SGST {half}% {format_amount(totals.sgst_amount)}")
        else:
            self.tax_label.setText("Not applied")
            self.tax_label.setToolTip("")
        self.total_label.setText(f"{CURRENCY_SYMBOL}{format_amount(totals.grand_total)}")
        self.weight_label.setText(f"{format_quantity(totals.total_quantity)} / {totals.weight_display}")
        self.words_label.setText(totals.amount_in_words)

        self.preview.setHtml(self.renderer.render_html(cart.build_document()))
        self._sync_enabled()

    def _sync_enabled(self):
        editable = not self.cart_manager.is_locked
        for widget in (self.date_edit, self.customer_combo, self.city_edit, self.product_combo,
                       self.quantity_spinbox, self.add_item_button, self.increase_button,
                       self.decrease_button, self.remove_item_button, self.save_button):
            widget.setEnabled(editable)

    def _sync_header_widgets(self):
        cart = self.cart_manager
        self.customer_combo.blockSignals(True)
        self.customer_combo.setCurrentIndex(-1)
        self.customer_combo.setEditText(cart.customer_name)
        self.customer_combo.blockSignals(False)
        self.city_edit.setText(cart.customer_city)
        self.date_edit.blockSignals(True)
        self.date_edit.setDate(date_converter.parse_bill_date(cart.invoice_date))
        self.date_edit.blockSignals(False)

    def _on_settings_changed(self, settings: BusinessSettings):
        self.cart_manager.apply_settings(settings)
        self.renderer = InvoiceRenderer(settings)
        self._refresh_view()

    def _selected_line(self) -> Optional[LineItemEntity]:
        selection_model = self.items_table.selectionModel()
        if not selection_model or not selection_model.hasSelection():
            return None
        rows = selection_model.selectedRows()
        return self.items_model.get_item_at_row(rows[0].row()) if rows else None

    def _run_cart_action(self, action, error_title: str = "Error") -> bool:
        try:
            action()
            return True
        except ValueError as ve:
            QMessageBox.warning(self, "Validation Error", str(ve))
        except Exception as e:
            logger.error(f"{error_title}: {e}", exc_info=True)
            QMessageBox.critical(self, error_title, str(e))
        finally:
            self._refresh_view()
        return False

    # --- handlers ---
    def _add_item_clicked(self):
        product_id = self.product_combo.currentData()
        if product_id is None:
            QMessageBox.information(self, "No Product", "Please add products to the catalog first.")
            return
        quantity = Decimal(f"{self.quantity_spinbox.value():.3f}")
        if self._run_cart_action(lambda: self.cart_manager.add_item(product_id, quantity), "Add Item Error"):
            self.quantity_spinbox.setValue(1)

    def _adjust_selected(self, delta: int):
        line = self._selected_line()
        if not line:
            QMessageBox.information(self, "No Selection", "Please select a row first.")
            return
        row = self.items_table.selectionModel().selectedRows()[0].row()
        self._run_cart_action(lambda: self.cart_manager.adjust_quantity(line.id, delta), "Quantity Error")
        self.items_table.selectRow(row)

    def _remove_item_clicked(self):
        line = self._selected_line()
        if not line:
            QMessageBox.information(self, "No Selection", "Please select a row to remove.")
            return
        self._run_cart_action(lambda: self.cart_manager.remove_item(line.id), "Remove Item Error")

    def _customer_selected(self, index: int):
        customer_id = self.customer_combo.itemData(index)
        customer = self.customer_manager.get_customer_by_id(customer_id) if customer_id is not None else None
        if customer is None:
            return
        if self._run_cart_action(lambda: self.cart_manager.select_customer(customer)):
            self._sync_header_widgets()

    def _customer_text_edited(self, _text: str = ""):
        name = self.customer_combo.currentText()
        city = self.city_edit.text()
        self._run_cart_action(lambda: self.cart_manager.set_customer(name, city))

    def _date_changed(self, value):
        if value is None:
            return
        self._run_cart_action(lambda: self.cart_manager.set_date(date_converter.to_bill_date_str(value)))

    def _save_clicked(self):
        try:
            document = self.cart_manager.save(self.invoice_manager)
        except SequenceDriftError as e:
            title = "Bill Saved, Numbering Out of Step" if e.document_saved else "Bill Number Already Used"
            QMessageBox.warning(self, title, str(e))
            if e.document_saved:
                self.invoice_saved.emit(e.bill_no)
        except ValueError as ve:
            QMessageBox.warning(self, "Validation Error", str(ve))
        except Exception as e:
            logger.error(f"Error saving bill {self.cart_manager.bill_no}: {e}", exc_info=True)
            QMessageBox.critical(self, "Save Error", f"Could not save the bill:\n{e}")
        else:
            QMessageBox.information(self, "Saved", f"Bill {document.id} saved.")
            self.invoice_saved.emit(document.id)
        finally:
            self._refresh_view()

    def _print_clicked(self):
        document = self.cart_manager.build_document()
        if not document.items:
            QMessageBox.warning(self, "Empty Bill", "Please add items to the bill first.")
            return
        try:
            print_invoice(self, self.renderer, document)
        except Exception as e:
            logger.error(f"Error printing bill {document.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Print Error", f"Could not print the bill:\n{e}")

    def _pdf_clicked(self):
        document = self.cart_manager.build_document()
        if not document.items:
            QMessageBox.warning(self, "Empty Bill", "Please add items to the bill first.")
            return
        default_name = InvoiceRenderer.pdf_file_name(document, document.customer_name or "Customer")
        file_path, _ = QFileDialog.getSaveFileName(self, "Save Bill as PDF", default_name, "PDF Files (*.pdf)")
        if not file_path:
            return
        try:
            self.renderer.write_pdf(document, file_path)
            QMessageBox.information(self, "PDF Saved", f"Bill saved as PDF:\n{file_path}")
        except Exception as e:
            logger.error(f"Error generating PDF: {e}", exc_info=True)
            QMessageBox.critical(self, "PDF Error", f"Could not generate the PDF:\n{e}")

    def _copy_text_clicked(self):
        document = self.cart_manager.build_document()
        clipboard = QApplication.clipboard()
        if clipboard:
            clipboard.setText(self.renderer.render_text(document))
            QMessageBox.information(self, "Copied", "Bill text copied to the clipboard.")

    def _email_clicked(self):
        subject, body = self.renderer.render_email(self.cart_manager.build_document())
        url = QUrl(f"mailto:?subject={quote(subject)}&body={quote(body)}")
        if not QDesktopServices.openUrl(url):
            logger.warning("No mail client accepted the mailto link.")
            QMessageBox.warning(self, "Email", "Could not open an email client.")

    def _new_bill_clicked(self):
        if self.cart_manager.has_unsaved_changes:
            reply = QMessageBox.question(self, "Discard Bill",
                                         "The current bill has not been saved. Start a new one anyway?",
                                         QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                         QMessageBox.StandardButton.No)
            if reply != QMessageBox.StandardButton.Yes:
                return
        self.cart_manager.reset()
        self._sync_header_widgets()
        self._refresh_view()

    def closeEvent(self, event):
        self._unsubscribe_settings()
        super().closeEvent(event)
