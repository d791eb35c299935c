# gst_billing/presentation/history_ui.py

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QTableView, QPushButton, QHBoxLayout,
    QMessageBox, QDialog, QLineEdit, QDialogButtonBox, QAbstractItemView,
    QTextEdit, QHeaderView, QApplication, QFileDialog
)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from typing import List, Optional, Any, Callable

from gst_billing.business_logic.entities.invoice_entity import InvoiceEntity
from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.invoice_manager import InvoiceManager
from gst_billing.business_logic import history_manager
from gst_billing.utils.money import format_amount
from .custom_widgets import BillDateEdit
from .invoice_renderer import InvoiceRenderer
from .invoice_printer import print_invoice

import logging
logger = logging.getLogger(__name__)


# --- Table Model for the list of saved bills ---
class InvoiceTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[InvoiceEntity]] = None, parent=None):
        super().__init__(parent)
        self._invoices: List[InvoiceEntity] = data if data is not None else []
        self._headers = ["Bill No", "Date", "Customer", "City", "Items", "Total"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._invoices)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._invoices)):
            return QVariant()
        invoice = self._invoices[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return invoice.id
            elif col == 1: return invoice.invoice_date
            elif col == 2: return invoice.customer_name
            elif col == 3: return invoice.customer_city
            elif col == 4: return str(len(invoice.items))
            elif col == 5: return format_amount(invoice.total)
        elif role == Qt.ItemDataRole.ToolTipRole and col == 4:
            return history_manager.items_description(invoice)
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col == 5:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            if col in [0, 1, 4]:
                return Qt.AlignmentFlag.AlignCenter | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[InvoiceEntity]):
        logger.debug(f"Updating invoice table model with {len(new_data)} rows.")
        self.beginResetModel()
        self._invoices = new_data
        self.endResetModel()

    def get_invoice_at_row(self, row: int) -> Optional[InvoiceEntity]:
        if 0 <= row < len(self._invoices):
            return self._invoices[row]
        return None

    def invoices(self) -> List[InvoiceEntity]:
        return list(self._invoices)


class InvoiceViewDialog(QDialog):
    """Read-only view of a saved bill with PDF export and copy-as-text."""

    def __init__(self, invoice: InvoiceEntity, settings: BusinessSettings, parent=None):
        super().__init__(parent)
        self.invoice = invoice
        self.renderer = InvoiceRenderer(settings)

        self.setWindowTitle(f"Bill No. {invoice.id}")
        self.setMinimumSize(860, 760)
        self._setup_ui()
        self._populate_data()

        self.print_button.clicked.connect(self._handle_print)
        self.pdf_button.clicked.connect(self._handle_pdf_export)
        self.copy_text_button.clicked.connect(self._handle_copy_text)
        self.dialog_button_box.rejected.connect(self.reject)

    def _setup_ui(self):
        self.main_layout = QVBoxLayout(self)

        top_controls_layout = QHBoxLayout()
        self.print_button = QPushButton("Print")
        self.pdf_button = QPushButton("Download PDF")
        self.copy_text_button = QPushButton("Copy as Text")
        top_controls_layout.addWidget(self.print_button)
        top_controls_layout.addWidget(self.pdf_button)
        top_controls_layout.addWidget(self.copy_text_button)
        top_controls_layout.addStretch(1)
        self.main_layout.addLayout(top_controls_layout)

        self.invoice_display_browser = QTextEdit()
        self.invoice_display_browser.setReadOnly(True)
        self.main_layout.addWidget(self.invoice_display_browser)

        self.dialog_button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        self.main_layout.addWidget(self.dialog_button_box)
        self.setLayout(self.main_layout)

    def _populate_data(self):
        self.invoice_display_browser.setHtml(self.renderer.render_html(self.invoice))

    def _handle_print(self):
        try:
            print_invoice(self, self.renderer, self.invoice)
        except Exception as e:
            logger.error(f"Error printing bill {self.invoice.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Print Error", f"Could not print the bill:\n{e}")

    def _handle_pdf_export(self):
        default_filename = InvoiceRenderer.pdf_file_name(self.invoice)
        file_path, _ = QFileDialog.getSaveFileName(self, "Save Bill as PDF", default_filename, "PDF Files (*.pdf)")
        if not file_path:
            return
        try:
            self.renderer.write_pdf(self.invoice, file_path)
            QMessageBox.information(self, "PDF Saved", f"Bill saved as PDF:\n{file_path}")
        except Exception as e:
            logger.error(f"Error generating PDF for bill {self.invoice.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "PDF Error", f"Could not generate the PDF:\n{e}")

    def _handle_copy_text(self):
        clipboard = QApplication.clipboard()
        if clipboard:
            clipboard.setText(self.renderer.render_text(self.invoice))
            QMessageBox.information(self, "Copied", "Bill text copied to the clipboard.")


class HistoryUI(QWidget):
    def __init__(self,
                 invoice_manager: InvoiceManager,
                 settings_provider: Callable[[], BusinessSettings],
                 parent=None):
        super().__init__(parent)
        self.invoice_manager = invoice_manager
        self.settings_provider = settings_provider
        self._all_invoices: List[InvoiceEntity] = []
        self.table_model = InvoiceTableModel()
        self._init_ui()
        self.load_invoices_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        filter_layout = QHBoxLayout()
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search by customer or bill no...")
        self.from_date_edit = BillDateEdit(self, allow_empty=True)
        self.to_date_edit = BillDateEdit(self, allow_empty=True)
        filter_layout.addWidget(self.search_edit, 2)
        filter_layout.addWidget(QLabel("From:"))
        filter_layout.addWidget(self.from_date_edit, 1)
        filter_layout.addWidget(QLabel("To:"))
        filter_layout.addWidget(self.to_date_edit, 1)
        main_layout.addLayout(filter_layout)

        self.drift_label = QLabel()
        self.drift_label.setStyleSheet("color: #b45309; font-weight: bold;")
        self.drift_label.setVisible(False)
        main_layout.addWidget(self.drift_label)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table_view.doubleClicked.connect(self._view_invoice_details)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(2, QHeaderView.ResizeMode.Stretch)
        main_layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.view_button = QPushButton("View Bill")
        self.export_button = QPushButton("Export CSV")
        self.fix_numbering_button = QPushButton("Fix numbering")
        self.refresh_button = QPushButton("Refresh")
        self.count_label = QLabel()
        button_layout.addWidget(self.view_button)
        button_layout.addWidget(self.export_button)
        button_layout.addWidget(self.fix_numbering_button)
        button_layout.addStretch()
        button_layout.addWidget(self.count_label)
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)

        self.search_edit.textChanged.connect(self.apply_filters)
        self.from_date_edit.dateChanged.connect(self.apply_filters)
        self.to_date_edit.dateChanged.connect(self.apply_filters)
        self.view_button.clicked.connect(self._view_invoice_details)
        self.export_button.clicked.connect(self._export_csv)
        self.fix_numbering_button.clicked.connect(self._fix_numbering)
        self.refresh_button.clicked.connect(self.load_invoices_data)

        self.setLayout(main_layout)
        logger.info("HistoryUI initialized.")

    def load_invoices_data(self):
        try:
            self._all_invoices = self.invoice_manager.get_all_invoices()
            drift = self.invoice_manager.detect_sequence_drift()
        except Exception as e:
            logger.error(f"Error loading invoices: {e}", exc_info=True)
            QMessageBox.critical(self, "Load Error", f"Could not load bills: {e}")
            return
        if drift is not None:
            self.drift_label.setText(f"Bill numbering is behind the saved bills. "
                                     f"Use 'Fix numbering' to continue from {drift}.")
        self.drift_label.setVisible(drift is not None)
        self.apply_filters()

    def apply_filters(self, *_args):
        rows = history_manager.query_invoices(
            self._all_invoices,
            self.search_edit.text(),
            self.from_date_edit.date(),
            self.to_date_edit.date(),
        )
        self.table_model.update_data(rows)
        self.count_label.setText(f"{len(rows)} of {len(self._all_invoices)} bills")

    def _get_selected_invoice(self) -> Optional[InvoiceEntity]:
        selection_model = self.table_view.selectionModel()
        if not selection_model or not selection_model.hasSelection():
            return None
        rows = selection_model.selectedRows()
        return self.table_model.get_invoice_at_row(rows[0].row()) if rows else None

    def _view_invoice_details(self):
        invoice = self._get_selected_invoice()
        if not invoice:
            QMessageBox.information(self, "No Selection", "Please select a bill to view.")
            return
        dialog = InvoiceViewDialog(invoice, self.settings_provider(), parent=self)
        dialog.exec_()

    def _export_csv(self):
        rows = self.table_model.invoices()
        if not rows:
            QMessageBox.information(self, "Nothing to Export", "No bills match the current filters.")
            return
        file_path, _ = QFileDialog.getSaveFileName(self, "Export Bills", history_manager.export_file_name(),
                                                   "CSV Files (*.csv)")
        if not file_path:
            return
        try:
            with open(file_path, "w", encoding="utf-8", newline="") as f:
                f.write(history_manager.export_csv(rows))
            QMessageBox.information(self, "Exported", f"{len(rows)} bills exported to:\n{file_path}")
        except OSError as e:
            logger.error(f"Error writing CSV export to {file_path}: {e}", exc_info=True)
            QMessageBox.critical(self, "Export Error", f"Could not write the file:\n{e}")

    def _fix_numbering(self):
        try:
            next_number = self.invoice_manager.reconcile_sequence()
        except Exception as e:
            logger.error(f"Error reconciling bill numbering: {e}", exc_info=True)
            QMessageBox.critical(self, "Fix Numbering", f"Could not update the bill counter:\n{e}")
            return
        QMessageBox.information(self, "Fix Numbering", f"The next bill number is {next_number}.")
        self.load_invoices_data()
