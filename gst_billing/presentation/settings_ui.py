# gst_billing/presentation/settings_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QMessageBox,
                             QLineEdit, QFormLayout, QGroupBox, QCheckBox, QSpinBox,
                             QDoubleSpinBox, QScrollArea, QColorDialog)
from PyQt5.QtGui import QColor
from decimal import Decimal
from typing import Any, Dict

from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.settings_manager import SettingsManager

import logging
logger = logging.getLogger(__name__)

# BusinessSettings text fields edited with a plain QLineEdit, grouped as on screen.
_TEXT_FIELD_GROUPS = [
    ("Business", [
        ("name", "Business Name:"),
        ("sub_name", "Sub Title:"),
        ("address", "Address:"),
        ("mobile", "Mobile:"),
        ("logo_initial", "Logo Initial:"),
        ("logo_url", "Logo URL:"),
        ("signature_name", "Signatory Name:"),
        ("signature_url", "Signature Image URL:"),
    ]),
    ("Bank Details", [
        ("bank_name", "Bank Name:"),
        ("bank_account_number", "Account No.:"),
        ("bank_ifsc", "IFSC:"),
        ("bank_branch", "Branch:"),
    ]),
]


class SettingsUI(QWidget):
    def __init__(self, settings_manager: SettingsManager, parent=None):
        super().__init__(parent)
        self.settings_manager = settings_manager
        self._text_edits: Dict[str, QLineEdit] = {}
        self._init_ui()
        self._unsubscribe = self.settings_manager.subscribe(self._populate)
        self._populate(self.settings_manager.current)

    def _init_ui(self):
        outer_layout = QVBoxLayout(self)
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        content = QWidget()
        layout = QVBoxLayout(content)

        for title, field_defs in _TEXT_FIELD_GROUPS:
            group = QGroupBox(title)
            form = QFormLayout(group)
            for field_name, label in field_defs:
                edit = QLineEdit()
                self._text_edits[field_name] = edit
                form.addRow(label, edit)
            if title == "Business":
                color_row = QHBoxLayout()
                self.theme_color_edit = QLineEdit()
                self.theme_color_edit.setPlaceholderText("#dc2626")
                self.pick_color_button = QPushButton("Pick...")
                self.pick_color_button.clicked.connect(self._pick_color)
                color_row.addWidget(self.theme_color_edit)
                color_row.addWidget(self.pick_color_button)
                form.addRow("Theme Color:", color_row)
                self.logo_width_spinbox = QSpinBox()
                self.logo_width_spinbox.setRange(1, 400)
                self.logo_width_spinbox.setSuffix(" px")
                form.addRow("Logo Width:", self.logo_width_spinbox)
            layout.addWidget(group)

        billing_group = QGroupBox("Billing")
        billing_form = QFormLayout(billing_group)
        self.next_invoice_spinbox = QSpinBox()
        self.next_invoice_spinbox.setRange(1, 999999999)
        self.enable_gst_checkbox = QCheckBox("Apply GST on bills")
        self.gstin_edit = QLineEdit()
        self.gst_rate_spinbox = QDoubleSpinBox()
        self.gst_rate_spinbox.setDecimals(2)
        self.gst_rate_spinbox.setRange(0, 100)
        self.gst_rate_spinbox.setSuffix(" %")
        billing_form.addRow("Next Bill No.:", self.next_invoice_spinbox)
        billing_form.addRow("", self.enable_gst_checkbox)
        billing_form.addRow("GSTIN:", self.gstin_edit)
        billing_form.addRow("GST Rate:", self.gst_rate_spinbox)
        layout.addWidget(billing_group)

        upi_group = QGroupBox("UPI")
        upi_form = QFormLayout(upi_group)
        self.upi_id_edit = QLineEdit()
        self.upi_id_edit.setPlaceholderText("name@bank")
        self.show_upi_qr_checkbox = QCheckBox("Print a payment QR code on bills")
        upi_form.addRow("UPI ID:", self.upi_id_edit)
        upi_form.addRow("", self.show_upi_qr_checkbox)
        layout.addWidget(upi_group)
        layout.addStretch()

        scroll.setWidget(content)
        outer_layout.addWidget(scroll)

        button_layout = QHBoxLayout()
        self.save_button = QPushButton("Save Settings")
        self.revert_button = QPushButton("Revert")
        self.save_button.clicked.connect(self._save_clicked)
        self.revert_button.clicked.connect(lambda: self._populate(self.settings_manager.load_settings()))
        button_layout.addStretch()
        button_layout.addWidget(self.revert_button)
        button_layout.addWidget(self.save_button)
        outer_layout.addLayout(button_layout)

        self.enable_gst_checkbox.toggled.connect(self._sync_gst_fields)
        self.setLayout(outer_layout)
        logger.info("SettingsUI initialized.")

    def _sync_gst_fields(self, enabled: bool):
        self.gstin_edit.setEnabled(enabled)
        self.gst_rate_spinbox.setEnabled(enabled)

    def _pick_color(self):
        color = QColorDialog.getColor(QColor(self.theme_color_edit.text() or "#dc2626"), self, "Theme Color")
        if color.isValid():
            self.theme_color_edit.setText(color.name())

    def _populate(self, settings: BusinessSettings):
        for field_name, edit in self._text_edits.items():
            edit.setText(getattr(settings, field_name))
        self.theme_color_edit.setText(settings.theme_color)
        self.logo_width_spinbox.setValue(settings.logo_width)
        self.next_invoice_spinbox.setValue(settings.next_invoice_number)
        self.enable_gst_checkbox.setChecked(settings.enable_gst)
        self.gstin_edit.setText(settings.gstin)
        self.gst_rate_spinbox.setValue(float(settings.default_gst_rate))
        self.upi_id_edit.setText(settings.upi_id)
        self.show_upi_qr_checkbox.setChecked(settings.show_upi_qr)
        self._sync_gst_fields(settings.enable_gst)

    def get_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: edit.text().strip() for name, edit in self._text_edits.items()}
        data.update({
            "theme_color": self.theme_color_edit.text().strip(),
            "logo_width": self.logo_width_spinbox.value(),
            "next_invoice_number": self.next_invoice_spinbox.value(),
            "enable_gst": self.enable_gst_checkbox.isChecked(),
            "gstin": self.gstin_edit.text().strip().upper(),
            "default_gst_rate": Decimal(f"{self.gst_rate_spinbox.value():.2f}"),
            "upi_id": self.upi_id_edit.text().strip(),
            "show_upi_qr": self.show_upi_qr_checkbox.isChecked(),
        })
        return data

    def _save_clicked(self):
        try:
            saved = self.settings_manager.update_settings(**self.get_data())
            QMessageBox.information(self, "Settings Saved", f"Settings saved (version {saved.version}).")
        except ValueError as ve:
            QMessageBox.warning(self, "Validation Error", str(ve))
        except Exception as e:
            logger.error(f"Error saving settings: {e}", exc_info=True)
            QMessageBox.critical(self, "Save Error", f"Could not save settings:\n{e}")

    def closeEvent(self, event):
        self._unsubscribe()
        super().closeEvent(event)
