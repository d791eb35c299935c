# gst_billing/presentation/custom_widgets.py

from PyQt5.QtWidgets import QWidget, QLineEdit, QPushButton, QHBoxLayout, QCalendarWidget, QDialog, QVBoxLayout
from PyQt5.QtCore import Qt, pyqtSignal
from datetime import date
from typing import Optional
import logging

from gst_billing.utils import date_converter

logger = logging.getLogger(__name__)

class BillCalendarDialog(QDialog):
    """A small modal calendar; emits the picked day as a standard date."""
    dateSelected = pyqtSignal(date)

    def __init__(self, initial_date: Optional[date] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Select Date")
        self.setModal(True)
        self.setLayout(QVBoxLayout())
        self.setMinimumSize(350, 300)

        self.calendar = QCalendarWidget(self)
        self.calendar.setGridVisible(True)
        self.calendar.setSelectedDate(date_converter.to_qdate(initial_date))
        self.layout().addWidget(self.calendar)

        self.calendar.activated.connect(self._day_chosen)
        self.calendar.clicked.connect(self._day_chosen)

    def _day_chosen(self, q_date):
        self.dateSelected.emit(date_converter.from_qdate(q_date))
        self.accept()

class BillDateEdit(QWidget):
    """
    Read-only DD/MM/YYYY field with a calendar button. Can be empty when
    allow_empty is set, e.g. for open-ended history filters.
    """
    dateChanged = pyqtSignal(object)

    def __init__(self, parent=None, allow_empty: bool = False):
        super().__init__(parent)
        self._date: Optional[date] = None
        self._allow_empty = allow_empty

        self.main_layout = QHBoxLayout(self)
        self.main_layout.setContentsMargins(0, 0, 0, 0)

        self.line_edit = QLineEdit(self)
        self.line_edit.setReadOnly(True)
        self.line_edit.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.line_edit.setPlaceholderText("DD/MM/YYYY")

        self.calendar_button = QPushButton("📅", self)
        self.calendar_button.setFixedWidth(40)

        self.main_layout.addWidget(self.line_edit)
        self.main_layout.addWidget(self.calendar_button)

        self.calendar_button.clicked.connect(self.open_calendar)

        if allow_empty:
            self.clear_button = QPushButton("✕", self)
            self.clear_button.setFixedWidth(30)
            self.clear_button.clicked.connect(lambda: self.setDate(None))
            self.main_layout.addWidget(self.clear_button)
            self.setDate(None)
        else:
            self.setDate(date.today())

    def open_calendar(self):
        dialog = BillCalendarDialog(initial_date=self._date, parent=self)
        dialog.dateSelected.connect(self.setDate)
        dialog.exec_()

    def setDate(self, value: Optional[date]):
        if value is None:
            if not self._allow_empty:
                return
            self._date = None
            self.line_edit.setText("")
            self.dateChanged.emit(None)
            return
        if not isinstance(value, date):
            logger.warning(f"BillDateEdit.setDate ignored non-date value {value!r}.")
            return
        self._date = value
        self.line_edit.setText(date_converter.to_bill_date_str(value))
        self.dateChanged.emit(value)

    def date(self) -> Optional[date]:
        return self._date

    def text(self) -> str:
        return self.line_edit.text()
