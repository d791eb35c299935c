# gst_billing/presentation/analytics_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QMessageBox,
                             QGroupBox, QGridLayout, QTableWidget, QTableWidgetItem, QTextEdit,
                             QApplication, QHeaderView, QAbstractItemView)
from PyQt5.QtCore import Qt
from html import escape
from typing import List, Tuple

from gst_billing.business_logic.analytics_manager import (
    AnalyticsManager, SalesStats, BusinessInsight, parse_insight_response
)
from gst_billing.config import CURRENCY_SYMBOL
from gst_billing.utils.money import format_amount

import logging
logger = logging.getLogger(__name__)


def _fill_table(table: QTableWidget, rows: List[Tuple[str, str]]):
    table.setRowCount(len(rows))
    for row_index, (label, value) in enumerate(rows):
        table.setItem(row_index, 0, QTableWidgetItem(label))
        value_item = QTableWidgetItem(value)
        value_item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        table.setItem(row_index, 1, value_item)


class AnalyticsUI(QWidget):
    """Sales summary plus the copy-out / paste-back loop for a written business insight."""

    def __init__(self, analytics_manager: AnalyticsManager, parent=None):
        super().__init__(parent)
        self.analytics_manager = analytics_manager
        self._init_ui()
        self.load_stats()

    def _make_table(self, headers: List[str]) -> QTableWidget:
        table = QTableWidget(0, len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        table.verticalHeader().setVisible(False)
        table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        return table

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        cards = QGroupBox("Overview")
        cards_layout = QGridLayout(cards)
        self.revenue_label = QLabel()
        self.bill_count_label = QLabel()
        self.average_label = QLabel()
        self.top_product_label = QLabel()
        for column, (title, value_label) in enumerate([
                ("Total Revenue", self.revenue_label),
                ("Total Bills", self.bill_count_label),
                ("Avg. Bill Value", self.average_label),
                ("Top Product", self.top_product_label)]):
            value_label.setStyleSheet("font-size: 14pt; font-weight: bold;")
            cards_layout.addWidget(QLabel(title), 0, column)
            cards_layout.addWidget(value_label, 1, column)
        main_layout.addWidget(cards)

        tables_layout = QHBoxLayout()
        daily_group = QGroupBox("Daily Revenue (last active days)")
        daily_layout = QVBoxLayout(daily_group)
        self.daily_table = self._make_table(["Date", "Revenue"])
        daily_layout.addWidget(self.daily_table)
        top_group = QGroupBox("Top Products")
        top_layout = QVBoxLayout(top_group)
        self.top_table = self._make_table(["Product", "Revenue"])
        top_layout.addWidget(self.top_table)
        tables_layout.addWidget(daily_group)
        tables_layout.addWidget(top_group)
        main_layout.addLayout(tables_layout)

        insight_group = QGroupBox("Business Insight")
        insight_layout = QVBoxLayout(insight_group)
        insight_buttons = QHBoxLayout()
        self.copy_prompt_button = QPushButton("Copy Insight Request")
        self.parse_response_button = QPushButton("Read Pasted Response")
        insight_buttons.addWidget(self.copy_prompt_button)
        insight_buttons.addWidget(self.parse_response_button)
        insight_buttons.addStretch()
        insight_layout.addLayout(insight_buttons)
        self.response_edit = QTextEdit()
        self.response_edit.setPlaceholderText("Paste the JSON answer here...")
        self.response_edit.setMaximumHeight(120)
        insight_layout.addWidget(self.response_edit)
        self.insight_view = QTextEdit()
        self.insight_view.setReadOnly(True)
        insight_layout.addWidget(self.insight_view)
        main_layout.addWidget(insight_group)

        refresh_layout = QHBoxLayout()
        refresh_layout.addStretch()
        self.refresh_button = QPushButton("Refresh")
        refresh_layout.addWidget(self.refresh_button)
        main_layout.addLayout(refresh_layout)

        self.copy_prompt_button.clicked.connect(self._copy_prompt)
        self.parse_response_button.clicked.connect(self._parse_response)
        self.refresh_button.clicked.connect(self.load_stats)
        self.setLayout(main_layout)
        logger.info("AnalyticsUI initialized.")

    def load_stats(self):
        try:
            stats = self.analytics_manager.get_sales_stats()
        except Exception as e:
            logger.error(f"Error computing sales stats: {e}", exc_info=True)
            QMessageBox.critical(self, "Analytics Error", f"Could not compute sales figures: {e}")
            return
        self._show_stats(stats)

    def _show_stats(self, stats: SalesStats):
        self.revenue_label.setText(f"{CURRENCY_SYMBOL}{format_amount(stats.total_revenue)}")
        self.bill_count_label.setText(str(stats.bill_count))
        self.average_label.setText(f"{CURRENCY_SYMBOL}{format_amount(stats.average_bill_value)}")
        self.top_product_label.setText(stats.top_product_name)
        _fill_table(self.daily_table, [(p.date_text, format_amount(p.revenue)) for p in stats.daily_revenue])
        _fill_table(self.top_table, [(p.name, format_amount(p.value)) for p in stats.top_products])

    def _copy_prompt(self):
        try:
            prompt = self.analytics_manager.get_insight_prompt()
        except ValueError as ve:
            QMessageBox.warning(self, "Business Insight", str(ve))
            return
        except Exception as e:
            logger.error(f"Error building insight request: {e}", exc_info=True)
            QMessageBox.critical(self, "Business Insight", str(e))
            return
        clipboard = QApplication.clipboard()
        if clipboard:
            clipboard.setText(prompt)
            QMessageBox.information(self, "Copied", "Insight request copied to the clipboard.")

    def _parse_response(self):
        try:
            insight = parse_insight_response(self.response_edit.toPlainText())
        except ValueError as ve:
            QMessageBox.warning(self, "Business Insight", str(ve))
            return
        self._show_insight(insight)

    def _show_insight(self, insight: BusinessInsight):
        tips = "".join(f"<li>{escape(tip)}</li>" for tip in insight.actionable_tips)
        self.insight_view.setHtml(
            f"<h4>Business Health</h4><p>{escape(insight.business_health)}</p>"
            f"<h4>Top Product</h4><p>{escape(insight.top_performing_product_insight)}</p>"
            f"<h4>Customers</h4><p>{escape(insight.customer_behavior_insight)}</p>"
            f"<h4>Tips</h4><ul>{tips}</ul>"
        )
