# gst_billing/main_app.py
import sys
import logging
from PyQt5.QtWidgets import QApplication, QMainWindow, QTabWidget, QMessageBox
from PyQt5.QtCore import QLocale

# --- Configuration ---
from gst_billing.config import DATABASE_PATH, configure_logging

# --- Data Access Layer (DAL) ---
from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.data_access.products_repository import ProductsRepository
from gst_billing.data_access.customers_repository import CustomersRepository
from gst_billing.data_access.invoice_items_repository import InvoiceItemsRepository
from gst_billing.data_access.invoices_repository import InvoicesRepository
from gst_billing.data_access.settings_repository import SettingsRepository

# --- Business Logic Layer (BLL) ---
from gst_billing.business_logic.product_manager import ProductManager
from gst_billing.business_logic.customer_manager import CustomerManager
from gst_billing.business_logic.settings_manager import SettingsManager
from gst_billing.business_logic.invoice_manager import InvoiceManager
from gst_billing.business_logic.analytics_manager import AnalyticsManager
from gst_billing.business_logic.cart_manager import CartManager

# --- Presentation Layer (UI Tabs) ---
from gst_billing.presentation.invoice_generator_ui import InvoiceGeneratorUI
from gst_billing.presentation.history_ui import HistoryUI
from gst_billing.presentation.products_ui import ProductsUI
from gst_billing.presentation.customers_ui import CustomersUI
from gst_billing.presentation.analytics_ui import AnalyticsUI
from gst_billing.presentation.settings_ui import SettingsUI

logger = logging.getLogger(__name__)

class MainWindow(QMainWindow):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("GST Billing")
        self.setGeometry(100, 100, 1300, 800)

        logger.info("Initializing Database Manager and creating tables...")
        self.db_manager = DatabaseManager(DATABASE_PATH)
        try:
            self.db_manager.create_tables()
            logger.info("Database tables checked/created successfully.")
        except Exception as e:
            logger.error(f"FATAL: Could not initialize database: {e}", exc_info=True)
            QMessageBox.critical(self, "Database Error", f"Could not create or open the database: {e}")
            sys.exit(1)

        logger.info("Initializing Repositories...")
        self.products_repo = ProductsRepository(self.db_manager)
        self.customers_repo = CustomersRepository(self.db_manager)
        self.invoice_items_repo = InvoiceItemsRepository(self.db_manager)
        self.invoices_repo = InvoicesRepository(self.db_manager, self.invoice_items_repo)
        self.settings_repo = SettingsRepository(self.db_manager)

        logger.info("Initializing Managers...")
        self.product_manager = ProductManager(self.products_repo)
        self.customer_manager = CustomerManager(self.customers_repo)
        self.settings_manager = SettingsManager(self.settings_repo)
        settings = self.settings_manager.load_settings()
        self.invoice_manager = InvoiceManager(
            invoices_repository=self.invoices_repo,
            settings_manager=self.settings_manager,
        )
        self.analytics_manager = AnalyticsManager(self.invoice_manager)
        self.cart_manager = CartManager(self.product_manager, settings)

        drift = self.invoice_manager.detect_sequence_drift()
        if drift is not None:
            logger.warning(f"Bill counter is behind the saved bills; next should be {drift}.")

        logger.info("Setting up UI...")
        self._setup_ui()
        logger.info("MainWindow initialized and UI setup complete.")

    def _setup_ui(self):
        self.tabs = QTabWidget()

        self.billing_tab = InvoiceGeneratorUI(
            cart_manager=self.cart_manager,
            product_manager=self.product_manager,
            customer_manager=self.customer_manager,
            invoice_manager=self.invoice_manager,
            settings_manager=self.settings_manager,
            parent=self
        )
        self.tabs.addTab(self.billing_tab, "New Bill")

        self.history_tab = HistoryUI(
            invoice_manager=self.invoice_manager,
            settings_provider=lambda: self.settings_manager.current,
            parent=self
        )
        self.tabs.addTab(self.history_tab, "History")

        self.products_tab = ProductsUI(self.product_manager, self)
        self.tabs.addTab(self.products_tab, "Products")

        self.customers_tab = CustomersUI(self.customer_manager, self)
        self.tabs.addTab(self.customers_tab, "Customers")

        self.analytics_tab = AnalyticsUI(self.analytics_manager, self)
        self.tabs.addTab(self.analytics_tab, "Dashboard")

        self.settings_tab = SettingsUI(self.settings_manager, self)
        self.tabs.addTab(self.settings_tab, "Settings")

        self.products_tab.products_changed.connect(self.billing_tab.load_products)
        self.customers_tab.customers_changed.connect(self.billing_tab.load_customers)
        self.billing_tab.invoice_saved.connect(lambda _bill_no: self.history_tab.load_invoices_data())
        self.billing_tab.invoice_saved.connect(lambda _bill_no: self.analytics_tab.load_stats())
        self.tabs.currentChanged.connect(self._tab_changed)

        self.setCentralWidget(self.tabs)

    def _tab_changed(self, index: int):
        widget = self.tabs.widget(index)
        if widget is self.history_tab:
            self.history_tab.load_invoices_data()
        elif widget is self.analytics_tab:
            self.analytics_tab.load_stats()

    def closeEvent(self, event):
        if self.cart_manager.has_unsaved_changes:
            reply = QMessageBox.question(self, "Unsaved Bill",
                                         "The current bill has not been saved. Quit anyway?",
                                         QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                         QMessageBox.StandardButton.No)
            if reply != QMessageBox.StandardButton.Yes:
                event.ignore()
                return
        logger.info("Main window closing.")
        event.accept()

def main():
    configure_logging()
    logger.info("Application starting...")
    app = QApplication(sys.argv)
    english_locale = QLocale(QLocale.Language.English, QLocale.Country.India)
    QLocale.setDefault(english_locale)
    logger.info(f"Application default locale set to: {QLocale().name()}")

    main_window = MainWindow()
    main_window.show()
    logger.info("Application started successfully. Main window shown.")
    sys.exit(app.exec_())

if __name__ == '__main__':
    main()
