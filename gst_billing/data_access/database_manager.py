# gst_billing/data_access/database_manager.py

import sqlite3
import logging
from typing import Iterable, Tuple, Any, Optional, Sequence
from gst_billing.config import DATABASE_PATH

logger = logging.getLogger(__name__)

Params = Optional[Sequence[Any]]

# Money and quantities are TEXT so Decimal values come back exactly.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    rate TEXT NOT NULL DEFAULT '0',
    unit TEXT NOT NULL DEFAULT 'Pcs',
    packing TEXT
);

CREATE TABLE IF NOT EXISTS customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    city TEXT NOT NULL DEFAULT '',
    phone TEXT
);

CREATE TABLE IF NOT EXISTS invoices (
    id TEXT PRIMARY KEY, -- Bill No
    invoice_date TEXT NOT NULL, -- DD/MM/YYYY as printed
    customer_name TEXT NOT NULL,
    customer_city TEXT NOT NULL DEFAULT '',
    gst_enabled INTEGER NOT NULL DEFAULT 0,
    gst_rate TEXT NOT NULL DEFAULT '0',
    subtotal TEXT NOT NULL,
    cgst_amount TEXT NOT NULL DEFAULT '0',
    sgst_amount TEXT NOT NULL DEFAULT '0',
    total TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS invoice_items (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    invoice_id TEXT NOT NULL,
    line_no INTEGER NOT NULL,
    line_id TEXT NOT NULL,
    product_id INTEGER, -- catalog id at the time of billing, no FK
    name TEXT NOT NULL,
    unit TEXT NOT NULL,
    rate TEXT NOT NULL,
    quantity TEXT NOT NULL,
    packing TEXT,
    amount TEXT NOT NULL,
    FOREIGN KEY (invoice_id) REFERENCES invoices(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_invoice_items_invoice ON invoice_items (invoice_id, line_no);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""


class DatabaseManager:
    """
    Opens a fresh sqlite3 connection for every call. Used as a context
    manager it yields that connection with rows addressable by column name
    and foreign keys enforced.
    """

    def __init__(self, db_path=DATABASE_PATH, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout
        self.conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            logger.error(f"Could not open database {self.db_path}: {e}")
            raise
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        self.conn = conn
        return conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def execute_query(self, query: str, params: Params = None) -> sqlite3.Cursor:
        """Runs one write statement and commits it. The returned cursor still reports lastrowid/rowcount."""
        with self as conn:
            try:
                cursor = conn.execute(query, tuple(params or ()))
                conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Statement failed: {query.strip()} params={params} - {e}")
                raise
        return cursor

    def execute_in_transaction(self, statements: Iterable[Tuple[str, Params]]) -> None:
        """Runs several statements on one connection and commits them together, or none of them."""
        with self as conn:
            try:
                for query, params in statements:
                    conn.execute(query, tuple(params or ()))
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Transaction rolled back: {e}")
                raise

    def _fetch(self, query: str, params: Params, single: bool):
        with self as conn:
            try:
                cursor = conn.execute(query, tuple(params or ()))
                return cursor.fetchone() if single else cursor.fetchall()
            except sqlite3.Error as e:
                logger.error(f"Query failed: {query.strip()} params={params} - {e}")
                raise

    def fetch_one(self, query: str, params: Params = None) -> Optional[sqlite3.Row]:
        return self._fetch(query, params, single=True)

    def fetch_all(self, query: str, params: Params = None):
        return self._fetch(query, params, single=False)

    def create_tables(self):
        with self as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        logger.info(f"Database schema checked/created at {self.db_path}.")
