# gst_billing/config.py

import os
import logging.config

# --- Database Configuration ---
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__))) # gst_billing/ -> project root
DATA_DIR = os.environ.get("GST_BILLING_DATA_DIR", os.path.join(BASE_DIR, "data"))
DB_NAME = "billing_data.db"
DATABASE_PATH = os.path.join(DATA_DIR, DB_NAME)

os.makedirs(DATA_DIR, exist_ok=True)

# --- Logging Configuration ---
LOGS_DIR = os.environ.get("GST_BILLING_LOGS_DIR", os.path.join(BASE_DIR, "logs"))
LOG_FILE_PATH = os.path.join(LOGS_DIR, "gst_billing.log")

LOG_LEVEL = os.environ.get("GST_BILLING_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': LOG_FORMAT,
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'standard',
            'filename': LOG_FILE_PATH,
            'maxBytes': 5 * 1024 * 1024,
            'backupCount': 5,
            'encoding': 'utf-8',
        },
    },
    'loggers': {
        'gst_billing': {'level': LOG_LEVEL},
        # PDF layout chatter
        'weasyprint': {'level': 'WARNING'},
        'fontTools': {'level': 'WARNING'},
    },
    'root': {
        'handlers': ['console', 'file'],
        'level': 'WARNING',
    },
}


def configure_logging() -> None:
    """Applies LOGGING_CONFIG. Called once by the application entry point."""
    os.makedirs(LOGS_DIR, exist_ok=True)
    logging.config.dictConfig(LOGGING_CONFIG)


# --- Currency ---
DEFAULT_CURRENCY = "INR"
CURRENCY_SYMBOL = "₹"
