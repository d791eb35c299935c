# gst_billing/constants.py

from enum import Enum

# General
DATE_FORMAT = "%d/%m/%Y"          # day-first, the format stamped on every bill
ISO_DATE_FORMAT = "%Y-%m-%d"

class CartState(Enum):
    EDITABLE = "editable"
    SAVING = "saving"
    LOCKED = "locked"

class TaxComponent(Enum):
    CGST = "CGST"
    SGST = "SGST"

# --- Amount in words ---
AMOUNT_IN_WORDS_ZERO = "Zero"
AMOUNT_IN_WORDS_SUFFIX = "Only"
AMOUNT_IN_WORDS_OVERFLOW = "Overflow"
AMOUNT_IN_WORDS_MAX_DIGITS = 9

# --- Catalog ---
PRODUCT_UNITS = ["Kg", "Gm", "Pkt", "Ltr", "Pcs"]
DEFAULT_PRODUCT_UNIT = "Kg"

# --- Packing / weight aggregation ---
PACKING_PATTERN = r"^(\d+(\.\d+)?)\s*(kg|gm|g|ltr|ml|l)"
THOUSAND_BASE_UNITS = ("kg", "ltr", "l")
WEIGHT_SENTINEL = "-"
# Units already expressed by the packing column; the quantity cell drops them.
MEASURE_UNITS = ("Kg", "Gm", "G", "Ltr", "Ml", "L")

# --- Document renderer ---
A4_WIDTH_PX = 794
A4_HEIGHT_PX = 1123
MIN_ROWS_WITH_TAX = 8
MIN_ROWS_WITHOUT_TAX = 10
DEFAULT_THEME_COLOR = "#dc2626"
DEFAULT_LOGO_WIDTH = 80
INVOICE_DECLARATION = (
    "We declare that this invoice shows the actual price of the goods described "
    "and that all particulars are true and correct."
)

# --- History / CSV export ---
CSV_HEADERS = ["Bill No", "Date", "Customer Name", "City", "Items", "Total Amount"]

# --- Analytics ---
ANALYTICS_DAILY_WINDOW = 10
ANALYTICS_TOP_PRODUCTS = 5
ANALYTICS_NO_PRODUCT = "N/A"
INSIGHT_RESPONSE_FIELDS = (
    "business_health",
    "top_performing_product_insight",
    "customer_behavior_insight",
    "actionable_tips",
)

# --- Settings ---
SETTINGS_KEY_GENERAL = "general"
