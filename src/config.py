"""Centralized configuration for MilkBook.

This module contains the display formats, business names and statement
defaults used across the application. Values that users may change at
runtime are stored in the settings table and fall back to these defaults.
"""

# =============================================================================
# BUSINESS
# =============================================================================

# Printed at the top of every statement
ORGANIZATION_NAME = "Jay Goga Milk Supplier"

STATEMENT_TITLE = "Account Statement"

# Label used when no single customer is selected
ALL_CUSTOMERS_LABEL = "All Customers"

# =============================================================================
# CURRENCY
# =============================================================================

CURRENCY_SYMBOL = "\u20b9"

# Used in PDFs when no font with the rupee glyph can be registered
CURRENCY_SYMBOL_FALLBACK = "Rs."

# Shown in table/PDF cells for a zero billed or paid amount
AMOUNT_PLACEHOLDER = "-"

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Date format for storage (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# On-screen table and statement header (e.g. "Jan 05, 2024")
DATE_FORMAT_DISPLAY = "%b %d, %Y"

# PDF table rows (e.g. "05/01/2024")
DATE_FORMAT_DOCUMENT = "%d/%m/%Y"

# =============================================================================
# STATEMENT FILTERS
# =============================================================================

# Day the calendar week starts on, 0 = Monday ... 6 = Sunday
DEFAULT_WEEK_START = 6

# Quick period selected when the statements page opens
DEFAULT_PERIOD = "month"

QUICK_PERIODS = ("today", "week", "month")

CUSTOM_PERIOD = "custom"

# =============================================================================
# ORDERS
# =============================================================================

ORDER_STATUSES = ("pending", "delivered")

DEFAULT_ORDER_STATUS = "pending"

# =============================================================================
# EXPORTS
# =============================================================================

EXPORT_FILE_PREFIX = "account-statement"

# PDF table header fill (sky blue)
PDF_HEADER_COLOR = "#0EA5E9"

PDF_MARGIN_MM = 15

# Candidate Unicode fonts for the PDF as (regular, bold) pairs, first existing
# regular file wins. A missing bold file falls back to the regular face.
PDF_FONT_CANDIDATES = (
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/dejavu/DejaVuSans.ttf", "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
    ("C:\\Windows\\Fonts\\Nirmala.ttf", "C:\\Windows\\Fonts\\NirmalaB.ttf"),
    ("/Library/Fonts/Arial Unicode.ttf", None),
)

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
