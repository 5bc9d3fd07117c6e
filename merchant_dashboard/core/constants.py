from pathlib import Path


APP_DIR = Path(__file__).resolve().parents[1]

TEMPLATES_DIR = APP_DIR / "templates"
STATIC_DIR = APP_DIR / "static"

DEFAULT_DASHBOARD_PATH = "/inventory"

DEFAULT_LOW_STOCK_THRESHOLD = 10

# Ordered from most to least urgent.
STOCK_STATUSES = ("out_of_stock", "low_stock", "in_stock")

TRANSACTION_DATE_RANGES = ("all", "today", "week", "month")

MAIN_BRANCH_LABEL = "Main Branch"
MAIN_BRANCH_FILTER = "main"

MAIN_BRANCH_ERROR_MARKER = "main branch"
MISSING_TABLE_MARKERS = ("does not exist", "no such table", "relation")
