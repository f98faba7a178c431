# shop_ledger/constants.py
APP_NAME = "Shop Ledger"

DATA_DIR = "data"
DB_FILE_NAME = "ledger.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1"

# ---- settings defaults ----
DEFAULT_MANAGER_PIN = "1234"
DEFAULT_CURRENCY = "$"
DEFAULT_REMINDER_TIME = "18:00"
DEFAULT_BUSINESS_NAME = "Our Business"

# ---- alerting ----
DEFAULT_LOW_STOCK_THRESHOLD = 5
DUE_SOON_DAYS = 3

# ---- timers (milliseconds) ----
REMINDER_POLL_MS = 30_000
ALERT_REFRESH_MS = 60_000

REMINDER_MESSAGE = "Time to record your business records for today!"
