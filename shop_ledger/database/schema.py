from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== LEDGER TABLES ======================== */
/* Every row is scoped by user_id; timestamps are ISO-8601 local time. */

/* -------- sales (immutable; insert/delete only) -------- */
CREATE TABLE IF NOT EXISTS sales (
    sale_id        TEXT    NOT NULL,
    user_id        INTEGER NOT NULL,
    item_name      TEXT    NOT NULL,
    category       TEXT    NOT NULL DEFAULT '',
    quantity       INTEGER NOT NULL CHECK (quantity > 0),
    unit_price     NUMERIC NOT NULL CHECK (CAST(unit_price AS REAL) >= 0),
    unit_cost      NUMERIC,
    date           TEXT    NOT NULL,
    is_on_credit   INTEGER NOT NULL DEFAULT 0 CHECK (is_on_credit IN (0,1)),
    paid_amount    NUMERIC,
    balance        NUMERIC,
    customer_name  TEXT,
    customer_phone TEXT,
    PRIMARY KEY (user_id, sale_id)
);
CREATE INDEX IF NOT EXISTS idx_sales_user_date ON sales(user_id, date);

/* -------- stock -------- */
/* quantity is signed on purpose: overselling is recorded, not blocked */
CREATE TABLE IF NOT EXISTS stock (
    item_id             TEXT    NOT NULL,
    user_id             INTEGER NOT NULL,
    name                TEXT    NOT NULL,
    quantity            INTEGER NOT NULL DEFAULT 0,
    cost_price          NUMERIC NOT NULL DEFAULT 0,
    selling_price       NUMERIC NOT NULL DEFAULT 0,
    low_stock_threshold INTEGER DEFAULT 5,
    last_updated        TEXT    NOT NULL,
    image_url           TEXT,
    cost_history        TEXT    NOT NULL DEFAULT '[]',
    PRIMARY KEY (user_id, item_id)
);
CREATE INDEX IF NOT EXISTS idx_stock_user_name ON stock(user_id, name);

/* -------- debts -------- */
CREATE TABLE IF NOT EXISTS debts (
    debt_id      TEXT    NOT NULL,
    user_id      INTEGER NOT NULL,
    debtor_name  TEXT    NOT NULL,
    phone_number TEXT    NOT NULL DEFAULT '',
    amount       NUMERIC NOT NULL CHECK (CAST(amount AS REAL) >= 0),
    description  TEXT    NOT NULL DEFAULT '',
    is_paid      INTEGER NOT NULL DEFAULT 0 CHECK (is_paid IN (0,1)),
    date         TEXT    NOT NULL,
    PRIMARY KEY (user_id, debt_id)
);

/* -------- expenses -------- */
CREATE TABLE IF NOT EXISTS expenses (
    expense_id  TEXT    NOT NULL,
    user_id     INTEGER NOT NULL,
    category    TEXT    NOT NULL,
    amount      NUMERIC NOT NULL CHECK (CAST(amount AS REAL) >= 0),
    description TEXT    NOT NULL DEFAULT '',
    date        TEXT    NOT NULL,
    frequency   TEXT    NOT NULL DEFAULT 'none',
    PRIMARY KEY (user_id, expense_id)
);

/* -------- per-user settings (key/value) -------- */
CREATE TABLE IF NOT EXISTS app_settings (
    user_id INTEGER NOT NULL,
    key     TEXT    NOT NULL,
    value   TEXT    NOT NULL,
    PRIMARY KEY (user_id, key)
);
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "ledger.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()
    _log.info("schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "ledger.db"
    init_schema(target)
