# tests/test_main.py

from shop_ledger.database import get_connection
from shop_ledger.database.store import SqliteLedgerStore
from shop_ledger.main import describe, main
from shop_ledger.modules.ledger.alerts import LedgerAlerts
from shop_ledger.modules.ledger.models import DebtRecord

from conftest import NOW, make_stock


def test_describe():
    assert describe(LedgerAlerts()) == "no warnings"
    alerts = LedgerAlerts(
        low_stock=(make_stock(quantity=1),),
        unpaid_debts=(DebtRecord(debtor_name="Jane", phone_number="", amount=1, description="", date=NOW),) * 2,
    )
    assert describe(alerts) == "1 Low Stock, 2 Unpaid Debts"


def test_once_loads_and_exits(qapp, tmp_path, caplog):
    db = tmp_path / "data" / "ledger.db"
    conn = get_connection(db)
    store = SqliteLedgerStore(conn, user_id=7)
    with store.transaction():
        store.stock.create(make_stock("Widget", quantity=2))
    conn.close()

    caplog.set_level("INFO")
    assert main(["--db", str(db), "--user", "7", "--once"]) == 0
    assert "1 Low Stock" in caplog.text


def test_once_on_an_empty_database(qapp, tmp_path):
    assert main(["--db", str(tmp_path / "fresh.db"), "--once"]) == 0
    assert (tmp_path / "fresh.db").exists()


def test_unreadable_database_exits_with_an_error(qapp, tmp_path, caplog):
    db = tmp_path / "ledger.db"
    db.write_bytes(b"this is not a database " * 200)
    assert main(["--db", str(db), "--once"]) == 1
    assert "cannot open database" in caplog.text
